"""Controllers for the authenticated user's account."""

from django.http import HttpResponse
from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from accounts.models import User
from accounts.schema import PersonalCodeSchema, UserSchema
from accounts.service import account as account_service
from common.controllers import UserAwareController
from common.throttling import UserDefaultThrottle, WriteThrottle
from events.utils import render_qr_png


@api_controller("/account", tags=["Account"], auth=JWTAuth(), throttle=UserDefaultThrottle())
class AccountController(UserAwareController):
    @route.get("/me", response=UserSchema, url_name="me")
    def me(self) -> User:
        """Retrieve the authenticated user's profile."""
        return self.user()

    @route.get("/me/personal-code", response=PersonalCodeSchema, url_name="personal_code")
    def personal_code(self) -> PersonalCodeSchema:
        """Return the standing code other users scan to transfer tickets to you."""
        return PersonalCodeSchema(personal_qr_code=self.user().personal_qr_code)

    @route.get("/me/personal-qr", url_name="personal_qr", response={200: None})
    def personal_qr(self) -> HttpResponse:
        """Render the personal code as a PNG QR image."""
        png = render_qr_png(self.user().personal_qr_code)
        return HttpResponse(png, content_type="image/png")

    @route.post(
        "/me/personal-code/rotate",
        response=PersonalCodeSchema,
        url_name="rotate_personal_code",
        throttle=WriteThrottle(),
    )
    def rotate_personal_code(self) -> PersonalCodeSchema:
        """Issue a new personal code. Previously shared codes stop working."""
        user = account_service.rotate_personal_qr_code(self.user())
        return PersonalCodeSchema(personal_qr_code=user.personal_qr_code)
