from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from ninja_extra import api_controller, route, status
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import ReferralClickThrottle, WriteThrottle
from events import models, schema
from events.controllers.permissions import IsVendor
from events.service import referral_service
from events.service.referral_service import ReferralStats


@api_controller("/referrals", auth=JWTAuth(), permissions=[IsVendor()], tags=["Referrals"])
class VendorReferralController(UserAwareController):
    """Referral links of a vendor, one per event."""

    def get_queryset(self) -> QuerySet[models.Referral]:
        return models.Referral.objects.filter(vendor=self.user()).select_related("event")

    @route.get("/", url_name="list_referrals", response=list[schema.ReferralSchema])
    def list_referrals(self) -> QuerySet[models.Referral]:
        return self.get_queryset()

    @route.get("/dashboard", url_name="referral_dashboard", response=list[schema.ReferralStatsSchema])
    def dashboard(self) -> list[ReferralStats]:
        """Clicks, conversions, tickets sold, revenue and your commission per referral."""
        return referral_service.vendor_dashboard(self.user())

    @route.post(
        "/",
        url_name="create_referral",
        response={status.HTTP_201_CREATED: schema.ReferralSchema, 400: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def create_referral(self, payload: schema.ReferralCreateSchema) -> tuple[int, models.Referral]:
        """Create your referral code for a public event. Codes are unique and case-insensitive."""
        event = get_object_or_404(models.Event.objects.public(), pk=payload.event_id)
        return status.HTTP_201_CREATED, referral_service.create_referral(self.user(), event, payload.code)

    @route.patch(
        "/{uuid:referral_id}",
        url_name="rename_referral",
        response={200: schema.ReferralSchema, 400: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def rename_referral(self, referral_id: UUID, payload: schema.ReferralRenameSchema) -> models.Referral:
        """Change the code. Links with the old code stop being attributed."""
        referral = self.get_object_or_exception(self.get_queryset(), pk=referral_id)
        return referral_service.rename_referral(referral, payload.code)


@api_controller("/r", auth=None, tags=["Referrals"], throttle=ReferralClickThrottle())
class ReferralClickController(UserAwareController):
    @route.post("/{code}", url_name="referral_click", response={200: schema.ReferralClickSchema, 404: ErrorResponse})
    def track_click(self, code: str) -> tuple[int, schema.ReferralClickSchema | ErrorResponse]:
        """Count a visit through a referral link and return the event it points to.

        Pass the same code as `referral_code` at checkout to attribute the order.
        """
        referral = referral_service.track_click(code)
        if referral is None:
            return 404, ErrorResponse(detail="Unknown referral code.", reason="INVALID_CODE")
        return 200, schema.ReferralClickSchema(event_id=referral.event_id)
