"""This module contains the controllers for the authentication app."""

import typing as t

from ninja_extra import api_controller, route, status
from ninja_jwt.controller import TokenObtainPairController
from ninja_jwt.schema import TokenObtainPairInputSchema, TokenObtainPairOutputSchema

from accounts import schema
from accounts.models import User
from accounts.service import account as account_service
from common.schema import ValidationErrorResponse
from common.throttling import AuthThrottle


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(TokenObtainPairController):
    @route.post("/token/pair", response=TokenObtainPairOutputSchema, url_name="token_obtain_pair")
    def obtain_token(self, user_token: TokenObtainPairInputSchema) -> TokenObtainPairOutputSchema:
        """Authenticate with email and password to obtain JWT access/refresh tokens."""
        return t.cast(TokenObtainPairOutputSchema, user_token.to_response_schema())  # type: ignore[no-untyped-call]

    @route.post(
        "/register",
        response={status.HTTP_201_CREATED: schema.UserSchema, 400: ValidationErrorResponse},
        url_name="register",
    )
    def register(self, payload: schema.RegisterUserSchema) -> tuple[int, User]:
        """Create a customer account. Log in afterwards with POST /auth/token/pair."""
        user = account_service.register_user(**payload.model_dump())
        return status.HTTP_201_CREATED, user
