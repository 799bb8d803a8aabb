"""Schema for accounts module."""

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field

from .models import User


class UserSchema(ModelSchema):
    id: UUID4
    display_name: str

    class Meta:
        model = User
        fields = ["email", "first_name", "last_name", "role", "phone"]


class MinimalUserSchema(ModelSchema):
    display_name: str

    class Meta:
        model = User
        fields = ["first_name", "last_name", "email"]


class PersonalCodeSchema(Schema):
    personal_qr_code: str


class RegisterUserSchema(Schema):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field("", max_length=150)
    last_name: str = Field("", max_length=150)
    dni: str = Field("", max_length=12)
    phone: str | None = Field(None, max_length=20)
