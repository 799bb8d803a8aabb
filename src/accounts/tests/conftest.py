import pytest

from accounts import schema


@pytest.fixture
def valid_register_payload() -> schema.RegisterUserSchema:
    """Provides a valid payload for the user registration endpoint."""
    return schema.RegisterUserSchema(
        email="NewUser@Example.com",
        password="a-Strong-password-123!",
        first_name="Nueva",
        last_name="Usuaria",
        dni="30.123.456",
    )
