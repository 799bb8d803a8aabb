import typing as t
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from django.test.client import Client
from django.utils import timezone

from accounts.models import User
from conftest import client_for
from events.service.payment_provider import PaymentIntent


@pytest.fixture
def superuser_client(superuser: User) -> Client:
    """API client for a superuser."""
    return client_for(superuser)


@pytest.fixture
def other_client(other_user: User) -> Client:
    return client_for(other_user)


@pytest.fixture
def day0() -> datetime:
    """Start of the pricing plan, so that the real clock falls inside Preventa.

    API tests run on the real clock: access tokens are minted against it.
    """
    return timezone.now().replace(microsecond=0) - timedelta(days=5)


@pytest.fixture
def provider() -> t.Iterator[MagicMock]:
    """Payment provider that always hands out the same checkout session."""
    provider = MagicMock()
    provider.create_payment_intent.return_value = PaymentIntent(
        reference="cs_test_api", redirect_url="https://checkout.stripe.test/cs_test_api"
    )
    with patch("events.service.order_service.get_payment_provider", return_value=provider):
        yield provider
