"""
Project-wide fixtures: users, an event with a two-tier pricing plan, API clients.
"""

import secrets
import string
import typing as t
from datetime import datetime, timedelta
from decimal import Decimal

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from django.utils import timezone
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import User
from events.models import Event, TicketType, Tier, TierAllocation


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits of the throttles to allow testing."""
    for name in ("AuthThrottle", "CheckoutThrottle", "ReferralClickThrottle", "WriteThrottle"):
        monkeypatch.setattr(f"common.throttling.{name}.rate", "1000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> t.Iterator[None]:
    """Throttle counters and cached QR images live in the cache."""
    cache.clear()
    yield
    cache.clear()


class UserFactory:
    """Factory for creating User instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> User:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@example.com"
        )
        email = kwargs.pop("email", username if "@" in username else f"{username}@test.com")
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> User:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> UserFactory:
    return UserFactory()


@pytest.fixture
def user(user_factory: UserFactory) -> User:
    """A customer."""
    return user_factory()


@pytest.fixture
def other_user(user_factory: UserFactory) -> User:
    return user_factory()


@pytest.fixture
def organizer(user_factory: UserFactory) -> User:
    return user_factory(role=User.Role.ORGANIZER)


@pytest.fixture
def vendor(user_factory: UserFactory) -> User:
    return user_factory(role=User.Role.VENDOR, commission_percent=Decimal("10"))


@pytest.fixture
def gatekeeper(user_factory: UserFactory) -> User:
    return user_factory(role=User.Role.GATEKEEPER)


@pytest.fixture
def superuser(user_factory: UserFactory) -> User:
    """A superuser."""
    return user_factory(is_superuser=True, is_staff=True)


def client_for(user: User) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {str(refresh.access_token)}")  # type: ignore[attr-defined]


@pytest.fixture
def user_client(user: User) -> Client:
    return client_for(user)


@pytest.fixture
def organizer_client(organizer: User) -> Client:
    return client_for(organizer)


@pytest.fixture
def vendor_client(vendor: User) -> Client:
    return client_for(vendor)


@pytest.fixture
def gatekeeper_client(gatekeeper: User) -> Client:
    return client_for(gatekeeper)


@pytest.fixture
def day0() -> datetime:
    """Start of the pricing plan; a Monday at noon."""
    now = timezone.now().replace(hour=12, minute=0, second=0, microsecond=0)
    return now - timedelta(days=now.weekday())


@pytest.fixture
def event(organizer: User, day0: datetime, gatekeeper: User) -> Event:
    event = Event.objects.create(
        organizer=organizer,
        title="Noche de Tango",
        description="Milonga en vivo",
        starts_at=day0 + timedelta(days=60),
        venue="Club Atletico",
        city="Buenos Aires",
        category=Event.Category.MUSIC,
    )
    event.gatekeepers.add(gatekeeper)
    return event


@pytest.fixture
def general(event: Event) -> TicketType:
    return TicketType.objects.create(event=event, name="General", total_quantity=80)


@pytest.fixture
def tier_a(event: Event, day0: datetime) -> Tier:
    """Preventa: [day0, day10)."""
    return Tier.objects.create(
        event=event, name="Preventa", starts_at=day0, ends_at=day0 + timedelta(days=10), display_order=0
    )


@pytest.fixture
def tier_b(event: Event, day0: datetime) -> Tier:
    """Tanda 1: [day10, day20)."""
    return Tier.objects.create(
        event=event,
        name="Tanda 1",
        starts_at=day0 + timedelta(days=10),
        ends_at=day0 + timedelta(days=20),
        display_order=1,
    )


@pytest.fixture
def allocation_a(tier_a: Tier, general: TicketType) -> TierAllocation:
    return TierAllocation.objects.create(tier=tier_a, ticket_type=general, price=Decimal("100.00"), quantity=50)


@pytest.fixture
def allocation_b(tier_b: Tier, general: TicketType) -> TierAllocation:
    return TierAllocation.objects.create(tier=tier_b, ticket_type=general, price=Decimal("150.00"), quantity=30)


@pytest.fixture
def priced_event(event: Event, allocation_a: TierAllocation, allocation_b: TierAllocation) -> Event:
    """Event whose General type is split 50 / 30 across Preventa and Tanda 1."""
    return event
