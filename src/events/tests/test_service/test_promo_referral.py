"""Tests for promo codes and vendor referrals."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from accounts.models import User
from events.exceptions import InvalidCode, InvalidState
from events.models import Event, PaymentMethod, PromoCode, Referral, TicketType
from events.service import order_service, promo_service, referral_service
from events.service.order_service import OrderLine

pytestmark = pytest.mark.django_db


class TestPromoCodes:
    def test_codes_are_stored_upper_case(self, event: Event) -> None:
        promo = promo_service.create_promo_code(event, code=" verano ", value=Decimal("15"))

        assert promo.code == "VERANO"

    def test_percent_discount_cannot_exceed_100(self, event: Event) -> None:
        with pytest.raises(DjangoValidationError):
            promo_service.create_promo_code(event, code="GRATIS", value=Decimal("120"))

    def test_fixed_discount_never_exceeds_the_subtotal(self, event: Event) -> None:
        promo = promo_service.create_promo_code(
            event, code="MENOS500", discount_type=PromoCode.DiscountType.FIXED, value=Decimal("500")
        )

        assert promo.discount_for(Decimal("120.00")) == Decimal("120.00")
        assert promo.discount_for(Decimal("800.00")) == Decimal("500")

    def test_percent_discount_is_rounded_to_cents(self, event: Event) -> None:
        promo = promo_service.create_promo_code(event, code="TERCIO", value=Decimal("33.33"))

        assert promo.discount_for(Decimal("10.00")) == Decimal("3.33")

    def test_resolve_checks_the_window(self, event: Event, day0: datetime) -> None:
        promo_service.create_promo_code(
            event,
            code="FINDE",
            value=Decimal("10"),
            valid_from=day0 + timedelta(days=5),
            valid_until=day0 + timedelta(days=7),
        )

        with pytest.raises(InvalidCode, match="not valid yet"):
            promo_service.resolve_promo_code(event, "finde", day0)
        assert promo_service.resolve_promo_code(event, "finde", day0 + timedelta(days=6)).code == "FINDE"
        with pytest.raises(InvalidCode, match="expired"):
            promo_service.resolve_promo_code(event, "finde", day0 + timedelta(days=7))

    def test_resolve_checks_uses(self, event: Event, day0: datetime) -> None:
        promo = promo_service.create_promo_code(event, code="UNO", value=Decimal("10"), max_uses=1)

        promo_service.record_use(promo)

        with pytest.raises(InvalidCode, match="used up"):
            promo_service.resolve_promo_code(event, "UNO", day0)

    def test_pending_orders_count_against_uses(
        self, priced_event: Event, general: TicketType, user: User, other_user: User, day0: datetime
    ) -> None:
        promo_service.create_promo_code(priced_event, code="UNO", value=Decimal("10"), max_uses=1)
        now = day0 + timedelta(days=2)
        first = order_service.place_order(
            event=priced_event,
            buyer=user,
            items=[OrderLine(general.pk, 1)],
            payment_method=PaymentMethod.CASH,
            promo_code="UNO",
            now=now,
        )

        with pytest.raises(InvalidCode, match="used up"):
            order_service.place_order(
                event=priced_event,
                buyer=other_user,
                items=[OrderLine(general.pk, 1)],
                payment_method=PaymentMethod.CASH,
                promo_code="UNO",
                now=now,
            )

        order_service.fail_payment(first)
        assert promo_service.resolve_promo_code(priced_event, "UNO", now).code == "UNO"

    def test_codes_belong_to_one_event(self, event: Event, organizer: User, day0: datetime) -> None:
        other = Event.objects.create(organizer=organizer, title="Otra", starts_at=day0 + timedelta(days=3))
        promo_service.create_promo_code(other, code="AJENO", value=Decimal("10"))

        with pytest.raises(InvalidCode):
            promo_service.resolve_promo_code(event, "AJENO", day0)

    def test_inactive_codes_are_unknown(self, event: Event, day0: datetime) -> None:
        promo = promo_service.create_promo_code(event, code="VIEJO", value=Decimal("10"))
        promo_service.update_promo_code(promo, is_active=False)

        with pytest.raises(InvalidCode):
            promo_service.resolve_promo_code(event, "VIEJO", day0)

    def test_delete_unused_code(self, event: Event) -> None:
        promo = promo_service.create_promo_code(event, code="BORRAR", value=Decimal("10"))

        assert promo_service.delete_promo_code(promo) is True
        assert not PromoCode.objects.filter(code="BORRAR").exists()

    def test_delete_used_code_deactivates_it(self, event: Event) -> None:
        promo = promo_service.create_promo_code(event, code="USADO", value=Decimal("10"))
        promo_service.record_use(promo)
        promo.refresh_from_db()

        assert promo_service.delete_promo_code(promo) is False
        promo.refresh_from_db()
        assert promo.is_active is False

    def test_usable_codes(self, event: Event, day0: datetime) -> None:
        promo_service.create_promo_code(event, code="HOY", value=Decimal("10"))
        promo_service.create_promo_code(event, code="MANANA", value=Decimal("10"), valid_from=day0 + timedelta(days=1))

        assert [promo.code for promo in promo_service.usable_codes(event, day0)] == ["HOY"]


class TestReferrals:
    def test_only_vendors_create_referrals(self, event: Event, user: User) -> None:
        with pytest.raises(InvalidState):
            referral_service.create_referral(user, event, "mi-codigo")

    def test_codes_are_case_insensitive_and_unique(self, event: Event, vendor: User, user_factory) -> None:  # type: ignore[no-untyped-def]
        referral = referral_service.create_referral(vendor, event, "Ana-Tango")
        other_vendor = user_factory(role=User.Role.VENDOR)

        assert referral.code == "ana-tango"
        with pytest.raises(InvalidCode):
            referral_service.create_referral(other_vendor, event, "ANA-TANGO")

    def test_code_format(self, event: Event, vendor: User) -> None:
        with pytest.raises(DjangoValidationError):
            referral_service.create_referral(vendor, event, "no spaces!")

    def test_rename(self, event: Event, vendor: User, user_factory) -> None:  # type: ignore[no-untyped-def]
        referral = referral_service.create_referral(vendor, event, "ana")
        other_vendor = user_factory(role=User.Role.VENDOR)
        referral_service.create_referral(other_vendor, event, "bruno")

        referral_service.rename_referral(referral, "Ana-2")

        referral.refresh_from_db()
        assert referral.code == "ana-2"
        with pytest.raises(InvalidCode):
            referral_service.rename_referral(referral, "BRUNO")

    def test_track_click(self, event: Event, vendor: User) -> None:
        referral = referral_service.create_referral(vendor, event, "ana")

        assert referral_service.track_click(" ANA ") == referral
        assert referral_service.track_click("nadie") is None

        referral.refresh_from_db()
        assert referral.clicks == 1

    def test_vendor_dashboard(
        self, priced_event: Event, vendor: User, user: User, general: TicketType, day0: datetime
    ) -> None:
        referral = referral_service.create_referral(vendor, priced_event, "ana")
        referral_service.track_click("ana")
        referral_service.track_click("ana")
        now = day0 + timedelta(days=1)
        paid = order_service.place_order(
            event=priced_event,
            buyer=user,
            items=[OrderLine(general.pk, 2)],
            payment_method=PaymentMethod.CASH,
            referral_code="ana",
            now=now,
        )
        order_service.confirm_payment(paid, now=now)
        order_service.place_order(
            event=priced_event,
            buyer=user,
            items=[OrderLine(general.pk, 1)],
            payment_method=PaymentMethod.CASH,
            referral_code="ana",
            now=now,
        )

        [stats] = referral_service.vendor_dashboard(vendor)

        assert stats.referral == referral
        assert stats.clicks == 2
        assert stats.conversions == 1
        assert stats.tickets_sold == 2
        assert stats.revenue == Decimal("200.00")
        assert stats.earnings == Decimal("20.00")

    def test_dashboard_without_sales(self, event: Event, vendor: User) -> None:
        referral_service.create_referral(vendor, event, "ana")

        [stats] = referral_service.vendor_dashboard(vendor)

        assert stats.tickets_sold == 0
        assert stats.revenue == Decimal("0")
        assert stats.earnings == Decimal("0.00")

    def test_referral_row_is_unique_per_vendor_and_event(self, event: Event, vendor: User) -> None:
        referral_service.create_referral(vendor, event, "ana")

        with pytest.raises(DjangoValidationError):
            Referral.objects.create(vendor=vendor, event=event, code="ana-bis")
