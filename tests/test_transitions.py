"""
Status machine guards and derived values, tested without a database.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from catering.models.delivery import DeliveryStatus
from catering.models.order import OrderStatus
from catering.models.payment import PaymentStatus
from catering.services.delivery import check_delivery_transition, parse_delivery_status
from catering.services.order import check_order_transition, compute_total, parse_order_status
from catering.services.payment import check_payment_transition, parse_payment_method, parse_payment_status
from catering.utils import derived
from catering.utils.errors import ConflictError, InvalidInputError


class TestOrderTransitions:
    @pytest.mark.parametrize("current", ["PENDING", "CONFIRMED", "IN_PREPARATION", "READY"])
    @pytest.mark.parametrize("target", list(OrderStatus))
    def test_open_states_allow_any_status(self, current: str, target: OrderStatus) -> None:
        check_order_transition(current, target)

    def test_delivered_only_allows_itself(self) -> None:
        check_order_transition("DELIVERED", OrderStatus.DELIVERED)
        for target in set(OrderStatus) - {OrderStatus.DELIVERED}:
            with pytest.raises(ConflictError):
                check_order_transition("DELIVERED", target)

    def test_cancelled_only_returns_to_pending(self) -> None:
        check_order_transition("CANCELLED", OrderStatus.PENDING)
        for target in set(OrderStatus) - {OrderStatus.PENDING}:
            with pytest.raises(ConflictError):
                check_order_transition("CANCELLED", target)

    def test_unknown_status_is_invalid_input(self) -> None:
        with pytest.raises(InvalidInputError) as exc:
            parse_order_status("SHIPPED")
        assert exc.value.status_code == 400


class TestPaymentTransitions:
    def test_completed_only_to_refunded(self) -> None:
        check_payment_transition("COMPLETED", PaymentStatus.REFUNDED)
        for target in set(PaymentStatus) - {PaymentStatus.REFUNDED}:
            with pytest.raises(ConflictError):
                check_payment_transition("COMPLETED", target)

    @pytest.mark.parametrize("terminal", ["REFUNDED", "FAILED"])
    def test_terminal_states_reject_everything(self, terminal: str) -> None:
        for target in PaymentStatus:
            with pytest.raises(ConflictError):
                check_payment_transition(terminal, target)

    @pytest.mark.parametrize("current", ["PENDING", "PROCESSING"])
    def test_refund_requires_completed_payment(self, current: str) -> None:
        check_payment_transition(current, PaymentStatus.COMPLETED)
        check_payment_transition(current, PaymentStatus.FAILED)
        with pytest.raises(ConflictError):
            check_payment_transition(current, PaymentStatus.REFUNDED)

    def test_unknown_values_are_invalid_input(self) -> None:
        with pytest.raises(InvalidInputError):
            parse_payment_status("SETTLED")
        with pytest.raises(InvalidInputError):
            parse_payment_method("BITCOIN")
        assert parse_payment_method("CARD").value == "CARD"


class TestDeliveryTransitions:
    def test_delivered_is_terminal(self) -> None:
        check_delivery_transition("DELIVERED", DeliveryStatus.DELIVERED)
        with pytest.raises(ConflictError):
            check_delivery_transition("DELIVERED", DeliveryStatus.EN_ROUTE)

    def test_cancelled_only_back_to_scheduled(self) -> None:
        check_delivery_transition("CANCELLED", DeliveryStatus.SCHEDULED)
        for target in (DeliveryStatus.EN_ROUTE, DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED):
            with pytest.raises(ConflictError):
                check_delivery_transition("CANCELLED", target)

    def test_scheduled_and_en_route_can_be_cancelled(self) -> None:
        check_delivery_transition("SCHEDULED", DeliveryStatus.CANCELLED)
        check_delivery_transition("EN_ROUTE", DeliveryStatus.CANCELLED)

    def test_unknown_status_is_invalid_input(self) -> None:
        with pytest.raises(InvalidInputError):
            parse_delivery_status("LOST")


class TestDerivedValues:
    def test_total_is_unit_price_times_quantity(self) -> None:
        assert compute_total(Decimal("50"), 3) == Decimal("150.00")
        assert compute_total(Decimal("12.345"), 2) == Decimal("24.69")

    def test_percent_rounds_and_handles_zero(self) -> None:
        assert derived.percent(Decimal("100"), Decimal("150")) == 67
        assert derived.percent(Decimal("0"), Decimal("0")) == 0

    def test_days_until(self) -> None:
        today = date(2025, 7, 17)
        assert derived.days_until(date(2025, 7, 20), today) == 3
        assert derived.days_until(date(2025, 7, 10), today) == -7
        assert derived.days_until(None) is None

    def test_days_since(self) -> None:
        now = datetime(2025, 7, 22, 9, 0)
        assert derived.days_since(now - timedelta(days=5, hours=1), now) == 5
        assert derived.days_since(None) == 0

    def test_event_datetime(self) -> None:
        assert derived.event_datetime(date(2025, 7, 20), time(18, 30)) == "2025-07-20T18:30:00"
        assert derived.event_datetime(None, time(18, 30)) is None

    def test_duration_minutes(self) -> None:
        assert derived.duration_minutes(time(16, 0), time(17, 30)) == 90
        assert derived.duration_minutes(time(16, 0), None) is None

    def test_method_description(self) -> None:
        assert derived.method_description("TRANSFER") == "Банковский перевод"
        assert derived.method_description("BARTER") == "Неизвестный способ оплаты"

    def test_full_name(self) -> None:
        assert derived.full_name("Lucía", "Andrade") == "Lucía Andrade"
