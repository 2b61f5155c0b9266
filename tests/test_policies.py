"""Tests for the cancellation window and the rating gate."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from freshcart.domain.order_status import OrderStatus
from freshcart.domain.policies import (
    CancelReason,
    CancellationPolicy,
    RatingReason,
    rating_decision,
)

PLACED = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def order(status=OrderStatus.PENDING, carrier_id=None, customer_id=1, order_time=PLACED):
    return SimpleNamespace(
        status=status.value,
        carrier_id=carrier_id,
        customer_id=customer_id,
        order_time=order_time,
    )


class TestCancellationPolicy:
    policy = CancellationPolicy()

    @pytest.mark.parametrize("minutes", [0, 30, 119, 120])
    def test_inside_window(self, minutes):
        decision = self.policy.can_cancel(order(), PLACED + timedelta(minutes=minutes))
        assert decision.allowed
        assert decision.reason is None

    def test_window_expired(self):
        decision = self.policy.can_cancel(order(), PLACED + timedelta(minutes=121))
        assert not decision
        assert decision.reason == CancelReason.WINDOW_EXPIRED
        assert decision.message == "The 2-hour cancellation window has passed."

    def test_confirmed_order_can_still_be_cancelled(self):
        assert self.policy.can_cancel(order(OrderStatus.CONFIRMED), PLACED + timedelta(minutes=10))

    @pytest.mark.parametrize(
        "status, reason",
        [
            (OrderStatus.ASSIGNED, CancelReason.ALREADY_ASSIGNED),
            (OrderStatus.DELIVERED, CancelReason.ALREADY_DELIVERED),
            (OrderStatus.CANCELLED, CancelReason.ALREADY_CANCELLED),
        ],
    )
    def test_status_gate_wins_over_time(self, status, reason):
        decision = self.policy.can_cancel(order(status, carrier_id=2), PLACED + timedelta(minutes=30))
        assert decision.reason == reason

    def test_naive_order_time_is_treated_as_utc(self):
        naive = order(order_time=PLACED.replace(tzinfo=None))
        assert self.policy.can_cancel(naive, PLACED + timedelta(minutes=119)).allowed

    def test_custom_window(self):
        policy = CancellationPolicy(window=timedelta(minutes=15))
        assert policy.can_cancel(order(), PLACED + timedelta(minutes=16)).reason == CancelReason.WINDOW_EXPIRED


class TestRatingGate:
    def test_delivered_order_can_be_rated(self):
        assert rating_decision(order(OrderStatus.DELIVERED, carrier_id=2), customer_id=1).allowed

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.ASSIGNED, OrderStatus.CANCELLED])
    def test_not_delivered(self, status):
        decision = rating_decision(order(status, carrier_id=2), customer_id=1)
        assert decision.reason == RatingReason.NOT_DELIVERED

    def test_no_carrier(self):
        decision = rating_decision(order(OrderStatus.DELIVERED), customer_id=1)
        assert decision.reason == RatingReason.NO_CARRIER

    def test_other_customer(self):
        decision = rating_decision(order(OrderStatus.DELIVERED, carrier_id=2), customer_id=5)
        assert decision.reason == RatingReason.NOT_ORDER_CUSTOMER

    def test_already_rated_carries_existing(self):
        existing = SimpleNamespace(rating=4)
        decision = rating_decision(order(OrderStatus.DELIVERED, carrier_id=2), 1, existing)
        assert decision.reason == RatingReason.ALREADY_RATED
        assert decision.existing_rating.rating == 4
        assert decision.message == "You have already rated this delivery."
