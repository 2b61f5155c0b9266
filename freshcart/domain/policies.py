# freshcart/domain/policies.py
"""
Cancellation and rating rules.

Both answer with a decision carrying a reason, the caller turns the reason
into the message shown to the user.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from freshcart.domain.order_status import OrderStatus
from freshcart.utils.settings import CANCELLATION_WINDOW_MINUTES
from freshcart.utils.timeutils import as_utc, utcnow


class CancelReason(str, Enum):
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    ALREADY_DELIVERED = "ALREADY_DELIVERED"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    WINDOW_EXPIRED = "WINDOW_EXPIRED"

    @property
    def message(self) -> str:
        return _CANCEL_MESSAGES[self]


_CANCEL_MESSAGES = {
    CancelReason.ALREADY_ASSIGNED: (
        "A carrier has already accepted this delivery. "
        "Orders cannot be cancelled once a carrier is assigned."
    ),
    CancelReason.ALREADY_DELIVERED: "This order has already been delivered.",
    CancelReason.ALREADY_CANCELLED: "This order has already been cancelled.",
    CancelReason.WINDOW_EXPIRED: (
        f"The {CANCELLATION_WINDOW_MINUTES // 60}-hour cancellation window has passed."
    ),
}


@dataclass(frozen=True)
class CancellationDecision:
    allowed: bool
    reason: Optional[CancelReason] = None

    def __bool__(self):
        return self.allowed

    @property
    def message(self) -> str:
        return self.reason.message if self.reason else "Order can be cancelled."


class CancellationPolicy:
    def __init__(self, window: timedelta = timedelta(minutes=CANCELLATION_WINDOW_MINUTES)):
        self.window = window

    def can_cancel(self, order, now: Optional[datetime] = None) -> CancellationDecision:
        status = OrderStatus(order.status)

        # status gate, independent of elapsed time
        if status == OrderStatus.ASSIGNED:
            return CancellationDecision(False, CancelReason.ALREADY_ASSIGNED)
        if status == OrderStatus.DELIVERED:
            return CancellationDecision(False, CancelReason.ALREADY_DELIVERED)
        if status == OrderStatus.CANCELLED:
            return CancellationDecision(False, CancelReason.ALREADY_CANCELLED)

        # time gate
        now = as_utc(now) if now else utcnow()
        if now - as_utc(order.order_time) > self.window:
            return CancellationDecision(False, CancelReason.WINDOW_EXPIRED)

        return CancellationDecision(True)


class RatingReason(str, Enum):
    NOT_DELIVERED = "NOT_DELIVERED"
    NO_CARRIER = "NO_CARRIER"
    NOT_ORDER_CUSTOMER = "NOT_ORDER_CUSTOMER"
    ALREADY_RATED = "ALREADY_RATED"

    @property
    def message(self) -> str:
        return _RATING_MESSAGES[self]


_RATING_MESSAGES = {
    RatingReason.NOT_DELIVERED: "You can only rate delivered orders.",
    RatingReason.NO_CARRIER: "No carrier assigned to this order.",
    RatingReason.NOT_ORDER_CUSTOMER: "Only the customer who placed the order can rate its delivery.",
    RatingReason.ALREADY_RATED: "You have already rated this delivery.",
}


@dataclass(frozen=True)
class RatingDecision:
    allowed: bool
    reason: Optional[RatingReason] = None
    # set when reason is ALREADY_RATED
    existing_rating: Any = None

    def __bool__(self):
        return self.allowed

    @property
    def message(self) -> str:
        return self.reason.message if self.reason else "Delivery can be rated."


def rating_decision(order, customer_id: int, existing_rating=None) -> RatingDecision:
    if OrderStatus(order.status) != OrderStatus.DELIVERED:
        return RatingDecision(False, RatingReason.NOT_DELIVERED)
    if order.carrier_id is None:
        return RatingDecision(False, RatingReason.NO_CARRIER)
    if order.customer_id != customer_id:
        return RatingDecision(False, RatingReason.NOT_ORDER_CUSTOMER)
    if existing_rating is not None:
        return RatingDecision(False, RatingReason.ALREADY_RATED, existing_rating)
    return RatingDecision(True)
