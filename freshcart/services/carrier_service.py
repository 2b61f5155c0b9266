# freshcart/services/carrier_service.py
from enum import Enum
from typing import List

from sqlalchemy.orm import Session

from freshcart.data.models.order import OrderModel
from freshcart.domain.errors import CommitError, InvalidTransitionError, NotFoundError
from freshcart.domain.order_status import OrderStatus
from freshcart.repos.order_repo import OrderRepo
from freshcart.repos.rating_repo import RatingRepo
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


class AssignResult(str, Enum):
    OK = "OK"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"

    @property
    def message(self) -> str:
        if self == AssignResult.OK:
            return "Order assigned to you"
        return "Another carrier has already taken this order"


class CarrierService:
    """
    Carrier side of the order: claiming a delivery and the carrier's lists.
    A carrier may hold any number of assigned orders at once.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.ratings = RatingRepo(db)

    # =====================================================
    # QUERY
    # =====================================================
    def get_available_orders(self) -> List[OrderModel]:
        return self.repo.list_available_for_carriers()

    def get_current_orders(self, carrier_id: int) -> List[OrderModel]:
        return self.repo.list_for_carrier(carrier_id, OrderStatus.ASSIGNED)

    def get_completed_orders(self, carrier_id: int) -> List[OrderModel]:
        return self.repo.list_for_carrier(carrier_id, OrderStatus.DELIVERED)

    def get_rating_summary(self, carrier_id: int) -> tuple[float, int]:
        return self.ratings.carrier_summary(carrier_id)

    # =====================================================
    # COMMANDS
    # =====================================================
    def assign(self, order_id: int, carrier_id: int) -> AssignResult:
        """
        Claim a confirmed, unassigned order.

        The claim is a single conditional UPDATE, so of two carriers racing
        for the same order exactly one gets a row back.
        """
        try:
            claimed = self.repo.assign_carrier_if_unassigned(order_id, carrier_id)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Assigning order {order_id} to carrier {carrier_id} failed: {e}")
            raise CommitError("Order could not be assigned") from e

        if claimed:
            logger.info(f"Order {order_id} assigned to carrier {carrier_id}")
            return AssignResult.OK

        order = self.repo.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} does not exist")

        if order.carrier_id is not None:
            logger.info(
                f"Carrier {carrier_id} lost order {order_id} to carrier {order.carrier_id}"
            )
            return AssignResult.ALREADY_ASSIGNED

        # pending or cancelled, not claimable
        raise InvalidTransitionError(OrderStatus(order.status), OrderStatus.ASSIGNED)
