# freshcart/services/rating_service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freshcart.data.models.rating import CarrierRatingModel
from freshcart.domain.errors import NotFoundError, ValidationError
from freshcart.domain.policies import RatingDecision, RatingReason, rating_decision
from freshcart.repos.order_repo import OrderRepo
from freshcart.repos.rating_repo import RatingRepo
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


class RatingService:
    """
    One rating per delivered order and customer.
    can_rate is the gate, get_existing_rating the read path for a
    customer who already rated.
    """

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepo(db)
        self.repo = RatingRepo(db)

    def _order(self, order_id: int):
        order = self.orders.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} does not exist")
        return order

    def check(self, order_id: int, customer_id: int) -> RatingDecision:
        order = self._order(order_id)
        existing = self.repo.find_rating(order_id, customer_id)
        return rating_decision(order, customer_id, existing)

    def can_rate(self, order_id: int, customer_id: int) -> bool:
        return self.check(order_id, customer_id).allowed

    def get_existing_rating(self, order_id: int, customer_id: int) -> CarrierRatingModel | None:
        return self.repo.find_rating(order_id, customer_id)

    def rate_carrier(
        self,
        order_id: int,
        customer_id: int,
        rating: int,
        comment: str | None = None,
    ) -> RatingDecision:
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError(ValidationError.INVALID_RATING, "Rating must be between 1 and 5")

        decision = self.check(order_id, customer_id)
        if not decision.allowed:
            logger.info(f"Rating of order {order_id} by user {customer_id} denied: {decision.reason.value}")
            return decision

        order = self._order(order_id)
        comment = (comment or "").strip() or None

        try:
            self.repo.insert_rating(
                CarrierRatingModel(
                    order_id=order_id,
                    carrier_id=order.carrier_id,
                    customer_id=customer_id,
                    rating=rating,
                    comment=comment,
                )
            )
            self.db.commit()
        except IntegrityError:
            # unique (order, customer) hit by a concurrent submit
            self.db.rollback()
            existing = self.repo.find_rating(order_id, customer_id)
            return RatingDecision(False, RatingReason.ALREADY_RATED, existing)

        logger.info(f"Carrier {order.carrier_id} rated {rating}/5 for order {order_id}")
        return RatingDecision(True)
