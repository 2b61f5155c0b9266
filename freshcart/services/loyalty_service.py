# freshcart/services/loyalty_service.py
from dataclasses import dataclass

from sqlalchemy.orm import Session

from freshcart.domain.context import Role
from freshcart.repos.loyalty_repo import LoyaltySettingsRepo
from freshcart.repos.user_repo import UserRepo
from freshcart.services.coupon_service import CouponService
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoyaltyRules:
    tier1_threshold: int = 5
    tier1_discount: float = 5.0
    tier2_threshold: int = 10
    tier2_discount: float = 10.0
    tier3_threshold: int = 20
    tier3_discount: float = 15.0
    points_per_tl: float = 1.0

    @classmethod
    def from_model(cls, model) -> "LoyaltyRules":
        return cls(
            tier1_threshold=model.tier1_threshold,
            tier1_discount=model.tier1_discount,
            tier2_threshold=model.tier2_threshold,
            tier2_discount=model.tier2_discount,
            tier3_threshold=model.tier3_threshold,
            tier3_discount=model.tier3_discount,
            points_per_tl=model.points_per_tl,
        )

    def discount_for_orders(self, completed_orders: int) -> float:
        if completed_orders >= self.tier3_threshold:
            return self.tier3_discount
        if completed_orders >= self.tier2_threshold:
            return self.tier2_discount
        if completed_orders >= self.tier1_threshold:
            return self.tier1_discount
        return 0.0

    def tier_name(self, completed_orders: int) -> str:
        if completed_orders >= self.tier3_threshold:
            return "Gold"
        if completed_orders >= self.tier2_threshold:
            return "Silver"
        if completed_orders >= self.tier1_threshold:
            return "Bronze"
        return "Standard"

    def orders_to_next_tier(self, completed_orders: int) -> int:
        for threshold in (self.tier1_threshold, self.tier2_threshold, self.tier3_threshold):
            if completed_orders < threshold:
                return threshold - completed_orders
        return 0

    def points_earned(self, purchase_amount: float) -> int:
        return int(purchase_amount * self.points_per_tl)


class LoyaltyService:
    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = LoyaltySettingsRepo(db)
        self.users = UserRepo(db)
        self._rules: LoyaltyRules | None = None

    @property
    def rules(self) -> LoyaltyRules:
        if self._rules is None:
            model = self.settings_repo.get_settings()
            self._rules = LoyaltyRules.from_model(model) if model else LoyaltyRules()
        return self._rules

    def _customer(self, user_id: int):
        user = self.users.get_user(user_id)
        if user is None or user.role != Role.CUSTOMER.value:
            return None
        return user

    def discount_for_user(self, user_id: int) -> float:
        user = self._customer(user_id)
        if user is None:
            return 0.0
        return self.rules.discount_for_orders(user.completed_transactions)

    def tier_for_user(self, user_id: int) -> str:
        user = self._customer(user_id)
        if user is None:
            return "Standard"
        return self.rules.tier_name(user.completed_transactions)

    def progress_for_user(self, user_id: int) -> str:
        user = self._customer(user_id)
        if user is None:
            return ""

        done = user.completed_transactions
        tier = self.rules.tier_name(done)
        remaining = self.rules.orders_to_next_tier(done)
        if remaining == 0:
            return f"{tier} tier (Max)"

        next_tier = self.rules.tier_name(done + remaining)
        return f"{tier} tier • {remaining} more order(s) to {next_tier}"

    def record_delivery(self, user_id: int, order_total: float) -> int:
        """
        Points, completed order count and a reward coupon for big orders.
        Runs in its own transaction after the delivery is committed.
        """
        points = self.rules.points_earned(order_total)
        try:
            self.users.add_loyalty_points(user_id, points)
            self.users.increment_transactions(user_id)
            CouponService(self.db).award_coupon_for_purchase(user_id, order_total)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"User {user_id} earned {points} loyalty points")
        return points
