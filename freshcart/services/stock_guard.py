# freshcart/services/stock_guard.py
from dataclasses import dataclass, field
from typing import List

from sqlalchemy.orm import Session

from freshcart.domain.cart import Cart
from freshcart.repos.product_repo import ProductRepo
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StockIssue:
    product_id: int
    product_name: str
    requested: float
    available: float

    def describe(self) -> str:
        if self.available <= 0:
            return f"{self.product_name}: out of stock"
        return f"{self.product_name}: requested {self.requested:.2f} kg, only {self.available:.2f} kg available"


@dataclass(frozen=True)
class StockCheck:
    issues: List[StockIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def __bool__(self):
        return self.ok

    def summary(self) -> str:
        return "\n".join(i.describe() for i in self.issues)


class StockGuard:
    """
    Last check before commit. Reads stock from the table at call time, never
    the value captured when the item went into the cart.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def validate(self, cart: Cart) -> StockCheck:
        items = cart.items
        stock = self.repo.current_stock(i.product_id for i in items)

        issues = []
        for item in items:
            available = stock.get(item.product_id, 0.0)
            if item.quantity > available:
                issues.append(
                    StockIssue(
                        product_id=item.product_id,
                        product_name=item.product.name,
                        requested=item.quantity,
                        available=available,
                    )
                )

        if issues:
            logger.info(f"Stock check for user {cart.user_id} found {len(issues)} shortfall(s)")
        return StockCheck(issues)
