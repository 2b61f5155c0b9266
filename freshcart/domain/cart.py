# freshcart/domain/cart.py
"""
Session cart.

Single owner, synchronous. Every mutation reprices the touched line,
recomputes the totals and re-checks the applied coupon's minimum. Live stock
is deliberately not consulted here, the stock guard does that at checkout.
"""
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from freshcart.domain.context import Region, STORE_REGION
from freshcart.domain.errors import ValidationError
from freshcart.domain.pricing import (
    CartTotals,
    CouponTerms,
    ProductSnapshot,
    compute_totals,
    effective_unit_price,
    line_total,
    round_quantity,
)


@dataclass
class CartItem:
    product: ProductSnapshot
    quantity: float
    # locked in when the line was last added/updated
    unit_price: float

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def total(self) -> float:
        return line_total(self.unit_price, self.quantity)

    @property
    def is_large_order(self) -> bool:
        return self.product.is_large_order(self.quantity)


@dataclass(frozen=True)
class CartUpdate:
    """Side effects of a mutation the caller has to show the user."""

    coupon_detached: Optional[CouponTerms] = None
    threshold_exceeded: bool = False


class Cart:
    def __init__(
        self,
        user_id: int,
        region: Region = STORE_REGION,
        loyalty_discount_pct: float = 0.0,
    ):
        self.user_id = user_id
        self.region = region
        self.loyalty_discount_pct = loyalty_discount_pct
        self._items: Dict[int, CartItem] = {}
        self.coupon: Optional[CouponTerms] = None
        self.totals = CartTotals()

    @classmethod
    def for_session(cls, ctx) -> "Cart":
        return cls(
            user_id=ctx.user_id,
            region=ctx.region,
            loyalty_discount_pct=ctx.loyalty_discount_pct,
        )

    # =====================================================
    # QUERY
    # =====================================================
    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def get_item(self, product_id: int) -> Optional[CartItem]:
        return self._items.get(product_id)

    def get_item_count(self) -> int:
        # distinct products, for the badge
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    @property
    def subtotal(self) -> float:
        return self.totals.subtotal

    # =====================================================
    # COMMANDS
    # =====================================================
    def add(self, product: ProductSnapshot, quantity: float) -> CartUpdate:
        quantity = _checked_quantity(quantity)

        existing = self._items.get(product.id)
        if existing:
            # doubling is judged on the whole quantity for this product
            quantity = round_quantity(existing.quantity + quantity)

        return self._set_line(product, quantity)

    def update_quantity(
        self,
        product_id: int,
        quantity: float,
        product: Optional[ProductSnapshot] = None,
    ) -> CartUpdate:
        quantity = _checked_quantity(quantity)

        existing = self._items.get(product_id)
        if not existing:
            raise ValidationError(ValidationError.ITEM_NOT_IN_CART, f"Product {product_id} is not in the cart")

        return self._set_line(product or existing.product, quantity)

    def remove(self, product_id: int) -> CartUpdate:
        if product_id not in self._items:
            raise ValidationError(ValidationError.ITEM_NOT_IN_CART, f"Product {product_id} is not in the cart")

        del self._items[product_id]
        return self._recompute()

    def apply_coupon(self, coupon: CouponTerms) -> CartUpdate:
        """Attach an already validated coupon, one per cart."""
        if self.coupon is not None:
            raise ValidationError(
                ValidationError.COUPON_ALREADY_APPLIED,
                "Only one coupon can be used per order. Remove current coupon first.",
            )

        self.coupon = coupon
        return self._recompute()

    def remove_coupon(self) -> Optional[CouponTerms]:
        removed, self.coupon = self.coupon, None
        self._recompute()
        return removed

    def clear(self) -> "Cart":
        """A fresh empty cart for the same session; this one is left as is."""
        return Cart(
            user_id=self.user_id,
            region=self.region,
            loyalty_discount_pct=self.loyalty_discount_pct,
        )

    # =====================================================
    # internals
    # =====================================================
    def _set_line(self, product: ProductSnapshot, quantity: float) -> CartUpdate:
        previous = self._items.get(product.id)
        was_large = previous.is_large_order if previous else False

        unit_price = effective_unit_price(product, quantity, self.region)
        item = CartItem(product=product, quantity=quantity, unit_price=unit_price)

        # dict assignment keeps the original position of an existing line
        self._items[product.id] = item

        update = self._recompute()
        crossed = item.is_large_order and not was_large
        return CartUpdate(coupon_detached=update.coupon_detached, threshold_exceeded=crossed)

    def _recompute(self) -> CartUpdate:
        line_totals = [i.total for i in self._items.values()]
        detached = None

        if self.coupon is not None:
            subtotal = sum(line_totals, 0.0)
            if not self.coupon.meets_minimum(subtotal):
                detached, self.coupon = self.coupon, None

        self.totals = compute_totals(line_totals, self.coupon, self.loyalty_discount_pct)
        return CartUpdate(coupon_detached=detached)

    # =====================================================
    # serialization (session store)
    # =====================================================
    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "region": asdict(self.region),
            "loyalty_discount_pct": self.loyalty_discount_pct,
            "items": [
                {
                    "product": asdict(i.product),
                    "quantity": i.quantity,
                    "unit_price": i.unit_price,
                }
                for i in self._items.values()
            ],
            "coupon": asdict(self.coupon) if self.coupon else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        cart = cls(
            user_id=data["user_id"],
            region=Region(**data["region"]),
            loyalty_discount_pct=data.get("loyalty_discount_pct", 0.0),
        )
        for raw in data.get("items", []):
            product = ProductSnapshot(**raw["product"])
            cart._items[product.id] = CartItem(
                product=product,
                quantity=round_quantity(raw["quantity"]),
                unit_price=raw["unit_price"],
            )
        if data.get("coupon"):
            cart.coupon = CouponTerms(**data["coupon"])
        cart.totals = compute_totals(
            [i.total for i in cart._items.values()], cart.coupon, cart.loyalty_discount_pct
        )
        return cart


def _checked_quantity(quantity) -> float:
    if quantity is None or round_quantity(quantity) <= 0:
        raise ValidationError(ValidationError.INVALID_QUANTITY, "Quantity must be greater than 0")
    return round_quantity(quantity)
