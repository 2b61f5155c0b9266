# freshcart/domain/pricing.py
"""
Cart pricing, no side effects.

Internal arithmetic stays in float; rounding to 2 places (half-up) happens
only when a value is shown or stored, see ``round_money`` and
``CartTotals.as_money``. Quantities are the exception: they are
snapped to 3 places on entry, see ``round_quantity``.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from freshcart.domain.context import Region
from freshcart.utils.settings import VAT_RATE

CENT = Decimal("0.01")
# kg, same scale as the stock columns
QUANTITY_STEP = Decimal("0.001")


def round_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_quantity(value) -> Decimal:
    return Decimal(str(value)).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def round_quantity(value) -> float:
    """Quantity snapped to the 3-place storage scale, half-up."""
    return float(to_quantity(value))


@dataclass(frozen=True)
class ProductSnapshot:
    id: int
    name: str
    category: str
    price: float
    stock: float
    threshold: float

    def is_large_order(self, quantity: float) -> bool:
        return quantity >= self.threshold


@dataclass(frozen=True)
class CouponTerms:
    code: str
    discount_percentage: float
    minimum_order_value: float = 0.0
    maximum_discount: Optional[float] = None

    def meets_minimum(self, subtotal: float) -> bool:
        return subtotal >= self.minimum_order_value

    def discount_for(self, subtotal: float) -> float:
        discount = subtotal * self.discount_percentage / 100.0
        if self.maximum_discount is not None and discount > self.maximum_discount:
            discount = self.maximum_discount
        return discount

    def describe(self) -> str:
        text = f"{self.discount_percentage:.0f}% off"
        if self.maximum_discount is not None:
            text += f" (max {self.maximum_discount:.2f} TL)"
        if self.minimum_order_value > 0:
            text += f" on orders over {self.minimum_order_value:.2f} TL"
        return text


def effective_unit_price(product: ProductSnapshot, quantity: float, region: Region) -> float:
    """Regional adjustment first, then threshold doubling for this line."""
    price = product.price * region.price_factor
    if product.is_large_order(quantity):
        price *= 2
    return price


def line_total(unit_price: float, quantity: float) -> float:
    return unit_price * quantity


@dataclass(frozen=True)
class MoneyTotals:
    subtotal: Decimal
    coupon_discount: Decimal
    loyalty_discount: Decimal
    discount: Decimal
    vat: Decimal
    total: Decimal


@dataclass(frozen=True)
class CartTotals:
    subtotal: float = 0.0
    coupon_discount: float = 0.0
    loyalty_discount: float = 0.0
    discount: float = 0.0
    vat: float = 0.0
    total: float = 0.0

    def as_money(self) -> MoneyTotals:
        subtotal = round_money(self.subtotal)
        discount = round_money(self.discount)
        vat = round_money(self.vat)
        return MoneyTotals(
            subtotal=subtotal,
            coupon_discount=round_money(self.coupon_discount),
            loyalty_discount=round_money(self.loyalty_discount),
            discount=discount,
            vat=vat,
            # rebuilt from the rounded parts so the stored identity holds
            total=subtotal - discount + vat,
        )


def compute_totals(
    line_totals: Iterable[float],
    coupon: Optional[CouponTerms] = None,
    loyalty_discount_pct: float = 0.0,
    vat_rate: float = VAT_RATE,
) -> CartTotals:
    subtotal = sum(line_totals, 0.0)

    coupon_discount = coupon.discount_for(subtotal) if coupon else 0.0
    loyalty_discount = subtotal * loyalty_discount_pct / 100.0 if loyalty_discount_pct > 0 else 0.0

    discount = coupon_discount + loyalty_discount
    if discount > subtotal:
        discount = subtotal

    # VAT on the post-discount amount
    vat = (subtotal - discount) * vat_rate
    total = subtotal - discount + vat

    return CartTotals(
        subtotal=subtotal,
        coupon_discount=coupon_discount,
        loyalty_discount=loyalty_discount,
        discount=discount,
        vat=vat,
        total=total,
    )
