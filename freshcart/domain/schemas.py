# freshcart/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import date, datetime

from freshcart.domain.cart import Cart, CartUpdate
from freshcart.domain.context import Role
from freshcart.domain.pricing import round_money


class UserCreate(BaseModel):
    """Schema for creating a user."""

    id: int = Field(..., gt=0, description="User ID (must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="User name")
    role: Role = Role.CUSTOMER
    region_id: Optional[int] = None


class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: int
    name: str
    role: str
    region_id: Optional[int] = None
    completed_transactions: int = 0
    loyalty_points: int = 0

    model_config = ConfigDict(from_attributes=True)


class LoyaltyOut(BaseModel):
    user_id: int
    tier: str
    discount_pct: float
    progress: str


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: float = Field(..., gt=0, description="Quantity in kg (must be > 0)")


class QuantityIn(BaseModel):
    quantity: float = Field(..., gt=0, description="New quantity in kg (must be > 0)")


class CouponIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)


class CartItemOut(BaseModel):
    """Schema for a cart line (response)."""

    product_id: int
    name: str
    quantity: float
    unit_price: Decimal
    total: Decimal
    large_order: bool


class CartOut(BaseModel):
    """Schema for the session cart (response)."""

    user_id: int
    region: str
    items: List[CartItemOut]
    item_count: int
    coupon_code: Optional[str] = None
    coupon_description: Optional[str] = None
    loyalty_discount_pct: float
    subtotal: Decimal
    coupon_discount: Decimal
    loyalty_discount: Decimal
    discount: Decimal
    vat: Decimal
    total: Decimal
    delivery_fee: Decimal

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartOut":
        money = cart.totals.as_money()
        return cls(
            user_id=cart.user_id,
            region=cart.region.name,
            items=[
                CartItemOut(
                    product_id=i.product_id,
                    name=i.product.name,
                    quantity=i.quantity,
                    unit_price=round_money(i.unit_price),
                    total=round_money(i.total),
                    large_order=i.is_large_order,
                )
                for i in cart.items
            ],
            item_count=cart.get_item_count(),
            coupon_code=cart.coupon.code if cart.coupon else None,
            coupon_description=cart.coupon.describe() if cart.coupon else None,
            loyalty_discount_pct=cart.loyalty_discount_pct,
            subtotal=money.subtotal,
            coupon_discount=money.coupon_discount,
            loyalty_discount=money.loyalty_discount,
            discount=money.discount,
            vat=money.vat,
            total=money.total,
            delivery_fee=round_money(cart.region.delivery_fee),
        )


class CartChangeOut(BaseModel):
    """Cart plus the side effects the user has to be told about."""

    cart: CartOut
    coupon_detached: Optional[str] = None
    threshold_exceeded: bool = False
    messages: List[str] = []

    @classmethod
    def build(cls, cart: Cart, update: CartUpdate | None = None) -> "CartChangeOut":
        messages = []
        detached = None
        exceeded = False
        if update is not None:
            if update.coupon_detached:
                detached = update.coupon_detached.code
                messages.append("Coupon removed - order no longer meets minimum value")
            if update.threshold_exceeded:
                exceeded = True
                messages.append(
                    "You have exceeded the threshold for this product. "
                    "Because you achieved the threshold, the prices are doubled for this product."
                )
        return cls(
            cart=CartOut.from_cart(cart),
            coupon_detached=detached,
            threshold_exceeded=exceeded,
            messages=messages,
        )


class CouponResultOut(BaseModel):
    applied: bool
    reason: Optional[str] = None
    message: str
    cart: CartOut


class CheckoutIn(BaseModel):
    """Schema for placing an order from the session cart."""

    requested_delivery_time: datetime


class StockIssueOut(BaseModel):
    product_id: int
    product_name: str
    requested: float
    available: float


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: float
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    customer_id: int
    carrier_id: Optional[int] = None
    status: str
    subtotal: Decimal
    discount: Decimal
    vat: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    order_time: datetime
    requested_delivery_time: datetime
    actual_delivery_time: Optional[datetime] = None
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class DecisionOut(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    message: str


class RatingIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


class RatingOut(BaseModel):
    order_id: int
    carrier_id: int
    customer_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RatingCheckOut(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    message: str
    existing: Optional[RatingOut] = None


class CarrierSummaryOut(BaseModel):
    carrier_id: int
    average_rating: float
    ratings: int


class CouponCreate(BaseModel):
    """Schema for creating a coupon (owner). Empty code = generated."""

    code: Optional[str] = Field(None, max_length=50)
    discount_percentage: float = Field(..., gt=0, le=100)
    expiration_date: Optional[date] = None
    minimum_order_value: float = Field(0.0, ge=0)
    maximum_discount: Optional[float] = Field(None, gt=0)
    user_id: Optional[int] = None


class CouponOut(BaseModel):
    code: str
    discount_percentage: float
    user_id: Optional[int] = None
    minimum_order_value: float
    maximum_discount: Optional[float] = None
    expiration_date: Optional[date] = None
    is_used: bool
    order_id: Optional[int] = None
    description: Optional[str] = None
    expires: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RegionOut(BaseModel):
    id: int
    name: str
    distance_km: float
    price_difference: str
    delivery_fee: Decimal


class ProductOut(BaseModel):
    """Catalogue entry priced for the caller's region, before any doubling."""

    id: int
    name: str
    category: str
    price: Decimal
    stock: float
    threshold: float
