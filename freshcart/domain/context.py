# freshcart/domain/context.py
from dataclasses import dataclass, field
from enum import Enum

from freshcart.utils.settings import (
    REGION_PRICE_RATE_PER_KM,
    DELIVERY_BASE_FEE,
    DELIVERY_FEE_PER_KM,
)


class Role(str, Enum):
    CUSTOMER = "customer"
    CARRIER = "carrier"
    OWNER = "owner"


@dataclass(frozen=True)
class Region:
    id: int
    name: str
    distance_km: float = 0.0

    @property
    def price_factor(self) -> float:
        # 1.0 at the store, grows with distance
        return 1.0 + self.distance_km * REGION_PRICE_RATE_PER_KM

    @property
    def delivery_fee(self) -> float:
        if self.distance_km <= 0:
            return 0.0
        return DELIVERY_BASE_FEE + self.distance_km * DELIVERY_FEE_PER_KM

    def price_difference_text(self) -> str:
        pct = (self.price_factor - 1.0) * 100
        if pct <= 0:
            return "Base price"
        return f"+{pct:.0f}% price"


STORE_REGION = Region(id=0, name="Store", distance_km=0.0)


@dataclass(frozen=True)
class SessionContext:
    """Who is acting and where, passed explicitly into every core call."""

    user_id: int
    role: Role = Role.CUSTOMER
    region: Region = field(default=STORE_REGION)
    loyalty_discount_pct: float = 0.0
