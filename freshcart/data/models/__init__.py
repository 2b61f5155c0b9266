# import every model so SQLAlchemy registers it in Base.metadata

from freshcart.data.models.user import UserModel
from freshcart.data.models.region import RegionModel
from freshcart.data.models.product import ProductModel
from freshcart.data.models.coupon import CouponModel
from freshcart.data.models.order import OrderModel
from freshcart.data.models.order_item import OrderItemModel
from freshcart.data.models.order_commit import OrderCommitModel, OrderCommitLineModel
from freshcart.data.models.rating import CarrierRatingModel
from freshcart.data.models.loyalty_settings import LoyaltySettingsModel

__all__ = [
    "UserModel",
    "RegionModel",
    "ProductModel",
    "CouponModel",
    "OrderModel",
    "OrderItemModel",
    "OrderCommitModel",
    "OrderCommitLineModel",
    "CarrierRatingModel",
    "LoyaltySettingsModel",
]
