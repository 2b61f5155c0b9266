from sqlalchemy.orm import Session

from freshcart.domain.cart import Cart, CartUpdate
from freshcart.domain.context import SessionContext
from freshcart.domain.errors import NotFoundError, ValidationError
from freshcart.domain.pricing import CouponTerms
from freshcart.repos.product_repo import ProductRepo
from freshcart.services.coupon_service import CouponValidation, CouponValidator
from freshcart.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Use cases on the session cart.
    Looks up products and coupons, the Cart itself does the pricing.
    Nothing here touches live stock, that waits for checkout.
    """

    def __init__(self, db: Session):
        self.products = ProductRepo(db)
        self.coupons = CouponValidator(db)

    def new_cart(self, ctx: SessionContext) -> Cart:
        return Cart.for_session(ctx)

    def add_product(self, cart: Cart, product_id: int, quantity: float) -> CartUpdate:
        product = self._snapshot(product_id)
        update = cart.add(product, quantity)

        logger.info(
            f"Added {quantity} kg of product {product_id} to cart of user {cart.user_id}, "
            f"subtotal {cart.subtotal:.2f}"
        )
        self._log_side_effects(cart, update)
        return update

    def update_quantity(self, cart: Cart, product_id: int, quantity: float) -> CartUpdate:
        if cart.get_item(product_id) is None:
            raise ValidationError(ValidationError.ITEM_NOT_IN_CART, f"Product {product_id} is not in the cart")

        # reprice from current catalogue data
        product = self._snapshot(product_id)
        update = cart.update_quantity(product_id, quantity, product)

        logger.info(f"Product {product_id} in cart of user {cart.user_id} set to {quantity} kg")
        self._log_side_effects(cart, update)
        return update

    def remove_product(self, cart: Cart, product_id: int) -> CartUpdate:
        update = cart.remove(product_id)

        logger.info(f"Removed product {product_id} from cart of user {cart.user_id}")
        self._log_side_effects(cart, update)
        return update

    def apply_coupon(self, cart: Cart, code: str) -> CouponValidation:
        """
        Full validation every time, no memory of earlier results.
        Raises ValidationError if a coupon is already attached.
        """
        if cart.coupon is not None:
            raise ValidationError(
                ValidationError.COUPON_ALREADY_APPLIED,
                "Only one coupon can be used per order. Remove current coupon first.",
            )

        result = self.coupons.validate(code, cart.subtotal, cart.user_id)
        if not result.ok:
            logger.info(f"Coupon {result.code} rejected for user {cart.user_id}: {result.reason.value}")
            return result

        cart.apply_coupon(result.coupon)
        logger.info(f"Coupon {result.code} applied to cart of user {cart.user_id}")
        return result

    def remove_coupon(self, cart: Cart) -> CouponTerms | None:
        removed = cart.remove_coupon()
        if removed:
            logger.info(f"Coupon {removed.code} removed from cart of user {cart.user_id}")
        return removed

    def clear(self, cart: Cart) -> Cart:
        logger.info(f"Clearing cart of user {cart.user_id}")
        return cart.clear()

    def _snapshot(self, product_id: int):
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError(f"Product {product_id} does not exist")
        return self.products.snapshot(product)

    @staticmethod
    def _log_side_effects(cart: Cart, update: CartUpdate):
        if update.coupon_detached:
            logger.info(
                f"Coupon {update.coupon_detached.code} detached from cart of user {cart.user_id}, "
                f"order no longer meets minimum value"
            )
        if update.threshold_exceeded:
            logger.info(f"Threshold exceeded in cart of user {cart.user_id}, line price doubled")
