# freshcart/services/order_service.py
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from freshcart.data.models.order import OrderModel
from freshcart.data.models.order_item import OrderItemModel
from freshcart.data.models.order_commit import OrderCommitModel, OrderCommitLineModel
from freshcart.domain.cart import Cart
from freshcart.domain.errors import (
    CommitError,
    ConflictError,
    CouponInvalidatedError,
    InvalidTransitionError,
    NotFoundError,
    StockShortfallError,
    ValidationError,
)
from freshcart.domain.order_status import OrderStatus, ensure_transition
from freshcart.domain.policies import CancellationDecision, CancellationPolicy
from freshcart.domain.pricing import round_money, to_quantity
from freshcart.repos.coupon_repo import CouponRepo
from freshcart.repos.order_repo import OrderRepo
from freshcart.repos.product_repo import ProductRepo
from freshcart.services.coupon_service import CouponReason, CouponValidator
from freshcart.services.loyalty_service import LoyaltyService
from freshcart.services.notification_service import NotificationService
from freshcart.services.stock_guard import StockGuard, StockIssue
from freshcart.utils.logging import get_logger
from freshcart.utils.settings import MIN_ORDER_VALUE, DELIVERY_MIN_HOURS, DELIVERY_MAX_HOURS
from freshcart.utils.timeutils import as_utc, utcnow

logger = get_logger(__name__)

CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED}


@dataclass
class PlacedOrder:
    order: OrderModel
    # the session's cart after checkout, always empty
    cart: Cart


class OrderService:
    """
    Order lifecycle: checkout commit, status changes, cancellation.

    Each command is one short transaction on the session; it commits once
    at the end or rolls back everything it did.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        invoice_renderer: Optional[Callable[[OrderModel], object]] = None,
        cancellation_policy: Optional[CancellationPolicy] = None,
        min_order_value: float = MIN_ORDER_VALUE,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.coupons = CouponRepo(db)
        self.coupon_validator = CouponValidator(db)
        self.stock_guard = StockGuard(db)
        self.policy = cancellation_policy or CancellationPolicy()
        self.notification_service = notification_service or NotificationService()
        self.invoice_renderer = invoice_renderer
        self.min_order_value = min_order_value

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int, user_id: int | None = None) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError(f"Order {order_id} does not exist")

        if user_id is not None and user_id not in (order.customer_id, order.carrier_id):
            raise PermissionError("No access to this order")

        return order

    def get_history(self, customer_id: int) -> List[OrderModel]:
        return self.repo.list_for_customer(customer_id)

    def get_orders_by_status(self, status: OrderStatus) -> List[OrderModel]:
        return self.repo.list_by_status(status)

    def can_cancel(self, order_id: int, now: datetime | None = None) -> CancellationDecision:
        return self.policy.can_cancel(self.get_order(order_id), now)

    @staticmethod
    def is_valid_delivery_time(requested: datetime, now: datetime | None = None) -> bool:
        now = as_utc(now) if now else utcnow()
        requested = as_utc(requested)
        earliest = now + timedelta(hours=DELIVERY_MIN_HOURS)
        latest = now + timedelta(hours=DELIVERY_MAX_HOURS)
        return earliest <= requested <= latest

    # =====================================================
    # COMMANDS
    # =====================================================
    def check_cart(self, cart: Cart, requested_delivery_time: datetime, now: datetime | None = None):
        """
        Everything checkout verifies before it writes.

        Validation errors first (nothing read from storage), then the
        conflict checks against fresh state: stock and the coupon. A coupon
        that no longer validates is detached from the cart before raising.
        """
        if cart.is_empty():
            raise ValidationError(ValidationError.EMPTY_CART, "Your cart is empty")

        if cart.subtotal < self.min_order_value:
            raise ValidationError(
                ValidationError.BELOW_MINIMUM_ORDER,
                f"Minimum order value is {self.min_order_value:.2f} TL",
            )

        if not self.is_valid_delivery_time(requested_delivery_time, now):
            raise ValidationError(
                ValidationError.INVALID_DELIVERY_WINDOW,
                f"Please select a delivery time between {DELIVERY_MIN_HOURS} and "
                f"{DELIVERY_MAX_HOURS} hours from now",
            )

        stock = self.stock_guard.validate(cart)
        if not stock.ok:
            raise StockShortfallError(stock.issues)

        if cart.coupon is not None:
            today = (as_utc(now) if now else utcnow()).date()
            result = self.coupon_validator.validate(cart.coupon.code, cart.subtotal, cart.user_id, today)
            if not result.ok:
                cart.remove_coupon()
                raise CouponInvalidatedError(result.code, result.reason)

    def create_order(
        self,
        cart: Cart,
        requested_delivery_time: datetime,
        now: datetime | None = None,
    ) -> PlacedOrder:
        """
        Checkout.

        1. Re-validates the cart (see check_cart)
        2. In one transaction: order + line snapshot, stock decrement,
           coupon consumption, commit record
        3. Notification and invoice, failures there are logged only

        On any failure in step 2 nothing is written and the cart is left as
        it was, so the user can retry.
        """
        now = as_utc(now) if now else utcnow()
        self.check_cart(cart, requested_delivery_time, now)

        money = cart.totals.as_money()
        coupon_code = cart.coupon.code if cart.coupon else None

        logger.info(f"Placing order for user {cart.user_id}, total {money.total}")

        try:
            order = OrderModel(
                customer_id=cart.user_id,
                region_id=cart.region.id or None,
                status=OrderStatus.PENDING.value,
                subtotal=money.subtotal,
                discount=money.discount,
                vat=money.vat,
                total=money.total,
                coupon_code=coupon_code,
                order_time=now,
                requested_delivery_time=as_utc(requested_delivery_time),
                items=[
                    OrderItemModel(
                        position=pos,
                        product_id=item.product_id,
                        product_name=item.product.name,
                        quantity=item.quantity,
                        unit_price=round_money(item.unit_price),
                        total_price=round_money(item.total),
                    )
                    for pos, item in enumerate(cart.items)
                ],
            )
            order_id = self.repo.insert_order(order)

            commit = OrderCommitModel(order_id=order_id, coupon_code=coupon_code, committed_at=now)

            for item in cart.items:
                # stock can still move between the guard and here
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    available = self.products.current_stock([item.product_id]).get(item.product_id, 0.0)
                    raise StockShortfallError(
                        [StockIssue(item.product_id, item.product.name, item.quantity, available)]
                    )
                commit.lines.append(
                    OrderCommitLineModel(product_id=item.product_id, amount=to_quantity(item.quantity))
                )

            if coupon_code and not self.coupons.mark_coupon_used(coupon_code, order_id):
                raise CouponInvalidatedError(coupon_code, CouponReason.ALREADY_USED)

            self.repo.insert_commit(commit)
            self.db.commit()

        except ConflictError as e:
            self.db.rollback()
            logger.info(f"Order for user {cart.user_id} rejected: {e}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Order commit failed for user {cart.user_id}: {e}")
            raise CommitError("Order could not be placed") from e

        logger.info(f"Order {order.id} placed by user {cart.user_id}")

        self._after_commit(order)
        return PlacedOrder(order=order, cart=cart.clear())

    def confirm_order(self, order_id: int) -> OrderModel:
        order = self.get_order(order_id)
        ensure_transition(order.status, OrderStatus.CONFIRMED)

        # the customer may cancel between our read and this write
        if not self.repo.transition_if_status(order_id, {OrderStatus.PENDING}, OrderStatus.CONFIRMED):
            self.db.rollback()
            self._raise_stale_transition(order_id, OrderStatus.CONFIRMED)
        self.db.commit()

        logger.info(f"Order {order_id} confirmed")
        return self.get_order(order_id)

    def mark_delivered(self, order_id: int, carrier_id: int, now: datetime | None = None) -> OrderModel:
        now = as_utc(now) if now else utcnow()
        order = self.get_order(order_id)

        if order.carrier_id != carrier_id:
            raise PermissionError("Only the assigned carrier can complete this delivery")

        ensure_transition(order.status, OrderStatus.DELIVERED)
        if not self.repo.transition_if_status(
            order_id, {OrderStatus.ASSIGNED}, OrderStatus.DELIVERED, actual_delivery_time=now
        ):
            self.db.rollback()
            self._raise_stale_transition(order_id, OrderStatus.DELIVERED)
        self.db.commit()
        order = self.get_order(order_id)

        logger.info(f"Order {order_id} delivered by carrier {carrier_id}")

        # downstream, never undoes the delivery
        try:
            LoyaltyService(self.db).record_delivery(order.customer_id, float(order.total))
        except Exception as e:
            logger.error(f"Loyalty update failed for order {order_id}: {e}")

        try:
            self.notification_service.send_order_delivered(order.customer_id, order_id)
        except Exception as e:
            logger.warning(f"Delivery notification failed for order {order_id}: {e}")
        return order

    def cancel_order(self, order_id: int, customer_id: int, now: datetime | None = None) -> CancellationDecision:
        """
        Cancels if the policy allows it, replaying the inverse of the commit
        record: stock back per line, consumed coupon back to unused.
        """
        now = as_utc(now) if now else utcnow()
        order = self.get_order(order_id)

        if order.customer_id != customer_id:
            raise PermissionError("Only the customer who placed the order can cancel it")

        decision = self.policy.can_cancel(order, now)
        if not decision.allowed:
            logger.info(f"Cancellation of order {order_id} denied: {decision.reason.value}")
            return decision

        ensure_transition(order.status, OrderStatus.CANCELLED)

        try:
            # a carrier may have claimed it since we read it
            if not self.repo.transition_if_status(order_id, CANCELLABLE, OrderStatus.CANCELLED):
                self.db.rollback()
                return self.policy.can_cancel(self.get_order(order_id), now)

            commit = self.repo.get_commit(order_id)
            if commit is not None and commit.reversed_at is None:
                for line in commit.lines:
                    self.products.increment_stock(line.product_id, line.amount)
                if commit.coupon_code:
                    self.coupons.restore_coupon(commit.coupon_code)
                commit.reversed_at = now

            self.db.commit()

        except Exception as e:
            self.db.rollback()
            logger.error(f"Cancellation of order {order_id} failed: {e}")
            raise CommitError("Order could not be cancelled") from e

        logger.info(f"Order {order_id} cancelled by user {customer_id}")
        return decision

    def _raise_stale_transition(self, order_id: int, target: OrderStatus):
        current = OrderStatus(self.get_order(order_id).status)
        logger.info(f"Order {order_id} moved to {current.value} before it could become {target.value}")
        raise InvalidTransitionError(current, target)

    # =====================================================
    # internals
    # =====================================================
    def _after_commit(self, order: OrderModel):
        try:
            self.notification_service.send_order_placed(order.customer_id, order.id, order.total)
        except Exception as e:
            logger.warning(f"Order placed notification failed for order {order.id}: {e}")

        if self.invoice_renderer is None:
            return
        try:
            self.invoice_renderer(order)
        except Exception as e:
            # invoice failure does not stop the order
            logger.error(f"Invoice generation failed for order {order.id}: {e}")
