# freshcart/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from freshcart.api.deps import get_cart_store, get_notification_service, require_user, validation_detail
from freshcart.data.database import get_db
from freshcart.domain.context import Role
from freshcart.domain.errors import (
    CommitError,
    CouponInvalidatedError,
    InvalidTransitionError,
    NotFoundError,
    StockShortfallError,
    ValidationError,
)
from freshcart.domain.order_status import OrderStatus
from freshcart.domain.schemas import CheckoutIn, DecisionOut, OrderOut, StockIssueOut
from freshcart.services.cart_store import CartStore
from freshcart.services.notification_service import NotificationService
from freshcart.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, notification_service: NotificationService | None = None):
    return OrderService(db, notification_service=notification_service)


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
    notifications: NotificationService = Depends(get_notification_service),
):
    """
    Places an order from the session cart.
    The cart is dropped only when the order is committed.
    """
    require_user(db, user_id, Role.CUSTOMER)
    cart = store.load(user_id)
    if cart is None:
        raise HTTPException(
            status_code=400,
            detail={"code": ValidationError.EMPTY_CART, "message": "Your cart is empty"},
        )

    svc = get_service(db, notifications)
    try:
        placed = svc.create_order(cart, payload.requested_delivery_time)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))
    except StockShortfallError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "code": "STOCK_SHORTFALL",
                "message": str(e),
                "issues": [StockIssueOut(**vars(i)).model_dump() for i in e.issues],
            },
        )
    except CouponInvalidatedError as e:
        # the coupon was detached, keep that in the session
        store.save(cart)
        raise HTTPException(
            status_code=409,
            detail={"code": "COUPON_INVALIDATED", "reason": e.reason.value, "message": str(e)},
        )
    except CommitError as e:
        raise HTTPException(status_code=500, detail=str(e))

    store.drop(user_id)
    return placed.order


@router.get("/", response_model=List[OrderOut])
def order_history(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.CUSTOMER)
    return get_service(db).get_history(user_id)


@router.get("/status/{status}", response_model=List[OrderOut])
def orders_by_status(
    status: OrderStatus,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.OWNER)
    return get_service(db).get_orders_by_status(status)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Order details. The owner sees every order, customers and carriers
    only their own.
    """
    user = require_user(db, user_id)
    svc = get_service(db)
    try:
        return svc.get_order(order_id, None if user.role == Role.OWNER.value else user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{order_id}/confirm", response_model=OrderOut)
def confirm_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.OWNER)
    svc = get_service(db)
    try:
        return svc.confirm_order(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{order_id}/deliver", response_model=OrderOut)
def deliver_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    require_user(db, user_id, Role.CARRIER)
    svc = get_service(db, notifications)
    try:
        return svc.mark_delivered(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/{order_id}/cancellation", response_model=DecisionOut)
def cancellation_check(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.CUSTOMER)
    svc = get_service(db)
    try:
        svc.get_order(order_id, user_id)
        decision = svc.can_cancel(order_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return DecisionOut(
        allowed=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        message=decision.message,
    )


@router.post("/{order_id}/cancel", response_model=DecisionOut)
def cancel_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.CUSTOMER)
    svc = get_service(db)
    try:
        decision = svc.cancel_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CommitError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not decision.allowed:
        raise HTTPException(
            status_code=409,
            detail={"reason": decision.reason.value, "message": decision.message},
        )
    return DecisionOut(allowed=True, message="Order cancelled")
