#freshcart/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from freshcart.api.deps import get_cart_store, require_user, validation_detail
from freshcart.data.database import get_db
from freshcart.domain.cart import Cart
from freshcart.domain.context import Role
from freshcart.domain.errors import NotFoundError, ValidationError
from freshcart.domain.schemas import (
    CartChangeOut,
    CartOut,
    CouponIn,
    CouponResultOut,
    ItemIn,
    QuantityIn,
)
from freshcart.services.cart_service import CartService
from freshcart.services.cart_store import CartStore
from freshcart.services.user_service import UserService

router = APIRouter(prefix="/carts", tags=["carts"])


def load_cart(db: Session, store: CartStore, user_id: int, region_id: int | None = None) -> Cart:
    """
    The session's cart, created on first use with the customer's region and
    loyalty discount.
    """
    require_user(db, user_id, Role.CUSTOMER)
    cart = store.load(user_id)
    if cart is not None:
        return cart

    try:
        ctx = UserService(db).session_context(user_id, region_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CartService(db).new_cart(ctx)


@router.get("/me", response_model=CartOut)
def get_cart(
    user_id: int = Query(...),
    region_id: int | None = Query(None),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id, region_id)
    store.save(cart)
    return CartOut.from_cart(cart)


@router.post("/me/items", response_model=CartChangeOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    region_id: int | None = Query(None),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id, region_id)
    try:
        update = CartService(db).add_product(cart, payload.product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))

    store.save(cart)
    return CartChangeOut.build(cart, update)


@router.put("/me/items/{product_id}", response_model=CartChangeOut)
def update_item(
    product_id: int,
    payload: QuantityIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id)
    try:
        update = CartService(db).update_quantity(cart, product_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))

    store.save(cart)
    return CartChangeOut.build(cart, update)


@router.delete("/me/items/{product_id}", response_model=CartChangeOut)
def remove_item(
    product_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id)
    try:
        update = CartService(db).remove_product(cart, product_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))

    store.save(cart)
    return CartChangeOut.build(cart, update)


@router.post("/me/coupon", response_model=CouponResultOut)
def apply_coupon(
    payload: CouponIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id)
    try:
        result = CartService(db).apply_coupon(cart, payload.code)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))

    store.save(cart)
    return CouponResultOut(
        applied=result.ok,
        reason=result.reason.value if result.reason else None,
        message=result.message,
        cart=CartOut.from_cart(cart),
    )


@router.delete("/me/coupon", response_model=CartOut)
def remove_coupon(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = load_cart(db, store, user_id)
    CartService(db).remove_coupon(cart)
    store.save(cart)
    return CartOut.from_cart(cart)


@router.delete("/me/items", response_model=CartOut)
def clear_items(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    cart = CartService(db).clear(load_cart(db, store, user_id))
    store.save(cart)
    return CartOut.from_cart(cart)


@router.delete("/me", status_code=204)
def clear_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    store: CartStore = Depends(get_cart_store),
):
    """Logout: the session cart is discarded."""
    require_user(db, user_id, Role.CUSTOMER)
    store.drop(user_id)
    return Response(status_code=204)
