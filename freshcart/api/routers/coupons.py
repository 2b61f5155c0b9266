# freshcart/api/routers/coupons.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from freshcart.api.deps import require_user, validation_detail
from freshcart.data.database import get_db
from freshcart.domain.context import Role
from freshcart.domain.errors import ValidationError
from freshcart.domain.schemas import CouponCreate, CouponOut
from freshcart.services.coupon_service import CouponService, expiration_info, terms_of
from freshcart.utils.timeutils import utcnow

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/", response_model=CouponOut, status_code=201)
def create_coupon(
    payload: CouponCreate,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.OWNER)
    svc = CouponService(db)
    try:
        return svc.create_coupon(
            code=payload.code or svc.generate_unique_code(),
            discount_percentage=payload.discount_percentage,
            expiration_date=payload.expiration_date,
            minimum_order_value=payload.minimum_order_value,
            maximum_discount=payload.maximum_discount,
            user_id=payload.user_id,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))


@router.get("/", response_model=List[CouponOut])
def list_coupons(
    user_id: int = Query(...),
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.OWNER)
    svc = CouponService(db)
    return svc.get_active_coupons() if active_only else svc.get_all_coupons()


@router.get("/available", response_model=List[CouponOut])
def available_coupons(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Unused, unexpired coupons the customer can apply: general ones and their own."""
    require_user(db, user_id, Role.CUSTOMER)
    today = utcnow().date()
    return [
        CouponOut.model_validate(c).model_copy(
            update={"description": terms_of(c).describe(), "expires": expiration_info(c, today)}
        )
        for c in CouponService(db).get_available_coupons(user_id, today)
    ]
