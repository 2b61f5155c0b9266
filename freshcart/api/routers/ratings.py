# freshcart/api/routers/ratings.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from freshcart.api.deps import require_user, validation_detail
from freshcart.data.database import get_db
from freshcart.domain.context import Role
from freshcart.domain.errors import NotFoundError, ValidationError
from freshcart.domain.schemas import RatingCheckOut, RatingIn, RatingOut
from freshcart.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.get("/{order_id}", response_model=RatingCheckOut)
def rating_check(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """Whether the customer may rate this delivery, with the earlier rating if any."""
    require_user(db, user_id, Role.CUSTOMER)
    try:
        decision = RatingService(db).check(order_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    existing = decision.existing_rating
    return RatingCheckOut(
        allowed=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        message=decision.message,
        existing=RatingOut.model_validate(existing) if existing is not None else None,
    )


@router.post("/{order_id}", response_model=RatingOut, status_code=201)
def rate_carrier(
    order_id: int,
    payload: RatingIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.CUSTOMER)
    svc = RatingService(db)
    try:
        decision = svc.rate_carrier(order_id, user_id, payload.rating, payload.comment)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=validation_detail(e))

    if not decision.allowed:
        raise HTTPException(
            status_code=409,
            detail={"reason": decision.reason.value, "message": decision.message},
        )
    return svc.get_existing_rating(order_id, user_id)
