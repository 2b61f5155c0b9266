# freshcart/api/routers/carriers.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from freshcart.api.deps import require_user
from freshcart.data.database import get_db
from freshcart.domain.context import Role
from freshcart.domain.errors import CommitError, InvalidTransitionError, NotFoundError
from freshcart.domain.schemas import CarrierSummaryOut, DecisionOut, OrderOut
from freshcart.services.carrier_service import AssignResult, CarrierService

router = APIRouter(prefix="/carriers", tags=["carriers"])


@router.get("/orders/available", response_model=List[OrderOut])
def available_orders(user_id: int = Query(...), db: Session = Depends(get_db)):
    require_user(db, user_id, Role.CARRIER)
    return CarrierService(db).get_available_orders()


@router.get("/orders/current", response_model=List[OrderOut])
def current_orders(user_id: int = Query(...), db: Session = Depends(get_db)):
    require_user(db, user_id, Role.CARRIER)
    return CarrierService(db).get_current_orders(user_id)


@router.get("/orders/completed", response_model=List[OrderOut])
def completed_orders(user_id: int = Query(...), db: Session = Depends(get_db)):
    require_user(db, user_id, Role.CARRIER)
    return CarrierService(db).get_completed_orders(user_id)


@router.post("/orders/{order_id}/assign", response_model=DecisionOut)
def assign_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    require_user(db, user_id, Role.CARRIER)
    svc = CarrierService(db)
    try:
        result = svc.assign(order_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CommitError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if result == AssignResult.ALREADY_ASSIGNED:
        raise HTTPException(status_code=409, detail={"reason": result.value, "message": result.message})
    return DecisionOut(allowed=True, message=result.message)


@router.get("/{carrier_id}/rating", response_model=CarrierSummaryOut)
def rating_summary(carrier_id: int, db: Session = Depends(get_db)):
    average, count = CarrierService(db).get_rating_summary(carrier_id)
    return CarrierSummaryOut(carrier_id=carrier_id, average_rating=round(average, 2), ratings=count)
