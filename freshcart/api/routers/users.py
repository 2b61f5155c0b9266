from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from freshcart.data.database import get_db
from freshcart.domain.errors import NotFoundError
from freshcart.services.loyalty_service import LoyaltyService
from freshcart.services.user_service import UserService
from freshcart.domain.schemas import LoyaltyOut, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])

@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.create_user(payload)
    except NotFoundError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    try:
        return service.get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("/{user_id}/loyalty", response_model=LoyaltyOut)
def get_loyalty(user_id: int, db: Session = Depends(get_db)):
    try:
        UserService(db).get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    loyalty = LoyaltyService(db)
    return LoyaltyOut(
        user_id=user_id,
        tier=loyalty.tier_for_user(user_id),
        discount_pct=loyalty.discount_for_user(user_id),
        progress=loyalty.progress_for_user(user_id),
    )
