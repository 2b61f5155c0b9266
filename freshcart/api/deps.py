# freshcart/api/deps.py
from fastapi import HTTPException
from sqlalchemy.orm import Session

from freshcart.data.models.user import UserModel
from freshcart.domain.context import Role
from freshcart.domain.errors import NotFoundError, ValidationError
from freshcart.services.cart_store import CartStore
from freshcart.services.notification_service import NotificationService
from freshcart.services.user_service import UserService


def get_cart_store() -> CartStore:
    return CartStore()


def get_notification_service() -> NotificationService:
    return NotificationService()


def require_user(db: Session, user_id: int, *roles: Role) -> UserModel:
    """Resolves the caller; 404 for an unknown id, 403 for the wrong role."""
    try:
        user = UserService(db).get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if roles and Role(user.role) not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise HTTPException(status_code=403, detail=f"Only {allowed} can do this")
    return user


def validation_detail(e: ValidationError) -> dict:
    return {"code": e.code, "message": e.message}
