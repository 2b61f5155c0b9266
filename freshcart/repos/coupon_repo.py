# freshcart/repos/coupon_repo.py
from datetime import date
from typing import List

from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from freshcart.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_coupon(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel)
            .where(CouponModel.code == code)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def code_exists(self, code: str) -> bool:
        return self.db.execute(
            select(CouponModel.id).where(CouponModel.code == code)
        ).first() is not None

    def insert_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.flush()
        return coupon

    def mark_coupon_used(self, code: str, order_id: int) -> bool:
        # only flips an unused coupon, a concurrent checkout gets rowcount 0
        result = self.db.execute(
            update(CouponModel)
            .where(CouponModel.code == code, CouponModel.is_used.is_(False))
            .values(is_used=True, order_id=order_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def restore_coupon(self, code: str) -> bool:
        result = self.db.execute(
            update(CouponModel)
            .where(CouponModel.code == code)
            .values(is_used=False, order_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def find_all(self) -> List[CouponModel]:
        return list(self.db.execute(select(CouponModel).order_by(CouponModel.id)).scalars().all())

    def find_all_active(self, today: date) -> List[CouponModel]:
        stmt = select(CouponModel).where(
            or_(CouponModel.expiration_date.is_(None), CouponModel.expiration_date >= today)
        ).order_by(CouponModel.id)
        return list(self.db.execute(stmt).scalars().all())

    def find_available_for_user(self, user_id: int, today: date) -> List[CouponModel]:
        stmt = select(CouponModel).where(
            CouponModel.is_used.is_(False),
            or_(CouponModel.user_id.is_(None), CouponModel.user_id == user_id),
            or_(CouponModel.expiration_date.is_(None), CouponModel.expiration_date >= today),
        ).order_by(CouponModel.expiration_date)
        return list(self.db.execute(stmt).scalars().all())
