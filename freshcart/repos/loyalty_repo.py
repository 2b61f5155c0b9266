from sqlalchemy import select
from sqlalchemy.orm import Session

from freshcart.data.models.loyalty_settings import LoyaltySettingsModel


class LoyaltySettingsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_settings(self) -> LoyaltySettingsModel | None:
        return self.db.execute(
            select(LoyaltySettingsModel).order_by(LoyaltySettingsModel.id).limit(1)
        ).scalar_one_or_none()
