# freshcart/repos/rating_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from freshcart.data.models.rating import CarrierRatingModel


class RatingRepo:
    def __init__(self, db: Session):
        self.db = db

    def insert_rating(self, rating: CarrierRatingModel) -> CarrierRatingModel:
        self.db.add(rating)
        self.db.flush()
        return rating

    def find_rating(self, order_id: int, customer_id: int) -> CarrierRatingModel | None:
        return self.db.execute(
            select(CarrierRatingModel).where(
                CarrierRatingModel.order_id == order_id,
                CarrierRatingModel.customer_id == customer_id,
            ).execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def carrier_summary(self, carrier_id: int) -> tuple[float, int]:
        avg, count = self.db.execute(
            select(func.avg(CarrierRatingModel.rating), func.count(CarrierRatingModel.id))
            .where(CarrierRatingModel.carrier_id == carrier_id)
        ).one()
        return (float(avg) if avg is not None else 0.0, int(count))
