from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, UniqueConstraint, CheckConstraint
from datetime import datetime, timezone

from freshcart.data.database import Base


class CarrierRatingModel(Base):
    __tablename__ = "carrier_ratings"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    carrier_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    rating = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # one rating per (order, customer)
    __table_args__ = (
        UniqueConstraint("order_id", "customer_id", name="u_rating_order_customer"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_rating_range"),
    )
