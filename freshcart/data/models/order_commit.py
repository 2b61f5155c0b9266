from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, DateTime
from sqlalchemy.orm import relationship

from freshcart.data.database import Base


class OrderCommitModel(Base):
    """
    What a checkout actually changed: stock taken per product and the coupon
    consumed. Cancellation replays the inverse of these rows once.
    """
    __tablename__ = "order_commits"

    order_id = Column(Integer, ForeignKey("orders.id"), primary_key=True)
    coupon_code = Column(String, nullable=True)
    committed_at = Column(DateTime(timezone=True), nullable=False)
    reversed_at = Column(DateTime(timezone=True), nullable=True)

    lines = relationship(
        "OrderCommitLineModel",
        back_populates="commit",
        cascade="all, delete-orphan",
    )


class OrderCommitLineModel(Base):
    __tablename__ = "order_commit_lines"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("order_commits.order_id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    amount = Column(Numeric(12, 3, asdecimal=False), nullable=False)

    commit = relationship("OrderCommitModel", back_populates="lines")
