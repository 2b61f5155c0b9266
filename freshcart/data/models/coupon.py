from datetime import date

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Boolean, Date

from freshcart.data.database import Base


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True, index=True)
    discount_percentage = Column(Numeric(5, 2, asdecimal=False), nullable=False)

    # null = general coupon
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    minimum_order_value = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    maximum_discount = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    created_date = Column(Date, nullable=False, default=date.today)
    expiration_date = Column(Date, nullable=True)

    is_used = Column(Boolean, nullable=False, default=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
