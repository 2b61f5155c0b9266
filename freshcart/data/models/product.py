from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint

from freshcart.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)  # vegetable, fruit

    # kg based, fractional
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    stock = Column(Numeric(12, 3, asdecimal=False), nullable=False, default=0)
    threshold = Column(Numeric(12, 3, asdecimal=False), nullable=False)

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_non_negative"),
        CheckConstraint("threshold > 0", name="ck_product_threshold_positive"),
    )
