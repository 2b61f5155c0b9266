from sqlalchemy import Column, Integer, String, ForeignKey
from freshcart.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer")  # customer, carrier, owner
    region_id = Column(Integer, ForeignKey("regions.id"), nullable=True)
    completed_transactions = Column(Integer, nullable=False, default=0)
    loyalty_points = Column(Integer, nullable=False, default=0)
