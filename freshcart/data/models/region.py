from sqlalchemy import Column, Integer, String, Float
from freshcart.data.database import Base

class RegionModel(Base):
    __tablename__ = "regions"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    distance_km = Column(Float, nullable=False, default=0.0)
