from sqlalchemy import Column, Integer, Float

from freshcart.data.database import Base


class LoyaltySettingsModel(Base):
    __tablename__ = "loyalty_settings"

    id = Column(Integer, primary_key=True)

    tier1_threshold = Column(Integer, nullable=False, default=5)
    tier1_discount = Column(Float, nullable=False, default=5.0)
    tier2_threshold = Column(Integer, nullable=False, default=10)
    tier2_discount = Column(Float, nullable=False, default=10.0)
    tier3_threshold = Column(Integer, nullable=False, default=20)
    tier3_discount = Column(Float, nullable=False, default=15.0)

    points_per_tl = Column(Float, nullable=False, default=1.0)
