from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from freshcart.data.models.region import RegionModel
from freshcart.domain.context import Region


class RegionRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_region(self, region_id: int) -> RegionModel | None:
        return self.db.get(RegionModel, region_id)

    def list_regions(self) -> List[RegionModel]:
        return list(self.db.execute(select(RegionModel).order_by(RegionModel.distance_km)).scalars().all())

    @staticmethod
    def to_domain(region: RegionModel) -> Region:
        return Region(id=region.id, name=region.name, distance_km=float(region.distance_km))
