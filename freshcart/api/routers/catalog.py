# freshcart/api/routers/catalog.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from freshcart.data.database import get_db
from freshcart.domain.context import STORE_REGION
from freshcart.domain.pricing import round_money
from freshcart.domain.schemas import ProductOut, RegionOut
from freshcart.repos.product_repo import ProductRepo
from freshcart.repos.region_repo import RegionRepo

router = APIRouter(tags=["catalog"])


@router.get("/regions", response_model=List[RegionOut])
def list_regions(db: Session = Depends(get_db)):
    regions = [RegionRepo.to_domain(r) for r in RegionRepo(db).list_regions()]
    return [
        RegionOut(
            id=r.id,
            name=r.name,
            distance_km=r.distance_km,
            price_difference=r.price_difference_text(),
            delivery_fee=round_money(r.delivery_fee),
        )
        for r in regions
    ]


@router.get("/products", response_model=List[ProductOut])
def list_products(
    region_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    region = STORE_REGION
    if region_id is not None:
        repo = RegionRepo(db)
        model = repo.get_region(region_id)
        if not model:
            raise HTTPException(status_code=404, detail=f"Region {region_id} does not exist")
        region = repo.to_domain(model)

    return [
        ProductOut(
            id=p.id,
            name=p.name,
            category=p.category,
            price=round_money(float(p.price) * region.price_factor),
            stock=float(p.stock),
            threshold=float(p.threshold),
        )
        for p in ProductRepo(db).list_products()
    ]
