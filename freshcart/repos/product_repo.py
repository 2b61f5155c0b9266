# freshcart/repos/product_repo.py
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from freshcart.data.models.product import ProductModel
from freshcart.domain.pricing import ProductSnapshot, to_quantity


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id, populate_existing=True)

    def list_products(self) -> List[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.name)).scalars().all())

    def current_stock(self, product_ids: Iterable[int]) -> Dict[int, float]:
        """Stock straight from the table, bypassing anything cached in the session."""
        ids = list(product_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProductModel.id, ProductModel.stock).where(ProductModel.id.in_(ids))
        ).all()
        return {row.id: float(row.stock) for row in rows}

    def decrement_stock(self, product_id: int, amount: Decimal | float) -> bool:
        # conditional on stock, 0 rows means another order got there first
        amount = to_quantity(amount)
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= amount)
            .values(stock=func.round(ProductModel.stock - amount, 3))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: int, amount: Decimal | float) -> bool:
        amount = to_quantity(amount)
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=func.round(ProductModel.stock + amount, 3))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def snapshot(product: ProductModel) -> ProductSnapshot:
        return ProductSnapshot(
            id=product.id,
            name=product.name,
            category=product.category,
            price=float(product.price),
            stock=float(product.stock),
            threshold=float(product.threshold),
        )
