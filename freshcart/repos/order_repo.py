# freshcart/repos/order_repo.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from freshcart.data.models.order import OrderModel
from freshcart.data.models.order_commit import OrderCommitModel
from freshcart.domain.order_status import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def insert_order(self, order: OrderModel) -> int:
        self.db.add(order)
        self.db.flush()
        return order.id

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id, populate_existing=True)

    def assign_carrier_if_unassigned(self, order_id: int, carrier_id: int) -> bool:
        # compare-and-set, only a confirmed order without a carrier matches
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status == OrderStatus.CONFIRMED.value,
                OrderModel.carrier_id.is_(None),
            )
            .values(carrier_id=carrier_id, status=OrderStatus.ASSIGNED.value)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def insert_commit(self, commit: OrderCommitModel) -> OrderCommitModel:
        self.db.add(commit)
        self.db.flush()
        return commit

    def get_commit(self, order_id: int) -> OrderCommitModel | None:
        return self.db.get(OrderCommitModel, order_id)

    # lists
    def _list(self, *criteria, newest_first: bool = True) -> List[OrderModel]:
        order_by = OrderModel.order_time.desc() if newest_first else OrderModel.order_time.asc()
        stmt = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(*criteria)
            .order_by(order_by, OrderModel.id)
            .execution_options(populate_existing=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_for_customer(self, customer_id: int) -> List[OrderModel]:
        return self._list(OrderModel.customer_id == customer_id)

    def list_by_status(self, status: OrderStatus) -> List[OrderModel]:
        return self._list(OrderModel.status == status.value)

    def list_available_for_carriers(self) -> List[OrderModel]:
        return self._list(
            OrderModel.status == OrderStatus.CONFIRMED.value,
            OrderModel.carrier_id.is_(None),
            newest_first=False,
        )

    def list_for_carrier(self, carrier_id: int, status: OrderStatus) -> List[OrderModel]:
        return self._list(
            OrderModel.carrier_id == carrier_id,
            OrderModel.status == status.value,
        )

    def transition_if_status(self, order_id: int, allowed: set, target: OrderStatus, **fields) -> bool:
        """Status change guarded by the status the caller saw."""
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                OrderModel.status.in_([s.value for s in allowed]),
            )
            .values(status=target.value, **fields)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
