"""Tests for carriers claiming confirmed orders."""

import threading
from datetime import timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from freshcart.data.database import Base
from freshcart.data.models import OrderModel, UserModel
from freshcart.domain.errors import InvalidTransitionError, NotFoundError
from freshcart.domain.order_status import OrderStatus
from freshcart.services.carrier_service import AssignResult, CarrierService
from freshcart.services.order_service import OrderService


@pytest.fixture
def confirmed_order(db, notifier, filled_cart, delivery_time, now):
    service = OrderService(db, notification_service=notifier)
    order_id = service.create_order(filled_cart, delivery_time, now).order.id
    service.confirm_order(order_id)
    return order_id


class TestAssign:
    def test_claims_confirmed_order(self, db, people, confirmed_order):
        result = CarrierService(db).assign(confirmed_order, people["carrier"].id)

        assert result == AssignResult.OK
        order = OrderService(db).get_order(confirmed_order)
        assert order.status == OrderStatus.ASSIGNED.value
        assert order.carrier_id == people["carrier"].id

    def test_second_carrier_loses(self, db, people, confirmed_order):
        svc = CarrierService(db)
        svc.assign(confirmed_order, people["carrier"].id)

        result = svc.assign(confirmed_order, people["other_carrier"].id)

        assert result == AssignResult.ALREADY_ASSIGNED
        assert result.message == "Another carrier has already taken this order"
        assert OrderService(db).get_order(confirmed_order).carrier_id == people["carrier"].id

    def test_stale_read_still_loses(self, session_factory, people, confirmed_order):
        first, second = session_factory(), session_factory()
        try:
            # both carriers saw the order as available
            assert [o.id for o in CarrierService(first).get_available_orders()] == [confirmed_order]
            assert [o.id for o in CarrierService(second).get_available_orders()] == [confirmed_order]

            assert CarrierService(first).assign(confirmed_order, people["carrier"].id) == AssignResult.OK
            assert (
                CarrierService(second).assign(confirmed_order, people["other_carrier"].id)
                == AssignResult.ALREADY_ASSIGNED
            )
        finally:
            first.close()
            second.close()

    def test_pending_order_cannot_be_claimed(self, db, notifier, people, filled_cart, delivery_time, now):
        order_id = OrderService(db, notification_service=notifier).create_order(filled_cart, delivery_time, now).order.id

        with pytest.raises(InvalidTransitionError):
            CarrierService(db).assign(order_id, people["carrier"].id)

    def test_unknown_order(self, db, people):
        with pytest.raises(NotFoundError):
            CarrierService(db).assign(404, people["carrier"].id)

    def test_carrier_lists(self, db, notifier, people, confirmed_order, now):
        svc = CarrierService(db)
        carrier = people["carrier"].id

        svc.assign(confirmed_order, carrier)
        assert svc.get_available_orders() == []
        assert [o.id for o in svc.get_current_orders(carrier)] == [confirmed_order]

        OrderService(db, notification_service=notifier).mark_delivered(confirmed_order, carrier, now + timedelta(hours=2))
        assert svc.get_current_orders(carrier) == []
        assert [o.id for o in svc.get_completed_orders(carrier)] == [confirmed_order]
        assert svc.get_completed_orders(people["other_carrier"].id) == []


def test_concurrent_claims_have_one_winner(tmp_path, now):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # take the write lock at BEGIN so the loser waits instead of failing
    @event.listens_for(engine, "connect")
    def _no_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    with factory() as setup:
        setup.add_all([UserModel(id=1, name="customer"), UserModel(id=2, name="a", role="carrier"), UserModel(id=3, name="b", role="carrier")])
        setup.add(
            OrderModel(
                id=1,
                customer_id=1,
                status=OrderStatus.CONFIRMED.value,
                subtotal=60,
                discount=0,
                vat=10.8,
                total=70.8,
                order_time=now,
                requested_delivery_time=now + timedelta(hours=3),
            )
        )
        setup.commit()

    barrier = threading.Barrier(2)
    results = {}

    def claim(carrier_id):
        with factory() as session:
            barrier.wait()
            results[carrier_id] = CarrierService(session).assign(1, carrier_id)

    threads = [threading.Thread(target=claim, args=(cid,)) for cid in (2, 3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(results.values()) == [AssignResult.ALREADY_ASSIGNED, AssignResult.OK]

    with factory() as check:
        order = check.get(OrderModel, 1)
        winner = next(cid for cid, r in results.items() if r == AssignResult.OK)
        assert order.carrier_id == winner
        assert order.status == OrderStatus.ASSIGNED.value

    engine.dispose()
