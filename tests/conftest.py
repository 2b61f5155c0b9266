"""Pytest fixtures for freshcart tests."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from freshcart.data.database import Base
from freshcart.data.models import (
    CouponModel,
    LoyaltySettingsModel,
    ProductModel,
    RegionModel,
    UserModel,
)
from freshcart.domain.cart import Cart
from freshcart.domain.context import Role, STORE_REGION
from freshcart.services.cart_service import CartService
from freshcart.services.cart_store import CartStore

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class RecordingNotifier:
    """Stands in for NotificationService, optionally failing every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.placed = []
        self.delivered = []

    def send_order_placed(self, user_id, order_id, total):
        if self.fail:
            raise RuntimeError("notification queue down")
        self.placed.append((user_id, order_id, total))
        return True

    def send_order_delivered(self, user_id, order_id):
        if self.fail:
            raise RuntimeError("notification queue down")
        self.delivered.append((user_id, order_id))
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def cart_store(fake_redis):
    return CartStore(client=fake_redis, ttl=60)


@pytest.fixture
def make_region(db):
    def _make(name="Uskudar", distance_km=10.0):
        region = RegionModel(name=name, distance_km=distance_km)
        db.add(region)
        db.commit()
        return region

    return _make


@pytest.fixture
def make_user(db):
    def _make(user_id, role=Role.CUSTOMER, name=None, region_id=None, completed_transactions=0):
        user = UserModel(
            id=user_id,
            name=name or f"user-{user_id}",
            role=role.value,
            region_id=region_id,
            completed_transactions=completed_transactions,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Tomato", price=10.0, stock=100.0, threshold=5.0, category="vegetable"):
        product = ProductModel(
            name=name,
            category=category,
            price=price,
            stock=stock,
            threshold=threshold,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def make_coupon(db):
    def _make(
        code="SAVE10",
        discount_percentage=10.0,
        minimum_order_value=0.0,
        maximum_discount=None,
        user_id=None,
        expiration_date=None,
        is_used=False,
    ):
        coupon = CouponModel(
            code=code,
            discount_percentage=discount_percentage,
            minimum_order_value=minimum_order_value,
            maximum_discount=maximum_discount,
            user_id=user_id,
            created_date=NOW.date(),
            expiration_date=expiration_date,
            is_used=is_used,
        )
        db.add(coupon)
        db.commit()
        return coupon

    return _make


@pytest.fixture
def loyalty_settings(db):
    settings = LoyaltySettingsModel()
    db.add(settings)
    db.commit()
    return settings


@pytest.fixture
def people(make_user):
    """A customer (1), a carrier (2), a second carrier (3) and the owner (9)."""
    return {
        "customer": make_user(1, Role.CUSTOMER, name="Ayse"),
        "carrier": make_user(2, Role.CARRIER, name="Mehmet"),
        "other_carrier": make_user(3, Role.CARRIER, name="Can"),
        "owner": make_user(9, Role.OWNER, name="Owner"),
    }


@pytest.fixture
def catalog(make_product):
    """Thresholds high enough that no checkout test triggers doubling."""
    return {
        "tomato": make_product("Tomato", price=10.0, stock=100.0, threshold=50.0),
        "potato": make_product("Potato", price=4.0, stock=40.0, threshold=50.0),
    }


@pytest.fixture
def filled_cart(db, people, catalog):
    """5 kg tomato + 2.5 kg potato = 60.00 TL at the store."""
    cart = Cart(user_id=people["customer"].id, region=STORE_REGION)
    svc = CartService(db)
    svc.add_product(cart, catalog["tomato"].id, 5.0)
    svc.add_product(cart, catalog["potato"].id, 2.5)
    return cart


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def delivery_time():
    return NOW + timedelta(hours=3)
