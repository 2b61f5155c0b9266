"""Tests for the pre-commit stock check."""

from freshcart.domain.cart import Cart
from freshcart.repos.product_repo import ProductRepo
from freshcart.services.cart_service import CartService
from freshcart.services.stock_guard import StockGuard, StockIssue


def test_enough_stock(db, filled_cart):
    check = StockGuard(db).validate(filled_cart)
    assert check.ok
    assert check.summary() == ""


def test_reads_live_stock_not_the_cart_snapshot(db, filled_cart, catalog):
    # another order takes most of the tomatoes after they went into the cart
    repo = ProductRepo(db)
    repo.decrement_stock(catalog["tomato"].id, 97.0)
    db.commit()

    check = StockGuard(db).validate(filled_cart)

    assert not check.ok
    assert check.issues == [StockIssue(catalog["tomato"].id, "Tomato", 5.0, 3.0)]
    assert check.summary() == "Tomato: requested 5.00 kg, only 3.00 kg available"


def test_reports_every_short_line(db, people, make_product):
    onion = make_product("Onion", price=7.0, stock=0.0, threshold=10.0)
    carrot = make_product("Carrot", price=9.0, stock=1.0, threshold=10.0)
    cart = Cart(user_id=people["customer"].id)
    svc = CartService(db)
    svc.add_product(cart, onion.id, 2.0)
    svc.add_product(cart, carrot.id, 1.0)

    check = StockGuard(db).validate(cart)

    assert [i.product_id for i in check.issues] == [onion.id]
    assert check.issues[0].describe() == "Onion: out of stock"


def test_empty_cart_passes(db):
    assert StockGuard(db).validate(Cart(user_id=1)).ok
