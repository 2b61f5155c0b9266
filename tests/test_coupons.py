"""Tests for coupon validation and coupon administration."""

from datetime import date, timedelta

import pytest

from freshcart.domain.context import STORE_REGION
from freshcart.domain.cart import Cart
from freshcart.domain.errors import ValidationError
from freshcart.services.cart_service import CartService
from freshcart.services.coupon_service import (
    CouponReason,
    CouponService,
    CouponValidator,
    expiration_info,
)

TODAY = date(2026, 3, 10)


class TestCouponValidator:
    def test_below_minimum_then_valid(self, db, make_coupon):
        make_coupon("SAVE10", 10.0, minimum_order_value=100.0)
        validator = CouponValidator(db)

        low = validator.validate("SAVE10", 90.0, user_id=1, today=TODAY)
        assert not low.ok
        assert low.reason == CouponReason.BELOW_MINIMUM
        assert low.message == "Minimum order: 100.00 TL"

        ok = validator.validate("SAVE10", 105.0, user_id=1, today=TODAY)
        assert ok.ok
        assert ok.coupon.discount_for(105.0) == pytest.approx(10.5)

    def test_unknown_code(self, db):
        result = CouponValidator(db).validate("NOPE", 100.0, user_id=1, today=TODAY)
        assert result.reason == CouponReason.NOT_FOUND
        assert result.message == "Invalid coupon code"

    def test_empty_code_is_not_found(self, db):
        assert CouponValidator(db).validate("   ", 100.0, user_id=1).reason == CouponReason.NOT_FOUND

    def test_code_is_normalized(self, db, make_coupon):
        make_coupon("SPRING5", 5.0)
        result = CouponValidator(db).validate("  spring5 ", 20.0, user_id=1, today=TODAY)
        assert result.ok
        assert result.code == "SPRING5"

    def test_expired(self, db, make_coupon):
        make_coupon("OLD", 10.0, expiration_date=TODAY - timedelta(days=1))
        assert CouponValidator(db).validate("OLD", 100.0, 1, TODAY).reason == CouponReason.EXPIRED

    def test_valid_on_expiration_day(self, db, make_coupon):
        make_coupon("LAST", 10.0, expiration_date=TODAY)
        assert CouponValidator(db).validate("LAST", 100.0, 1, TODAY).ok

    def test_already_used(self, db, make_coupon):
        make_coupon("USED", 10.0, is_used=True)
        assert CouponValidator(db).validate("USED", 100.0, 1, TODAY).reason == CouponReason.ALREADY_USED

    def test_personal_coupon_of_another_customer(self, db, make_user, make_coupon):
        make_user(1)
        make_user(2)
        make_coupon("MINE", 10.0, user_id=2)

        validator = CouponValidator(db)
        assert validator.validate("MINE", 100.0, 1, TODAY).reason == CouponReason.NOT_OWNED_BY_USER
        assert validator.validate("MINE", 100.0, 2, TODAY).ok


class TestApplyThroughCartService:
    def test_failed_validation_leaves_cart_untouched(self, db, people, catalog, make_coupon):
        make_coupon("SAVE10", 10.0, minimum_order_value=100.0)
        cart = Cart(user_id=people["customer"].id, region=STORE_REGION)
        svc = CartService(db)
        svc.add_product(cart, catalog["potato"].id, 2.0)

        result = svc.apply_coupon(cart, "SAVE10")

        assert not result.ok
        assert cart.coupon is None

    def test_reapply_after_removal_validates_again(self, db, people, catalog, make_coupon):
        coupon = make_coupon("SAVE10", 10.0)
        cart = Cart(user_id=people["customer"].id)
        svc = CartService(db)
        svc.add_product(cart, catalog["tomato"].id, 2.0)

        assert svc.apply_coupon(cart, "SAVE10").ok
        svc.remove_coupon(cart)

        coupon.is_used = True
        db.commit()

        result = svc.apply_coupon(cart, "SAVE10")
        assert result.reason == CouponReason.ALREADY_USED
        assert cart.coupon is None

    def test_second_coupon_rejected(self, db, people, catalog, make_coupon):
        make_coupon("SAVE10", 10.0)
        make_coupon("SAVE5", 5.0)
        cart = Cart(user_id=people["customer"].id)
        svc = CartService(db)
        svc.add_product(cart, catalog["tomato"].id, 2.0)
        svc.apply_coupon(cart, "SAVE10")

        with pytest.raises(ValidationError) as exc:
            svc.apply_coupon(cart, "SAVE5")
        assert exc.value.code == ValidationError.COUPON_ALREADY_APPLIED


class TestCouponService:
    def test_create_normalizes_and_rejects_duplicates(self, db):
        svc = CouponService(db)
        coupon = svc.create_coupon(" welcome ", 15.0, TODAY + timedelta(days=30), today=TODAY)

        assert coupon.code == "WELCOME"
        assert svc.code_exists("welcome")

        with pytest.raises(ValidationError):
            svc.create_coupon("WELCOME", 10.0, None, today=TODAY)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"code": "", "discount_percentage": 10.0},
            {"code": "ZERO", "discount_percentage": 0.0},
            {"code": "HUGE", "discount_percentage": 120.0},
            {"code": "PAST", "discount_percentage": 10.0, "expiration_date": TODAY - timedelta(days=1)},
            {"code": "NEG", "discount_percentage": 10.0, "minimum_order_value": -1.0},
            {"code": "NOCAP", "discount_percentage": 10.0, "maximum_discount": 0.0},
            {"code": "NEGCAP", "discount_percentage": 10.0, "maximum_discount": -5.0},
        ],
    )
    def test_create_validation(self, db, kwargs):
        kwargs.setdefault("expiration_date", None)
        with pytest.raises(ValidationError) as exc:
            CouponService(db).create_coupon(today=TODAY, **kwargs)
        assert exc.value.code == ValidationError.INVALID_COUPON

    def test_generated_code_shape(self, db):
        code = CouponService(db).generate_unique_code()
        assert len(code) == 8
        assert code.isalnum() and code.upper() == code

    def test_listings(self, db, make_user, make_coupon):
        make_user(1)
        make_user(2)
        make_coupon("GENERAL", 5.0)
        make_coupon("MINE", 10.0, user_id=1)
        make_coupon("THEIRS", 10.0, user_id=2)
        make_coupon("USED", 10.0, is_used=True)
        make_coupon("OLD", 10.0, expiration_date=TODAY - timedelta(days=3))

        svc = CouponService(db)
        assert len(svc.get_all_coupons()) == 5
        assert "OLD" not in {c.code for c in svc.get_active_coupons(TODAY)}
        assert {c.code for c in svc.get_available_coupons(1, TODAY)} == {"GENERAL", "MINE"}

    def test_award_for_big_purchase(self, db, make_user):
        make_user(1)
        svc = CouponService(db)

        assert svc.award_coupon_for_purchase(1, 499.99, TODAY) is None

        coupon = svc.award_coupon_for_purchase(1, 500.0, TODAY)
        db.commit()
        assert coupon.user_id == 1
        assert coupon.discount_percentage == 10.0
        assert coupon.minimum_order_value == 100.0
        assert coupon.maximum_discount == 50.0
        assert coupon.expiration_date == TODAY + timedelta(days=90)


class TestExpirationInfo:
    @pytest.mark.parametrize(
        "offset, text",
        [(None, "No expiration"), (-2, "Expired 2 days ago"), (0, "Expires today!"), (1, "Expires tomorrow"), (3, "Expires in 3 days")],
    )
    def test_texts(self, make_coupon, offset, text):
        expiration = None if offset is None else TODAY + timedelta(days=offset)
        coupon = make_coupon("C", 10.0, expiration_date=expiration)
        assert expiration_info(coupon, TODAY) == text
