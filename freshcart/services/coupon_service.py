# freshcart/services/coupon_service.py
import secrets
import string
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from freshcart.data.models.coupon import CouponModel
from freshcart.domain.errors import ValidationError
from freshcart.domain.pricing import CouponTerms
from freshcart.repos.coupon_repo import CouponRepo
from freshcart.utils.logging import get_logger
from freshcart.utils.timeutils import utcnow

logger = get_logger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 8

# reward coupon for big purchases
AWARD_MIN_PURCHASE = 500.0
AWARD_DISCOUNT_PCT = 10.0
AWARD_MIN_ORDER = 100.0
AWARD_MAX_DISCOUNT = 50.0
AWARD_VALID_DAYS = 90


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


class CouponReason(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    ALREADY_USED = "ALREADY_USED"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    NOT_OWNED_BY_USER = "NOT_OWNED_BY_USER"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    CouponReason.NOT_FOUND: "Invalid coupon code",
    CouponReason.EXPIRED: "This coupon has expired",
    CouponReason.ALREADY_USED: "This coupon has already been used",
    CouponReason.BELOW_MINIMUM: "Order does not meet the coupon's minimum value",
    CouponReason.NOT_OWNED_BY_USER: "This coupon belongs to another customer",
}


@dataclass(frozen=True)
class CouponValidation:
    code: str
    coupon: Optional[CouponTerms] = None
    reason: Optional[CouponReason] = None
    minimum_order_value: float = 0.0

    @property
    def ok(self) -> bool:
        return self.coupon is not None

    def __bool__(self):
        return self.ok

    @property
    def message(self) -> str:
        if self.ok:
            return f"Coupon applied: {self.coupon.describe()}"
        if self.reason == CouponReason.BELOW_MINIMUM:
            return f"Minimum order: {self.minimum_order_value:.2f} TL"
        return self.reason.message


def terms_of(coupon: CouponModel) -> CouponTerms:
    return CouponTerms(
        code=coupon.code,
        discount_percentage=float(coupon.discount_percentage),
        minimum_order_value=float(coupon.minimum_order_value or 0),
        maximum_discount=float(coupon.maximum_discount) if coupon.maximum_discount is not None else None,
    )


def expiration_info(coupon: CouponModel, today: date) -> str:
    if coupon.expiration_date is None:
        return "No expiration"
    days = (coupon.expiration_date - today).days
    if days < 0:
        return f"Expired {abs(days)} days ago"
    if days == 0:
        return "Expires today!"
    if days == 1:
        return "Expires tomorrow"
    return f"Expires in {days} days"


class CouponValidator:
    """
    Checks a code against ownership, usage, expiry and the order minimum.

    Holds no memory of earlier answers: every call reads the coupon again,
    which is what checkout relies on when it re-validates.
    """

    def __init__(self, db: Session):
        self.repo = CouponRepo(db)

    def validate(
        self,
        code: str,
        cart_subtotal: float,
        user_id: int | None,
        today: date | None = None,
    ) -> CouponValidation:
        code = normalize_code(code)
        today = today or utcnow().date()

        coupon = self.repo.get_coupon(code) if code else None
        if coupon is None:
            return CouponValidation(code, reason=CouponReason.NOT_FOUND)

        if coupon.user_id is not None and coupon.user_id != user_id:
            return CouponValidation(code, reason=CouponReason.NOT_OWNED_BY_USER)

        if coupon.is_used:
            return CouponValidation(code, reason=CouponReason.ALREADY_USED)

        if coupon.expiration_date is not None and today > coupon.expiration_date:
            return CouponValidation(code, reason=CouponReason.EXPIRED)

        terms = terms_of(coupon)
        if not terms.meets_minimum(cart_subtotal):
            return CouponValidation(
                code,
                reason=CouponReason.BELOW_MINIMUM,
                minimum_order_value=terms.minimum_order_value,
            )

        return CouponValidation(code, coupon=terms, minimum_order_value=terms.minimum_order_value)


class CouponService:
    """Owner side coupon administration and customer listings."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CouponRepo(db)

    # =====================================================
    # QUERY
    # =====================================================
    def get_all_coupons(self) -> List[CouponModel]:
        return self.repo.find_all()

    def get_active_coupons(self, today: date | None = None) -> List[CouponModel]:
        return self.repo.find_all_active(today or utcnow().date())

    def get_available_coupons(self, user_id: int, today: date | None = None) -> List[CouponModel]:
        return self.repo.find_available_for_user(user_id, today or utcnow().date())

    def code_exists(self, code: str) -> bool:
        return self.repo.code_exists(normalize_code(code))

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_coupon(
        self,
        code: str,
        discount_percentage: float,
        expiration_date: date | None,
        minimum_order_value: float = 0.0,
        maximum_discount: float | None = None,
        user_id: int | None = None,
        today: date | None = None,
    ) -> CouponModel:
        today = today or utcnow().date()
        code = normalize_code(code)

        if not code:
            raise ValidationError(ValidationError.INVALID_COUPON, "Coupon code cannot be empty")
        if self.repo.code_exists(code):
            raise ValidationError(ValidationError.INVALID_COUPON, "Coupon code already exists")
        if discount_percentage <= 0 or discount_percentage > 100:
            raise ValidationError(
                ValidationError.INVALID_COUPON, "Discount percentage must be between 0 and 100"
            )
        if expiration_date is not None and expiration_date < today:
            raise ValidationError(ValidationError.INVALID_COUPON, "Expiration date must be in the future")
        if minimum_order_value < 0:
            raise ValidationError(ValidationError.INVALID_COUPON, "Minimum order value cannot be negative")
        if maximum_discount is not None and maximum_discount <= 0:
            raise ValidationError(ValidationError.INVALID_COUPON, "Maximum discount must be greater than 0")

        coupon = self.repo.insert_coupon(
            CouponModel(
                code=code,
                discount_percentage=discount_percentage,
                user_id=user_id,
                minimum_order_value=minimum_order_value,
                maximum_discount=maximum_discount,
                created_date=today,
                expiration_date=expiration_date,
                is_used=False,
            )
        )
        self.db.commit()

        logger.info(f"Coupon {code} created ({discount_percentage}% off, owner={user_id})")
        return coupon

    def generate_unique_code(self) -> str:
        while True:
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if not self.repo.code_exists(code):
                return code

    def award_coupon_for_purchase(
        self,
        user_id: int,
        purchase_amount: float,
        today: date | None = None,
    ) -> CouponModel | None:
        """
        Personal coupon for a big purchase. Flushes only, the caller owns
        the transaction.
        """
        if purchase_amount < AWARD_MIN_PURCHASE:
            return None

        today = today or utcnow().date()
        coupon = self.repo.insert_coupon(
            CouponModel(
                code=self.generate_unique_code(),
                discount_percentage=AWARD_DISCOUNT_PCT,
                user_id=user_id,
                minimum_order_value=AWARD_MIN_ORDER,
                maximum_discount=AWARD_MAX_DISCOUNT,
                created_date=today,
                expiration_date=today + timedelta(days=AWARD_VALID_DAYS),
                is_used=False,
            )
        )
        logger.info(f"Awarded coupon {coupon.code} to user {user_id} for purchase {purchase_amount:.2f}")
        return coupon
