# freshcart/domain/errors.py
"""
Error kinds raised by the ordering core.

Validation errors are raised before any storage is touched, conflict errors
come from re-validation right before a commit, commit errors mean the
atomic write was rolled back. Expected negative outcomes (cancellation or
rating denied, order already claimed) are returned as decisions, not raised.
"""


class ValidationError(ValueError):
    EMPTY_CART = "EMPTY_CART"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    BELOW_MINIMUM_ORDER = "BELOW_MINIMUM_ORDER"
    INVALID_DELIVERY_WINDOW = "INVALID_DELIVERY_WINDOW"
    COUPON_ALREADY_APPLIED = "COUPON_ALREADY_APPLIED"
    ITEM_NOT_IN_CART = "ITEM_NOT_IN_CART"
    INVALID_COUPON = "INVALID_COUPON"
    INVALID_RATING = "INVALID_RATING"

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ConflictError(RuntimeError):
    """State changed under us, refresh and retry."""


class StockShortfallError(ConflictError):
    def __init__(self, issues):
        self.issues = list(issues)
        names = ", ".join(str(i.product_id) for i in self.issues)
        super().__init__(f"Insufficient stock for product(s): {names}")


class CouponInvalidatedError(ConflictError):
    def __init__(self, code: str, reason):
        self.code = code
        self.reason = reason
        super().__init__(f"Coupon {code} is no longer valid: {reason.message}")


class CommitError(RuntimeError):
    """Atomic commit failed and was rolled back."""


class InvalidTransitionError(ValueError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move order from {current.value} to {target.value}")


class NotFoundError(LookupError):
    pass
