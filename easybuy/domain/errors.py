# easybuy/domain/errors.py
from enum import Enum


class ShopError(Exception):
    """Base dla wszystkich bledow domeny, warstwa HTTP mapuje je na status code."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# 400
class ValidationError(ShopError):
    pass


class InvalidProduct(ValidationError):
    def __init__(self, product_id: str):
        super().__init__(f"Invalid productId: {product_id}")
        self.product_id = product_id


class InvalidShipping(ValidationError):
    def __init__(self, shipping_id: str | None):
        super().__init__(f"Invalid shippingId: {shipping_id}")
        self.shipping_id = shipping_id


class InvalidQuantity(ValidationError):
    def __init__(self, quantity):
        super().__init__("Invalid quantity")
        self.quantity = quantity


class InvalidRating(ValidationError):
    def __init__(self, rating):
        super().__init__("Rating must be a number from 1 to 5")
        self.rating = rating


# 404
class NotFoundError(ShopError):
    pass


# 409
class ConflictError(ShopError):
    pass


class AlreadyExists(ConflictError):
    pass


class ConcurrencyConflict(ConflictError):
    """Aggregate uzytkownika zmieniony przez inny request (lock albo wersja)."""


# 401
class AuthErrorKind(str, Enum):
    MISSING = "missing"
    EXPIRED = "expired"
    INVALID = "invalid"
    UNKNOWN = "unknown"


class AuthError(ShopError):
    def __init__(self, kind: AuthErrorKind, message: str | None = None):
        super().__init__(message or f"Authentication failed: {kind.value}")
        self.kind = kind


# 502
class UpstreamError(ShopError):
    pass
