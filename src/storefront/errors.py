"""Typed errors raised by the storefront engine.

Every error carries an ``ErrorKind``. Validation and availability errors
extend Protean's ``ValidationError`` so they travel the same path as field
validation failures; only ``SYSTEM`` errors are forwarded to monitoring.
"""

from enum import Enum

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


class ErrorKind(Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    AVAILABILITY = "availability"
    SYSTEM = "system"


class _TypedError:
    kind = ErrorKind.SYSTEM
    field = "_entity"
    retryable = False

    def __init__(self, message, **context):
        super().__init__({self.field: [message]})
        self.message = message
        self.context = context

    def __str__(self):
        return self.message


# Validation
class InvalidQuantity(_TypedError, ValidationError):
    kind = ErrorKind.VALIDATION
    field = "quantity"


class EmptyCart(_TypedError, ValidationError):
    kind = ErrorKind.VALIDATION
    field = "items"


class InvalidStatusTransition(_TypedError, ValidationError):
    kind = ErrorKind.VALIDATION
    field = "status"


# Availability
class ProductUnavailable(_TypedError, ValidationError):
    kind = ErrorKind.AVAILABILITY
    field = "product_id"


class InsufficientStock(_TypedError, ValidationError):
    kind = ErrorKind.AVAILABILITY
    field = "quantity"


# Authorization
class Unauthorized(_TypedError, ProteanException):
    kind = ErrorKind.AUTHORIZATION


# System
class StoreTimeout(_TypedError, ProteanException):
    kind = ErrorKind.SYSTEM
    retryable = True


class StoreUnavailable(_TypedError, ProteanException):
    kind = ErrorKind.SYSTEM
    retryable = True


def classify(exc: BaseException) -> ErrorKind:
    """Map any exception onto the storefront error taxonomy."""
    kind = getattr(exc, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    if isinstance(exc, ValidationError | ObjectNotFoundError):
        return ErrorKind.VALIDATION
    return ErrorKind.SYSTEM
