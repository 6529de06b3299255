from typing import Any, Dict, Optional

from fastapi import status


class LedgerError(ValueError):
    """Base for errors raised by the service layer and mapped to HTTP responses."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(LedgerError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConversionError(ValidationError):
    pass


class DuplicateConstraintError(LedgerError):
    status_code = status.HTTP_409_CONFLICT


class InsufficientStockError(LedgerError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_name}: available {available}, requested {requested}",
            extra={"product": product_name, "available": available, "requested": requested},
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested
