# storefront/core/errors.py
from typing import Any

from fastapi import status


class AppError(Exception):
    """
    Base class for classified, user-safe failures.

    Each subclass fixes:
      - kind: stable machine-readable tag returned to clients
      - status_code: HTTP-style status used by the API layer

    `message` is always safe to show to the caller. Internal storage
    error text never goes in here.
    """

    kind: str = "error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "kind": self.kind,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppError):
    """Malformed or missing input. Caller can resubmit corrected input."""

    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """A referenced product, order or discount does not exist."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Business rule violated by current state (stock, price, availability)."""

    kind = "conflict"
    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceError(AppError):
    """Underlying storage failed unexpectedly. Never retried automatically."""

    kind = "persistence_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "Failed to place order",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
