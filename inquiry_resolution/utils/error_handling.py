"""Custom exceptions and helpers for consistent error responses."""

import json
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=422)


class ConflictError(AppError):
    """Raised when a write collides with an existing unique value."""

    def __init__(
        self,
        message: str = "This inquiry number already exists. Please use a different number.",
    ):
        super().__init__(message, status_code=409)


class SessionStateError(AppError):
    """Raised when a decision does not fit the resolution session's state."""

    def __init__(self, message: str = "Invalid resolution session state"):
        super().__init__(message, status_code=409)


class TransientStoreError(AppError):
    """Raised when the backing store is unreachable or times out."""

    def __init__(self, message: str = "Data store unavailable"):
        super().__init__(message, status_code=503)


class PartialMultiProductFailure(AppError):
    """
    Renumbering failed after the product lines were already inserted.

    The rows exist, so retrying the whole commit would duplicate them.
    ``inserted`` holds every inserted row as returned by the store and
    ``renumbered`` how many of them received their suffix.
    """

    def __init__(self, message: str, inserted: Optional[List[Any]] = None, renumbered: int = 0):
        super().__init__(message, status_code=500)
        self.inserted = list(inserted or [])
        self.renumbered = renumbered


def to_response(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into a JSON response the calling UI can show."""
    return {
        "statusCode": error.status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(
            {
                "message": str(error),
                "status": "error",
                "error_type": type(error).__name__,
            }
        ),
    }
