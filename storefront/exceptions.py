"""
Error taxonomy for the order pipeline

Every error carries a caller-facing message, the HTTP status it maps to and
optional structured details merged into the response body.
"""
from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    """Base exception for storefront business errors"""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.details}


class ValidationError(StorefrontError):
    """Bad or missing input"""
    status_code = 422
    code = "validation_error"


class SizeNotAvailableError(ValidationError):
    """Requested size has no stock row for a size-tracked product"""
    code = "size_not_available"

    def __init__(self, requested_size: str, available_sizes: List[str]):
        super().__init__(
            "Selected size is not available",
            {"requested_size": requested_size, "available_sizes": available_sizes}
        )
        self.requested_size = requested_size
        self.available_sizes = available_sizes


class NotFoundError(StorefrontError):
    """Referenced product or order does not exist"""
    status_code = 404
    code = "not_found"


class InsufficientStockError(StorefrontError):
    """Not enough stock on hand for the requested quantity"""
    status_code = 422
    code = "insufficient_stock"

    def __init__(self, message: str, available: int):
        super().__init__(message, {"available": available})
        self.available = available


class ConcurrencyConflictError(StorefrontError):
    """Lock wait timed out or the transaction was aborted by the database"""
    status_code = 409
    code = "concurrency_conflict"


class PersistenceError(StorefrontError):
    """Unexpected storage failure; the message never includes internals"""
    status_code = 500
    code = "internal_error"
