"""Domain exceptions.

All domain-level errors raised by the catalog services. The API layer
maps each of them to an error code and HTTP status.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for catalog-related errors."""

    pass


class ProductNotFoundError(CatalogError):
    """Raised when a product does not exist."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: ID of the missing product.
        """
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )


class InvalidResponseGroupError(CatalogError):
    """Raised when a response group string contains unknown names."""

    error_code = "INVALID_RESPONSE_GROUP"

    def __init__(self, value: str, unknown: list[str]) -> None:
        """Initialize invalid response group error.

        Args:
            value: The raw response group value.
            unknown: Names that did not match any flag.
        """
        super().__init__(
            f"Invalid response group '{value}': unknown {unknown}",
            details={"value": value, "unknown": unknown},
        )


# ============================================================================
# Persistence Errors
# ============================================================================


class CatalogPersistenceError(CatalogError):
    """Raised when the unit of work fails to commit."""

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize persistence error.

        Args:
            operation: Name of the failed operation (e.g. "create_products").
            reason: Underlying database error message.
        """
        super().__init__(
            f"Failed to {operation.replace('_', ' ')}: {reason}",
            details={"operation": operation, "reason": reason},
        )
