"""
Custom exceptions for Desintesa.

All exceptions inherit from DesintesaError for easier catching.
Each exception includes a message and optional details dict.

Callers (CLI, API adapters) tell the kinds apart:
- ValidationError: one or more rule violations, all reported at once
- NotFoundError: unknown order id
- InvalidStateError: certificate operation on a non-completed order
- StorageError: repository load/save failed
"""

from typing import List, Optional


class DesintesaError(Exception):
    """Base exception for all Desintesa-related errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """String representation with details if available."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(DesintesaError):
    """
    Order data violated one or more validation rules.

    The full ordered list of violation messages is kept in ``errors`` so
    callers can render them together.
    """

    def __init__(self, errors: List[str], details: Optional[dict] = None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(" | ".join(self.errors), details=details)


class NotFoundError(DesintesaError):
    """Requested order not found."""

    def __init__(self, order_id: str):
        super().__init__("Order not found.", details={"order_id": order_id})
        self.order_id = order_id


class InvalidStateError(DesintesaError):
    """Operation not allowed for the order's current status."""
    pass


class StorageError(DesintesaError):
    """Order repository load or save failed."""
    pass


class CatalogError(DesintesaError):
    """Chemical catalog could not be loaded."""
    pass


class ReportGenerationError(DesintesaError):
    """Certificate document generation failed."""
    pass
