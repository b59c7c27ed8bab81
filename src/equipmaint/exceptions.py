"""Typed failures raised by the maintenance core.

Every error carries a machine-readable ``code`` and a ``details`` mapping so
the API layer can render it without knowing which operation raised it.
"""

from typing import Any


class MaintenanceError(Exception):
    """Base exception for maintenance core errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "MAINTENANCE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(MaintenanceError):
    """Raised when a work order, schedule, part, or equipment record is missing."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any, message: str | None = None):
        super().__init__(
            message or f"{entity} {entity_id} not found",
            code="NOT_FOUND",
            details={"entity": entity, "id": entity_id},
        )


class InvalidTransitionError(MaintenanceError):
    """Raised on updates to a terminal work order or on an illegal status change."""

    status_code = 409

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        target_status: str | None = None,
    ):
        details = {}
        if current_status is not None:
            details["current_status"] = current_status
        if target_status is not None:
            details["target_status"] = target_status
        super().__init__(message, code="INVALID_TRANSITION", details=details)


class InsufficientStockError(MaintenanceError):
    """Raised when part usage exceeds the quantity on hand."""

    status_code = 409

    def __init__(self, part_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough stock for part {part_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "part_id": part_id,
                "requested": requested,
                "available": available,
            },
        )


class ValidationError(MaintenanceError):
    """Raised when a required field is missing or a value is out of range."""

    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConcurrentUpdateError(MaintenanceError):
    """Raised when another transaction holds the row lock past the busy timeout."""

    status_code = 409

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} {entity_id} is being updated by another request; retry",
            code="CONCURRENT_UPDATE",
            details={"entity": entity, "id": entity_id},
        )
