"""Error Hierarchy — typed, categorized exceptions for all SwineTrack failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) require corrected input; only TransactionConflictError is retryable
    - to_response() produces the REST envelope
    - Core rule functions RETURN these errors; the service shell raises them

Design Decisions:
    - Single hierarchy with SwineTrackError base: FastAPI global handler catches all (uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    operation: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class SwineTrackError(Exception):
    """Base exception for all SwineTrack errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_type": self.context.entity_type,
                    "entity_id": self.context.entity_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class FieldValidationError(SwineTrackError):
    """A single field value is out of its allowed range."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(SwineTrackError):
    """Referenced lot, pen or pig does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = ctx.entity_type or resource_type
        ctx.entity_id = ctx.entity_id or resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateIdentifierError(SwineTrackError):
    """Tag, lot code or pen number already in use."""
    def __init__(
        self, identifier_kind: str, value: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{identifier_kind} '{value}' is already in use",
            "DUPLICATE_IDENTIFIER", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.identifier_kind = identifier_kind
        self.value = value


class CapacityExceededError(SwineTrackError):
    """Pen (or lot headcount) has no free slot."""
    def __init__(
        self, message: str, capacity: int, occupancy: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "CAPACITY_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.capacity = capacity
        self.occupancy = occupancy


class InvalidTransitionError(SwineTrackError):
    """Illegal life-state change, or any mutation of a terminal pig or finalized lot."""
    def __init__(
        self, current: str, requested: str, reason: str | None = None,
        context: ErrorContext | None = None,
    ):
        message = f"Invalid transition from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message, "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current = current
        self.requested = requested


class InconsistentReferenceError(SwineTrackError):
    """Pen/lot mismatch: pen not owned by the lot, or type incompatible with the site."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INCONSISTENT_REFERENCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 422,
        )


class InvalidWeightError(SwineTrackError):
    """Non-positive weight, inconsistent lot weights, or suspicious variation."""
    def __init__(
        self, message: str, suspicious: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message,
            "SUSPICIOUS_WEIGHT_VARIATION" if suspicious else "INVALID_WEIGHT",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, context, 422,
        )
        self.suspicious = suspicious


class TransactionConflictError(SwineTrackError):
    """Store reported a serialization failure or deadlock. Caller may retry."""

    retryable = True

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TRANSACTION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(SwineTrackError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
