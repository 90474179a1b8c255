"""Error Hierarchy: typed, categorized exceptions for every TaskLink failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error renders the REST envelope {"message": str, "data": None}
    - Domain errors (400/404) are recoverable; infrastructure errors (500-level) are critical
    - Messages are user-facing; internal details only go to the log

Design Decisions:
    - Single hierarchy with TaskLinkError base: FastAPI global handler catches all (ADR: uniform error shape)
    - Duplicate email is modelled as a conflict but answered with 400, matching the
      public API contract clients already depend on
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for the log line, never for the client."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    task_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TaskLinkError(Exception):
    """Base exception for all TaskLink errors."""

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
        """Convert to the API envelope."""
        return {"message": self.message, "data": None}

    def log_extra(self) -> dict:
        """Fields surfaced by the JSON log formatter."""
        return {
            "error_code": self.code,
            "user_id": self.context.user_id,
            "task_id": self.context.task_id,
        }


# ─── Validation Errors (400) ────────────────────────────────────

class RequiredFieldError(TaskLinkError):
    """A required body field is missing or blank."""
    def __init__(self, fields: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"{' and '.join(fields)} are required",
            "REQUIRED_FIELD_MISSING", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.fields = fields


class MalformedIdError(TaskLinkError):
    """An identifier does not have the store's id format."""
    def __init__(self, message: str, value: object, context: ErrorContext | None = None):
        super().__init__(
            message, "MALFORMED_ID", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.value = value


class InvalidQueryJSONError(TaskLinkError):
    """where/sort/select could not be parsed as JSON."""
    def __init__(self, param: str, context: ErrorContext | None = None):
        super().__init__(
            "Bad Request: one of where/sort/select contains invalid JSON",
            "INVALID_QUERY_JSON", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.param = param


class UnsupportedQueryError(TaskLinkError):
    """Query parameters parsed but cannot be translated to a store query."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Bad Request: unsupported query ({reason})",
            "UNSUPPORTED_QUERY", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.reason = reason


# ─── Business Rule Errors (400) ─────────────────────────────────

class CompletedTaskAssignmentError(TaskLinkError):
    """A completed task cannot be placed in a user's pending set."""
    def __init__(self, message: str, task_ids: list[str] | None = None,
                 context: ErrorContext | None = None):
        super().__init__(
            message, "COMPLETED_TASK_ASSIGNMENT", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.task_ids = task_ids or []


class AssignedUserNameMismatchError(TaskLinkError):
    """Caller-supplied assignedUserName disagrees with the referenced user."""
    def __init__(self, supplied: str, expected: str, context: ErrorContext | None = None):
        super().__init__(
            "Bad Request: assignedUserName does not match the assigned user's name",
            "ASSIGNED_USER_NAME_MISMATCH", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.supplied = supplied
        self.expected = expected


class UnknownAssignedUserError(TaskLinkError):
    """assignedUser is well-formed but no such user exists."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Bad Request: assignedUser does not reference an existing user",
            "UNKNOWN_ASSIGNED_USER", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.user_id = user_id


class DuplicateEmailError(TaskLinkError):
    """Another user already owns this email."""
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            "A user with this email already exists",
            "DUPLICATE_EMAIL", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )
        self.email = email


# ─── Not Found (404) ────────────────────────────────────────────

class ResourceNotFoundError(TaskLinkError):
    """Requested resource does not exist."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ServerError(TaskLinkError):
    """Unexpected failure while serving a request."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class DatabaseError(TaskLinkError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
