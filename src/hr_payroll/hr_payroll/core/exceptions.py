from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    status_code = 403
    code = "FORBIDDEN"


class ConflictError(DomainError):
    """Operation is invalid given the current state of a record."""

    code = "CONFLICT"


class AlreadyClockedIn(ConflictError):
    code = "ALREADY_CLOCKED_IN"


class NoClockInRecord(ConflictError):
    code = "NO_CLOCK_IN_RECORD"


class AlreadyOnBreak(ConflictError):
    code = "ALREADY_ON_BREAK"


class BreakLimitExceeded(ConflictError):
    code = "BREAK_LIMIT_EXCEEDED"


class NoActiveBreak(ConflictError):
    code = "NO_ACTIVE_BREAK"


class NoOpenSession(ConflictError):
    code = "NO_OPEN_SESSION"


class BreakStillActive(ConflictError):
    code = "BREAK_STILL_ACTIVE"


class DuplicatePayrollPeriod(ConflictError):
    code = "DUPLICATE_PAYROLL_PERIOD"


class PayrollLocked(ConflictError):
    """Raised when a Paid payroll record would be modified."""

    code = "PAYROLL_LOCKED"


class ExternalServiceError(DomainError):
    """A collaborator outside this system (e.g. the bank) failed."""

    status_code = 502
    code = "EXTERNAL_SERVICE_ERROR"
