"""
Domain exceptions for the questforge progression engine.

Purpose
-------
Define the structured, domain-specific exception hierarchy for progression
and economy rules. Services raise these for invariant violations and for
callers that prefer exceptions over boolean precondition results.

Compliance
----------
- Domain exceptions only (game rules, resource constraints, corrupted state)
- Clear base class (`EngineDomainException`) with serializable metadata
- Severity levels drive logging and alerting decisions
- Error codes for programmatic handling

Design Notes
------------
- Precondition failures (not enough EXP, gold or materials, quest already
  claimed) are returned as ``False``/``None`` by engine operations. The
  ``PreconditionFailedError`` family exists for hosts that want to escalate
  a failed gate into an exception through ``require``.
- ``InvariantViolationError`` signals a caller bug or corrupted snapshot and
  is always raised, never returned.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning (e.g., gate not met)
    INFO = "info"  # Normal operation (e.g., insufficient gold)
    WARNING = "warning"  # Concerning but handled
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # Corrupted state or missing catalogue data


class EngineDomainException(Exception):
    """
    Base exception for all engine domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise EngineDomainException(
        ...     "Forge failed",
        ...     {"reason": "recipe tier unknown"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class PreconditionFailedError(EngineDomainException):
    """
    Raised when an operation's gate is not met.

    Engine operations report these as ``False``/``None``; this exception is
    only raised through :func:`require` by hosts that want a hard failure.

    Args:
        action: Name of the gated operation (e.g., "evolve_class")
        reason: Explanation of which gate failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.DEBUG
    DEFAULT_RETRYABLE = False

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Precondition failed for '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"PRECONDITION_{action.upper()}",
        )


class InsufficientResourcesError(PreconditionFailedError):
    """
    Raised when a character lacks gold or materials for an action.

    Args:
        resource: Name of the resource type (e.g., "gold", "essence")
        required: Amount required for the action
        current: Amount the character currently has
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource: str, required: int, current: int) -> None:
        self.resource = resource
        self.required = required
        self.current = current
        EngineDomainException.__init__(
            self,
            f"Insufficient {resource}: need {required:,}, have {current:,}",
            details={
                "resource": resource,
                "required": required,
                "current": current,
                "deficit": required - current,
            },
            error_code=f"INSUFFICIENT_{resource.upper()}",
        )
        self.action = "spend"
        self.reason = f"insufficient {resource}"


class InvalidOperationError(EngineDomainException):
    """
    Raised when an argument makes an operation meaningless.

    Used for caller mistakes that are not state corruption, such as creating a
    character in an advanced class or passing a negative amount to a counter.

    Args:
        action: Description of the invalid action
        reason: Explanation of why it's not allowed

    Example:
        >>> raise InvalidOperationError(
        ...     "create_character",
        ...     "paladin is not a starter class"
        ... )
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"INVALID_{action.upper()}",
        )


class InvariantViolationError(EngineDomainException):
    """
    Raised when a snapshot breaks a data model invariant.

    Examples: the loadout references an item that is not in the inventory,
    or an item is flagged equipped without occupying its slot. This always
    indicates a caller bug or corrupted persisted state.

    Args:
        invariant: Short name of the broken invariant
        message: What was observed
        details: Extra context (item ids, slots)
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(
        self,
        invariant: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.invariant = invariant
        super().__init__(
            f"Invariant '{invariant}' violated: {message}",
            details={"invariant": invariant, **(details or {})},
            error_code=f"INVARIANT_{invariant.upper()}",
        )


# ============================================================================
# Helpers
# ============================================================================


def require(condition: bool, action: str, reason: str) -> None:
    """
    Escalate a failed gate into :class:`PreconditionFailedError`.

    Example:
        >>> require(engine.level_up(character), "level_up", "not enough EXP")
    """
    if not condition:
        raise PreconditionFailedError(action, reason)


def is_transient_error(exc: Exception) -> bool:
    """Check if an exception represents a retryable error."""
    if isinstance(exc, EngineDomainException):
        return exc.is_retryable
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Get the severity level of an exception for logging."""
    if isinstance(exc, EngineDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """Whether the exception is severe enough to page someone."""
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
