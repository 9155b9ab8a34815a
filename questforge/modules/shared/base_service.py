"""
Base Service Foundation

Purpose
-------
Common base for the engine services. Services hold the rules: they read the
catalogue, check preconditions, call the domain models' primitive
transitions, and log what happened.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- A uniform way to report a failed precondition (logged, returned False)
- Argument validation that raises ``InvalidOperationError``
- Error logging at the level implied by an exception's severity

What this class does NOT do:
- Publish domain events (the engine facade drains and publishes them)
- Persist anything

Usage
-----
    class ForgeService(BaseService):
        def __init__(self, catalogue, stats, rng, logger=None):
            super().__init__(catalogue, logger or get_logger(__name__))
            self.rng = rng
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict

from questforge.modules.shared.exceptions import (
    EngineDomainException,
    ErrorSeverity,
    InvalidOperationError,
    InvariantViolationError,
    get_error_severity,
    is_transient_error,
    should_alert,
)

_SEVERITY_LEVELS: Dict[ErrorSeverity, int] = {
    ErrorSeverity.DEBUG: logging.DEBUG,
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

if TYPE_CHECKING:
    from logging import Logger

    from questforge.core.config.catalogue import Catalogue


class BaseService:
    """
    Base class for all engine services.

    Args:
        catalogue: Validated, immutable balance catalogue
        logger: Logger instance
    """

    def __init__(self, catalogue: Catalogue, logger: Logger) -> None:
        self.catalogue = catalogue
        self.log = logger

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a completed state transition with structured context."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def reject(self, operation: str, reason: str, **context: Any) -> bool:
        """
        Log a failed precondition and return ``False``.

        Engine commands end with ``return self.reject(...)`` when a gate is
        not met, so the no-op path is always logged the same way.
        """
        self.log.debug(
            f"Precondition failed for {operation}: {reason}",
            extra={"operation": operation, "reason": reason, **context},
        )
        return False

    def log_error(self, operation: str, error: Exception, **context: Any) -> None:
        """Log ``error`` at the level its severity maps to."""
        severity = get_error_severity(error)
        payload = (
            error.to_dict()
            if isinstance(error, EngineDomainException)
            else {"error_type": type(error).__name__, "message": str(error)}
        )
        self.log.log(
            _SEVERITY_LEVELS[severity],
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error": payload,
                "retryable": is_transient_error(error),
                "alert": should_alert(error),
                **context,
            },
        )

    def violation(
        self, operation: str, invariant: str, message: str, **details: Any
    ) -> InvariantViolationError:
        """
        Build and log an :class:`InvariantViolationError` for the caller to raise.

        Usage:
            raise self.violation("equip", "loadout_item_owned", "...", item_id=item_id)
        """
        error = InvariantViolationError(invariant, message, details)
        self.log_error(operation, error)
        return error

    def validate_positive_int(self, value: int, name: str, operation: str) -> None:
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise InvalidOperationError(operation, f"{name} must be a positive integer, got {value!r}")

    def validate_non_negative_int(self, value: int, name: str, operation: str) -> None:
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise InvalidOperationError(
                operation, f"{name} must be a non-negative integer, got {value!r}"
            )
