"""
Infrastructure exceptions for the questforge engine.

Purpose
-------
Define the exception hierarchy for infrastructure-level concerns: missing or
malformed catalogue data and failures while publishing domain events. These
are engineering problems, not gameplay outcomes.

Design Notes
------------
- All infrastructure exceptions inherit from `EngineInfrastructureException`.
- Severity values are shared with the domain hierarchy so a single logging
  handler can route both.
- `ConfigurationMissingError` is raised at catalogue load time or when a
  lookup references an id the catalogue does not define. It is fatal.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from questforge.modules.shared.exceptions import ErrorSeverity


class EngineInfrastructureException(Exception):
    """
    Base exception for all engine infrastructure-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
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


class ConfigurationMissingError(EngineInfrastructureException):
    """
    Raised when a catalogue key or referenced id is missing.

    Args:
        config_key: The catalogue key or id that could not be resolved
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(
            f"Configuration error for {config_key}: {message}",
            details={"config_key": config_key, "message": message},
            error_code="CONFIG_MISSING",
        )


class EventSinkError(EngineInfrastructureException):
    """
    Raised when an event sink fails to accept a domain event.

    Args:
        event_name: Name of the event being published
        original_error: The underlying exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = True

    def __init__(self, event_name: str, original_error: Exception) -> None:
        self.event_name = event_name
        self.original_error = original_error
        super().__init__(
            f"Event sink error for event '{event_name}': {original_error}",
            details={
                "event_name": event_name,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="EVENT_SINK_ERROR",
            is_retryable=True,
        )
