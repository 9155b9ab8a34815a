"""
Domain exceptions package.

Re-exports the engine's domain exception hierarchy (defined in
``questforge.modules.shared.exceptions``) alongside the model-level
``DomainValidationError`` so callers have one import location.
"""

from questforge.domain.models.base import DomainValidationError
from questforge.modules.shared.exceptions import (
    EngineDomainException,
    ErrorSeverity,
    InsufficientResourcesError,
    InvalidOperationError,
    InvariantViolationError,
    PreconditionFailedError,
    get_error_severity,
    is_transient_error,
    require,
    should_alert,
)

__all__ = [
    "DomainValidationError",
    "EngineDomainException",
    "ErrorSeverity",
    "InsufficientResourcesError",
    "InvalidOperationError",
    "InvariantViolationError",
    "PreconditionFailedError",
    "get_error_severity",
    "is_transient_error",
    "require",
    "should_alert",
]
