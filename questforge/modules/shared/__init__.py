"""
Shared engine building blocks: exceptions, constants, formulas, random
sources and the service base class.
"""

from questforge.modules.shared.exceptions import (
    EngineDomainException,
    ErrorSeverity,
    InsufficientResourcesError,
    InvalidOperationError,
    InvariantViolationError,
    PreconditionFailedError,
    require,
)
from questforge.modules.shared.random_source import (
    RandomSource,
    SeededRandomSource,
    SequenceRandomSource,
    SystemRandomSource,
)

__all__ = [
    "EngineDomainException",
    "ErrorSeverity",
    "InsufficientResourcesError",
    "InvalidOperationError",
    "InvariantViolationError",
    "PreconditionFailedError",
    "require",
    "RandomSource",
    "SeededRandomSource",
    "SequenceRandomSource",
    "SystemRandomSource",
]
