"""
questforge Logging Infrastructure

Exports the structured logging setup and the log context helpers.
"""

from questforge.core.logging.logger import (
    LogContext,
    clear_log_context,
    get_log_context,
    get_logger,
    is_logging_configured,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "is_logging_configured",
    "get_logger",
    "LogContext",
    "set_log_context",
    "get_log_context",
    "clear_log_context",
]
