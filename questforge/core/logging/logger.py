"""
questforge Logging Subsystem

Purpose
-------
Structured logging for the engine and its host. Every engine command runs
inside a ``LogContext`` so its log lines carry the character and operation
they belong to.

Responsibilities
----------------
- Scope ``character_id`` / ``operation`` / ``correlation_id`` per command
  through a ContextVar.
- Stamp those keys, plus the emitting component, onto every record.
- Render records as JSON (production, or when forced) or as console text.
- Install and remove the single console handler on request.

Design Decisions
----------------
- The engine never configures logging on import. A host calls
  ``setup_logging()`` once; library use without it falls back to Python's
  defaults and the module loggers simply propagate.
- Extra fields passed via ``logger.info("msg", extra={...})`` land under
  ``extra`` in the JSON payload.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from questforge.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(component)-12s | %(character_id)-10s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_NAME = "questforge.console"
_UNSET = "N/A"

_command_context: ContextVar[Dict[str, Any]] = ContextVar("command_context", default={})


def _log_level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


def _component_from_name(name: str) -> str:
    # "questforge.modules.forge.service" -> "forge"
    parts = name.split(".")
    return parts[-2] if len(parts) > 1 else parts[0]


# ============================================================================
# Record enrichment and rendering
# ============================================================================


class ContextFilter(logging.Filter):
    """Copies the active command context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _command_context.get({})
        record.character_id = context.get("character_id", _UNSET)
        record.operation = context.get("operation", _UNSET)
        record.correlation_id = context.get("correlation_id", _UNSET)
        record.component = _component_from_name(record.name)
        return True


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line


class JSONFormatter(logging.Formatter):
    """One JSON object per record; command context at the top level."""

    CONTEXT_KEYS = ("character_id", "operation", "correlation_id", "component")
    _RESERVED = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
        | {"message", "asctime", "taskName"}
        | set(CONTEXT_KEYS)
    )

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, _UNSET):
                payload[key] = value

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RESERVED and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


# ============================================================================
# Setup / teardown
# ============================================================================


def _build_console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(_log_level())
    handler.addFilter(ContextFilter())

    if _use_json():
        handler.setFormatter(JSONFormatter())
    elif sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _installed_handler() -> Optional[logging.Handler]:
    for handler in logging.getLogger().handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None


def is_logging_configured() -> bool:
    return _installed_handler() is not None


def setup_logging() -> None:
    """Install the console handler on the root logger (idempotent)."""
    if is_logging_configured():
        return

    root = logging.getLogger()
    root.setLevel(_log_level())
    root.addHandler(_build_console_handler())

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(_log_level()),
            "json": _use_json(),
        },
    )


def shutdown_logging() -> None:
    """Flush and remove the handler installed by ``setup_logging``."""
    handler = _installed_handler()
    if handler is None:
        return
    handler.flush()
    handler.close()
    logging.getLogger().removeHandler(handler)


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scope log context for one engine command.

    >>> with LogContext(character_id="hero-1", operation="forge"):
    ...     engine.forge(...)
    """

    def __init__(
        self,
        character_id: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            "character_id": str(character_id) if character_id is not None else _UNSET,
            "operation": operation or _UNSET,
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
            **extra,
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _command_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _command_context.reset(self._token)
            self._token = None


def set_log_context(**values: Any) -> None:
    """Merge ``values`` into the active context without opening a new scope."""
    merged = dict(_command_context.get({}))
    merged.update({key: value for key, value in values.items() if value is not None})
    _command_context.set(merged)


def get_log_context() -> Dict[str, Any]:
    return dict(_command_context.get({}))


def clear_log_context() -> None:
    _command_context.set({})
