"""
Static configuration for questforge.

Purpose
-------
Environment-driven settings read once at startup: deployment environment,
logging behaviour, where the balance catalogue lives, and an optional seed
for the default random source. Balance numbers themselves live in the YAML
catalogue, not here.

Environment Variables
---------------------
- QUESTFORGE_ENV: development | testing | staging | production
- QUESTFORGE_LOG_LEVEL: logging level name (default: INFO)
- QUESTFORGE_LOG_JSON: force JSON console logs (default: production only)
- QUESTFORGE_CATALOGUE_PATH: YAML catalogue path (default: bundled file)
- QUESTFORGE_RANDOM_SEED: integer seed for ``SeededRandomSource``

Dependencies
------------
- python-dotenv: ``.env`` loading
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        aliases = {"test": "testing", "dev": "development", "prod": "production"}
        normalized = aliases.get(value.lower(), value.lower())
        try:
            return cls(normalized)
        except ValueError:
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class Config:
    """
    Centralized static configuration.

    Usage
    -----
    >>> Config.load()
    >>> Config.CATALOGUE_PATH
    PosixPath('.../questforge/data/catalogue.yaml')
    >>> Config.is_production()
    False
    """

    PACKAGE_ROOT = Path(__file__).resolve().parents[2]
    DEFAULT_CATALOGUE_PATH = PACKAGE_ROOT / "data" / "catalogue.yaml"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None

    CATALOGUE_PATH: Path = DEFAULT_CATALOGUE_PATH
    RANDOM_SEED: Optional[int] = None

    # =========================================================================
    # Helpers
    # =========================================================================

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: Optional[int],
        min_val: Optional[int] = None,
    ) -> Optional[int]:
        """
        Parse an integer from the environment, falling back to ``default``.

        Example
        -------
        >>> Config._safe_int("QUESTFORGE_RANDOM_SEED", None)
        """
        raw_value = os.getenv(key)
        if raw_value is None or raw_value.strip() == "":
            return default
        try:
            value = int(raw_value)
        except ValueError:
            logging.warning(f"{key}='{raw_value}' is not a valid integer, using default {default}")
            return default
        if min_val is not None and value < min_val:
            logging.warning(f"{key}={value} is below minimum {min_val}, using default {default}")
            return default
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """Recognizes true/false, yes/no, 1/0, on/off (case-insensitive)."""
        raw_value = os.getenv(key)
        if raw_value is None:
            return default
        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            return True
        if normalized in {"false", "no", "0", "off"}:
            return False
        logging.warning(f"{key}='{raw_value}' is not a valid boolean, using default {default}")
        return default

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """Read every setting from the environment. Safe to call again."""
        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("QUESTFORGE_ENV", "development")
        ).value
        cls.LOG_LEVEL = cls._safe_str("QUESTFORGE_LOG_LEVEL", "INFO").upper()
        cls.LOG_JSON = cls._safe_bool("QUESTFORGE_LOG_JSON", None)
        cls.CATALOGUE_PATH = Path(
            cls._safe_str("QUESTFORGE_CATALOGUE_PATH", str(cls.DEFAULT_CATALOGUE_PATH))
        )
        cls.RANDOM_SEED = cls._safe_int("QUESTFORGE_RANDOM_SEED", None)

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT == Environment.TESTING.value

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "log_json": cls.LOG_JSON,
            "catalogue_path": str(cls.CATALOGUE_PATH),
            "random_seed_set": cls.RANDOM_SEED is not None,
        }


Config.load()
