"""
Configuration package.

- ``Config``: environment settings (python-dotenv)
- ``questforge.core.config.catalogue``: YAML balance catalogue loader,
  imported directly to keep this package free of logging imports
- ``ConfigSchema``: structural validator
"""

from questforge.core.config.config import Config, Environment
from questforge.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
)
from questforge.core.config.validator import ConfigSchema, ListOf, MapOf

__all__ = [
    "Config",
    "Environment",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
    "ConfigSchema",
    "ListOf",
    "MapOf",
]
