"""
Configuration error hierarchy for questforge.

Purpose
-------
Exceptions raised while loading and validating configuration: the
environment-driven ``Config`` and the YAML balance catalogue.

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigValidationError (schema/type validation failures)
└── ConfigInitializationError (catalogue file missing or unreadable)

A catalogue that parses but references an unknown id raises
``questforge.core.exceptions.ConfigurationMissingError`` instead.
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     catalogue = CatalogueLoader.load(path)
    ... except ConfigError as e:
    ...     logger.error(f"Catalogue load failed: {e}")
    """


class ConfigValidationError(ConfigError):
    """
    Raised when configuration validation fails.

    This exception is raised when:
    - Schema validation fails (wrong type, invalid structure)
    - A value cannot be converted to its enum or dataclass
    - Required fields are missing
    """


class ConfigInitializationError(ConfigError):
    """
    Raised when the catalogue cannot be loaded at all.

    This is a critical error; the engine cannot start without balance data.
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigInitializationError",
]
