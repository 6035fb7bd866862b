"""Exceptions raised while reading smartorg configuration."""


class ConfigError(Exception):
    """Raised when configuration data cannot be parsed or validated."""
