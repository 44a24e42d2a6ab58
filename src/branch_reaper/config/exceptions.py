"""Configuration-related exceptions."""


class ConfigurationError(Exception):
    """Base exception for configuration errors."""


class MissingConfigurationError(ConfigurationError):
    """Configuration file or required setting is missing."""


class InvalidConfigurationError(ConfigurationError):
    """Configuration file cannot be parsed or a value is invalid."""
