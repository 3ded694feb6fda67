"""Custom exceptions for Buraq."""


class BuraqError(Exception):
    """Base exception for all Buraq errors."""

    pass


class ConfigurationError(BuraqError):
    """Error in configuration or settings."""

    pass
