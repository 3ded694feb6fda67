"""Utility modules for Buraq."""

from buraq.utils.exceptions import BuraqError, ConfigurationError

__all__ = [
    "BuraqError",
    "ConfigurationError",
]
