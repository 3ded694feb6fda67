"""Configuration module for Buraq."""

from buraq.config.settings import MASTER_KEY_ENV_VAR, Settings, get_settings

__all__ = ["MASTER_KEY_ENV_VAR", "Settings", "get_settings"]
