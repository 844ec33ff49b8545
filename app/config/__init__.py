"""Configuration package for runtime settings and startup validation."""

from .log_setup import config_configure_logging
from .settings import AppSettings, SettingsLoadError, config_load_settings

__all__ = ["AppSettings", "SettingsLoadError", "config_load_settings", "config_configure_logging"]
