"""
Configuration module for skillsync.

Exports the main components for convenient imports.
"""

from .loader import CONFIG_FILENAME, ConfigStore, deep_merge, load_settings
from .schema import (
    DEFAULT_REF,
    CategoryConfig,
    LoggingConfig,
    RegistrySettings,
    SkillConfig,
    ToolSettings,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigStore",
    "deep_merge",
    "load_settings",
    "DEFAULT_REF",
    "CategoryConfig",
    "SkillConfig",
    "LoggingConfig",
    "RegistrySettings",
    "ToolSettings",
]
