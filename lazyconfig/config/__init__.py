"""
Configuration Module for LazyConfig.

Provides the settings store and its collaborators:
- Explicit settings schema and encryption policy
- JSON settings file persistence with change detection
- Lazy, thread-safe store with transparent per-key encryption
- Typed application settings
"""

from .policy import (
    SettingType,
    SettingSpec,
    EncryptionPolicy,
)
from .settings_map import SettingsMap
from .persistence import (
    LoadStatus,
    SettingsFile,
    resolve_settings_path,
)
from .store import LazyConfigStore
from .settings import (
    APP_SCHEMA,
    AppSettings,
    try_parse,
    format_value,
)

__all__ = [
    'SettingType',
    'SettingSpec',
    'EncryptionPolicy',
    'SettingsMap',
    'LoadStatus',
    'SettingsFile',
    'resolve_settings_path',
    'LazyConfigStore',
    'APP_SCHEMA',
    'AppSettings',
    'try_parse',
    'format_value',
]
