from .core import (
    DatabaseSettings,
    LoggingSettings,
    Settings,
    YamlSettingsSource,
    load_settings,
    sanitize_dict,
)

__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "YamlSettingsSource",
    "load_settings",
    "sanitize_dict",
]
