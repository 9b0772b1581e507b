"""Config – settings and validation."""
from eda_fanout.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    QueueSettings,
    Settings,
    SettingsLoader,
)
from eda_fanout.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "QueueSettings",
    "Settings",
    "SettingsLoader",
]
