"""Config settings – dataclass settings and environment loaders."""
from eda_fanout.config.settings.base import QueueSettings, Settings
from eda_fanout.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "QueueSettings", "Settings", "SettingsLoader"]
