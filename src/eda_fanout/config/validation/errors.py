"""Config validation errors. These are the only errors fatal at startup."""
from eda_fanout.kernel.errors import ApplicationError


class ConfigError(ApplicationError):
    """Settings could not be loaded, or a loaded value could not be parsed."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A settings field without a default has no environment variable."""
    default_code = "missing_required_setting"

    def __init__(self, env_key: str) -> None:
        super().__init__(f"Environment variable '{env_key}' is required")
        self.setting_name = env_key


class InvalidSettingValueError(ConfigError):
    """A queue or pipeline setting is out of range; raised when settings are built."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"{setting_name}={value!r} {reason}")
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
