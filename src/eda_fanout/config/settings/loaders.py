"""Config settings – EnvSettingsLoader, DotenvSettingsLoader."""
from __future__ import annotations

import abc
import dataclasses
import os
from typing import Any, TypeVar

from eda_fanout.config.settings.base import Settings
from eda_fanout.config.validation import ConfigError, MissingRequiredSettingError

T = TypeVar("T", bound=Settings)

_NONE_VALUES = frozenset({"", "none", "null"})


class SettingsLoader(abc.ABC):
    """Port: load settings from an external source."""

    @abc.abstractmethod
    def load(self, settings_class: type[T]) -> T: ...


class EnvSettingsLoader(SettingsLoader):
    """Load settings from OS environment variables.

    Variable names are ``{PREFIX}_{FIELD}`` upper-cased. The prefix defaults to
    the settings class ``_prefix`` and can be overridden per loader, so two
    queues can share ``QueueSettings``::

        EnvSettingsLoader(prefix="MAILER_QUEUE").load(QueueSettings)
    """

    def __init__(self, prefix: str | None = None) -> None:
        self._prefix = prefix

    def load(self, settings_class: type[T]) -> T:
        prefix = (self._prefix if self._prefix is not None else getattr(settings_class, "_prefix", "")).upper()
        kwargs: dict[str, Any] = {}

        for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
            env_key = f"{prefix}_{field.name}".upper().lstrip("_")
            raw = os.environ.get(env_key)

            if raw is None:
                if (
                    field.default is dataclasses.MISSING
                    and field.default_factory is dataclasses.MISSING  # type: ignore[misc]
                ):
                    raise MissingRequiredSettingError(env_key)
                continue

            try:
                kwargs[field.name] = self._coerce(raw, field.type)
            except ValueError as exc:
                raise ConfigError(f"Cannot parse {env_key}={raw!r}: {exc}", cause=exc) from exc

        # _validate() raises InvalidSettingValueError, itself a ConfigError
        return settings_class(**kwargs)

    def _coerce(self, value: str, type_hint: Any) -> Any:  # noqa: PLR0911
        hint = type_hint if isinstance(type_hint, str) else getattr(type_hint, "__name__", str(type_hint))
        parts = [p.strip() for p in hint.split("|")]
        optional = "None" in parts
        parts = [p for p in parts if p != "None"]
        base = parts[0] if parts else "str"

        if optional and value.strip().lower() in _NONE_VALUES:
            return None
        if base == "bool":
            return value.lower() in ("1", "true", "yes", "on")
        if base == "int":
            return int(value)
        if base == "float":
            return float(value)
        if base.startswith(("list", "tuple")):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


class DotenvSettingsLoader(SettingsLoader):
    """Load settings from a ``.env`` file then fall back to ``EnvSettingsLoader``."""

    def __init__(self, env_file: str = ".env", override: bool = False, prefix: str | None = None) -> None:
        self._env_file = env_file
        self._override = override
        self._prefix = prefix

    def load(self, settings_class: type[T]) -> T:
        from dotenv import load_dotenv

        load_dotenv(self._env_file, override=self._override)
        return EnvSettingsLoader(prefix=self._prefix).load(settings_class)


__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "SettingsLoader"]
