"""Tool settings: defaults, overridden by settings.yaml, overridden by env."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError
from .yaml_loader import load_mapping

DEFAULT_HOME = Path("~/.buildwrap")
DEFAULT_DEPOT_TOOLS_URL = "https://chromium.googlesource.com/chromium/tools/depot_tools.git"

ENV_PREFIX = "BUILDWRAP_"
SETTINGS_FILE = "settings.yaml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Resolved settings for one invocation."""

    home: Path = field(default_factory=lambda: DEFAULT_HOME.expanduser())
    update_interval_hours: float = 4
    advance_on_failure: bool = True
    depot_tools_dir: Path | None = None
    depot_tools_url: str = DEFAULT_DEPOT_TOOLS_URL
    depot_tools_update_hours: float = 24

    def __post_init__(self) -> None:
        self.home = Path(self.home).expanduser()
        if self.depot_tools_dir is None:
            self.depot_tools_dir = self.home / "third_party" / "depot_tools"
        else:
            self.depot_tools_dir = Path(self.depot_tools_dir).expanduser()

    @property
    def state_file(self) -> Path:
        return self.home / ".last-update"

    @property
    def disable_marker(self) -> Path:
        return self.home / ".disable-auto-updates"

    @property
    def configs_dir(self) -> Path:
        return self.home / "configs"

    @property
    def current_config_file(self) -> Path:
        return self.home / "evm-current.txt"

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from defaults, ``settings.yaml`` and the environment."""
        env = os.environ if environ is None else environ
        home = Path(env.get(f"{ENV_PREFIX}HOME", str(DEFAULT_HOME))).expanduser()

        values: dict[str, Any] = {"home": home}
        settings_path = home / SETTINGS_FILE
        if settings_path.is_file():
            for key, raw in load_mapping(settings_path).items():
                values[key] = _coerce(key, raw, str(settings_path))

        for name in _field_names():
            env_key = f"{ENV_PREFIX}{name.upper()}"
            if name != "home" and env_key in env:
                values[name] = _coerce(name, env[env_key], env_key)

        return cls(**values)


def _field_names() -> list[str]:
    return [f.name for f in fields(Settings)]


def _coerce(name: str, raw: Any, source: str) -> Any:
    """Convert a raw settings value to the type of the named field."""
    if name not in _field_names() or name == "home":
        raise ConfigError(f"Unknown setting '{name}'", source)

    if name in ("update_interval_hours", "depot_tools_update_hours"):
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"'{name}' must be a number, got {raw!r}", source) from None
        if value < 0:
            raise ConfigError(f"'{name}' must not be negative", source)
        return value

    if name == "advance_on_failure":
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigError(f"'{name}' must be a boolean, got {raw!r}", source)

    if name == "depot_tools_dir":
        return Path(str(raw)).expanduser()

    return str(raw)
