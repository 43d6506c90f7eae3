"""
Build configuration lookup.

Configurations live in ``<home>/configs/evm.<name>.yaml``; the name of the
active one is stored in ``<home>/evm-current.txt``. A configuration needs a
``root`` (the source checkout) and may set ``out`` (the output directory
name under ``<root>/src/out``, default ``Testing``) and ``executable``
(path of the built binary relative to the output directory).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from buildwrap.shared.errors import ConfigError, NoActiveConfigError
from buildwrap.shared.settings import Settings
from buildwrap.shared.yaml_loader import load_mapping

DEFAULT_OUT = "Testing"
CONFIG_PREFIX = "evm."
CONFIG_SUFFIX = ".yaml"


def default_executable_name(platform: str = sys.platform) -> str:
    """Path of the built app inside the output directory for a platform."""
    if platform == "darwin":
        return "Electron.app/Contents/MacOS/Electron"
    if platform == "win32":
        return "electron.exe"
    return "electron"


@dataclass(frozen=True)
class ActiveConfig:
    """A named build configuration and the paths derived from it."""

    name: str
    root: Path
    out: str = DEFAULT_OUT
    executable_name: str = ""

    @property
    def output_dir(self) -> Path:
        return self.root / "src" / "out" / self.out

    @property
    def executable(self) -> Path:
        return self.output_dir / (self.executable_name or default_executable_name())


def config_path(settings: Settings, name: str) -> Path:
    return settings.configs_dir / f"{CONFIG_PREFIX}{name}{CONFIG_SUFFIX}"


def list_configs(settings: Settings) -> list[str]:
    """Names of all configurations, sorted."""
    if not settings.configs_dir.is_dir():
        return []
    return sorted(
        p.name[len(CONFIG_PREFIX):-len(CONFIG_SUFFIX)]
        for p in settings.configs_dir.glob(f"{CONFIG_PREFIX}*{CONFIG_SUFFIX}")
        if p.is_file()
    )


def load_config(settings: Settings, name: str) -> ActiveConfig:
    """Load a configuration by name.

    Raises:
        ConfigError: If the file is missing or malformed.
    """
    path = config_path(settings, name)
    if not path.is_file():
        raise ConfigError(f"Build configuration '{name}' not found", str(path))

    data = load_mapping(path)
    root = data.get("root")
    if not root or not isinstance(root, str):
        raise ConfigError("'root' must be a non-empty string", str(path))

    out = data.get("out", DEFAULT_OUT)
    executable = data.get("executable", "")
    if not isinstance(out, str) or not isinstance(executable, str):
        raise ConfigError("'out' and 'executable' must be strings", str(path))

    return ActiveConfig(
        name=name,
        root=Path(root).expanduser(),
        out=out or DEFAULT_OUT,
        executable_name=executable,
    )


def current_name(settings: Settings) -> str | None:
    """Name of the active configuration, or None if none is selected."""
    try:
        name = settings.current_config_file.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return name or None


def current(settings: Settings) -> ActiveConfig:
    """Load the active configuration.

    Raises:
        NoActiveConfigError: If no configuration is selected.
        ConfigError: If the selected configuration cannot be loaded.
    """
    name = current_name(settings)
    if name is None:
        raise NoActiveConfigError()
    return load_config(settings, name)


def use(settings: Settings, name: str) -> ActiveConfig:
    """Make ``name`` the active configuration."""
    config = load_config(settings, name)
    settings.current_config_file.parent.mkdir(parents=True, exist_ok=True)
    settings.current_config_file.write_text(f"{name}\n", encoding="utf-8")
    return config
