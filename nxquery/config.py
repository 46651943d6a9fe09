"""Configuration loading for nxquery (.nxquery.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".nxquery.yml"
DEFAULT_DIRECTORY = "src/query"


@dataclass
class WatchConfig:
    """Filesystem watcher settings for ``nxquery watch``."""

    recursive: bool = True


@dataclass
class NXQueryConfig:
    """Represents the settings defined in .nxquery.yml."""

    project_dir: Path
    directory: str = DEFAULT_DIRECTORY
    exclude_dirs: List[str] = field(default_factory=list)
    seed_templates: bool = True
    watch: WatchConfig = field(default_factory=WatchConfig)
    log_file: Optional[Path] = None

    @property
    def root(self) -> Path:
        """Absolute path of the scanned query directory."""
        return (self.project_dir / self.directory).resolve()


def load_config(config_path: Path) -> NXQueryConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(Path(config_path))
    project_dir = config_file.parent.resolve()

    if not config_file.exists():
        return NXQueryConfig(project_dir=project_dir)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    directory = data.get("directory", DEFAULT_DIRECTORY)
    if not isinstance(directory, str) or not directory.strip():
        raise ConfigError("'directory' must be a non-empty string")

    seed_templates = _as_bool(data.get("seed_templates"), "seed_templates", default=True)

    watch_data = data.get("watch")
    if watch_data is not None and not isinstance(watch_data, dict):
        raise ConfigError("'watch' must be a mapping")
    watch = WatchConfig()
    if watch_data:
        watch.recursive = _as_bool(watch_data.get("recursive"), "watch.recursive", default=True)

    log_file_str = _as_str(data.get("log_file"))
    log_file = project_dir / log_file_str if log_file_str else None

    return NXQueryConfig(
        project_dir=project_dir,
        directory=directory.strip(),
        exclude_dirs=_as_str_list(data.get("exclude_dirs"), "exclude_dirs"),
        seed_templates=seed_templates,
        watch=watch,
        log_file=log_file,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any, key: str, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"'{key}' must be a boolean")


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    raise ConfigError(f"'{key}' must be a list of strings")


__all__ = ["CONFIG_FILENAME", "DEFAULT_DIRECTORY", "NXQueryConfig", "WatchConfig", "load_config"]
