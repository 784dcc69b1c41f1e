from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .divergence import DEFAULT_MAINLINE
from .errors import ConfigError

DEFAULT_CONFIG_FILE = ".branchowners.yaml"

_KNOWN_KEYS = {"codeowners", "mainline", "show_unowned"}


@dataclass(frozen=True)
class Settings:
    codeowners: str | None = None  # None: search the default locations
    mainline: tuple[str, ...] = DEFAULT_MAINLINE
    show_unowned: bool = False

    def merged(self, **overrides: Any) -> "Settings":
        """Apply CLI overrides; None means "not given"."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _ensure_str_list(value: Any, *, source: str, field_name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value or not all(isinstance(x, str) and x.strip() for x in value):
        raise ConfigError(f"{source}: '{field_name}' must be a non-empty list of branch names")
    return tuple(x.strip() for x in value)


def parse_settings_obj(data: Any, *, source: str) -> Settings:
    if data is None:
        return Settings()
    if not isinstance(data, Mapping):
        raise ConfigError(f"{source}: expected a mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{source}: unknown keys: {', '.join(map(str, unknown))}")

    codeowners = data.get("codeowners")
    if codeowners is not None and (not isinstance(codeowners, str) or not codeowners.strip()):
        raise ConfigError(f"{source}: 'codeowners' must be a path")

    show_unowned = data.get("show_unowned", False)
    if not isinstance(show_unowned, bool):
        raise ConfigError(f"{source}: 'show_unowned' must be true or false")

    mainline = DEFAULT_MAINLINE
    if data.get("mainline") is not None:
        mainline = _ensure_str_list(data["mainline"], source=source, field_name="mainline")

    return Settings(codeowners=codeowners, mainline=mainline, show_unowned=show_unowned)


def load_settings(path: Path) -> Settings:
    if not path.exists():
        return Settings()
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse config file {path}: {e}") from e
    return parse_settings_obj(obj, source=str(path))
