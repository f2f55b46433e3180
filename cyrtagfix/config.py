"""
config — Loads config.yaml; command-line flags override it.

Precedence: CLI flags > config.yaml > defaults
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
import yaml

from .mojibake import DEFAULT_THRESHOLD
from .paths import default_config_path


class ConfigError(ValueError):
    pass


@dataclass
class Config:
    # Backups
    no_backup: bool = False

    # Cue sheets: read every .cue as cp1251 without probing for UTF-8
    force_cp1251_cue: bool = False

    # Detector acceptance threshold
    cyr_threshold: float = DEFAULT_THRESHOLD

    # Walking
    follow_symlinks: bool = True

    # Logging
    log_level: str = "WARNING"
    log_file: str = ""  # empty = stderr only
    log_json: bool = False

    def merge(self, **overrides) -> "Config":
        """Return a copy with every non-None override applied."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        for key, value in overrides.items():
            if key not in data:
                raise ConfigError(f"unknown setting: {key}")
            if value is not None:
                data[key] = value
        return Config(**data)


def _coerce(name: str, current: object, value: object) -> object:
    field_type = type(current)
    try:
        if field_type == bool:
            if isinstance(value, str):
                return value.strip().lower() in ("1", "true", "yes", "on")
            return bool(value)
        if field_type == float:
            return float(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid value for {name}: {value!r}") from e


def load_config(config_path: str | Path | None = None) -> Config:
    """
    Load config from a YAML file.

    An explicit ``config_path`` must exist; without one, config.yaml in the
    user config directory is read if present. Unknown keys are ignored.
    """
    cfg = Config()

    if config_path is None:
        path = default_config_path()
        if not path.exists():
            return cfg
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(cfg)}
    for key, value in data.items():
        key_norm = str(key).replace("-", "_")
        if key_norm in known and value is not None:
            setattr(cfg, key_norm, _coerce(key_norm, getattr(cfg, key_norm), value))

    return cfg

