from __future__ import annotations
from pathlib import Path
from platformdirs import PlatformDirs

APP = "cyrtagfix"
AUTHOR = "cyrtagfix"


def get_dirs() -> dict[str, Path]:
    d = PlatformDirs(appname=APP, appauthor=AUTHOR, roaming=True)
    return {
        "config": Path(d.user_config_dir),  # config.yaml
    }


def default_config_path() -> Path:
    return get_dirs()["config"] / "config.yaml"
