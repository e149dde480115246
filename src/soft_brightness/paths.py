from __future__ import annotations

import os
from pathlib import Path


def default_config_dir(app_name: str = "soft-brightness") -> Path:
    """Return the per-user configuration directory.

    Uses XDG_CONFIG_HOME when available, else ~/.config.
    """

    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        root = Path(base)
    else:
        root = Path.home() / ".config"
    return root / app_name


def default_config_file() -> Path:
    return default_config_dir() / "config.yaml"


def default_settings_file() -> Path:
    return default_config_dir() / "settings.yaml"
