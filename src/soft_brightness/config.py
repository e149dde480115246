from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from soft_brightness.model import Rounding
from soft_brightness.paths import default_config_file, default_settings_file
from soft_brightness.system.backlight import GSD_POWER_BUS, GSD_POWER_PATH, GSD_POWER_SCREEN


class ConfigError(ValueError):
    pass


_BACKLIGHT_DEFAULTS: dict[str, Any] = {
    "enabled": True,
    "bus_name": GSD_POWER_BUS,
    "object_path": GSD_POWER_PATH,
    "interface": GSD_POWER_SCREEN,
    "rounding": Rounding.BIASED.value,
}


def _section(cfg: dict[str, Any], key: str) -> dict[str, Any]:
    value = cfg.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def load(path: str | Path | None = None) -> dict[str, Any]:
    """Load, validate and normalize the config file.

    A missing file at the default location yields the defaults; a missing
    file that was asked for explicitly is an error.
    """

    p = Path(path) if path is not None else default_config_file()
    if not p.exists():
        if path is not None:
            raise ConfigError(f"Config file not found: {p}")
        data: Any = {}
    else:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
        if data is None:
            data = {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level config must be a mapping")
    validate(data)
    normalize(data)
    return data


def validate(cfg: dict[str, Any]) -> None:
    settings_file = cfg.get("settings_file")
    if settings_file is not None and not isinstance(settings_file, str):
        raise ConfigError("settings_file must be a string")

    backlight = _section(cfg, "backlight")
    for key in ("bus_name", "object_path", "interface"):
        if key in backlight and not isinstance(backlight[key], str):
            raise ConfigError(f"backlight.{key} must be a string")
    rounding = backlight.get("rounding", Rounding.BIASED.value)
    if rounding not in {r.value for r in Rounding}:
        raise ConfigError(
            f"backlight.rounding must be one of {[r.value for r in Rounding]}, got {rounding!r}"
        )

    _section(cfg, "dbus")

    log_file = _section(cfg, "logging").get("file")
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError("logging.file must be a string")


def normalize(cfg: dict[str, Any]) -> None:
    """Fill in defaults and expand user paths in place."""

    settings_file = str(cfg.get("settings_file") or "").strip()
    if not settings_file:
        cfg["settings_file"] = str(default_settings_file())
    else:
        cfg["settings_file"] = str(Path(settings_file).expanduser())

    backlight = _section(cfg, "backlight")
    cfg["backlight"] = {**_BACKLIGHT_DEFAULTS, **backlight}
    cfg["backlight"]["enabled"] = bool(cfg["backlight"]["enabled"])

    dbus = _section(cfg, "dbus")
    cfg["dbus"] = {"enabled": bool(dbus.get("enabled", True))}

    log_file = _section(cfg, "logging").get("file")
    cfg["logging"] = {"file": str(Path(log_file.strip()).expanduser()) if log_file else None}
