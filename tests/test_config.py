from __future__ import annotations

from pathlib import Path

import pytest

from soft_brightness.config import ConfigError, load, normalize, validate


def test_empty_config_gets_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    cfg: dict = {}
    validate(cfg)
    normalize(cfg)

    assert cfg["settings_file"] == str(tmp_path / "soft-brightness" / "settings.yaml")
    assert cfg["backlight"]["enabled"] is True
    assert cfg["backlight"]["bus_name"] == "org.gnome.SettingsDaemon.Power"
    assert cfg["backlight"]["rounding"] == "biased"
    assert cfg["dbus"] == {"enabled": True}
    assert cfg["logging"] == {"file": None}


def test_unknown_rounding_is_rejected() -> None:
    with pytest.raises(ConfigError):
        validate({"backlight": {"rounding": "nearest"}})


@pytest.mark.parametrize(
    "cfg",
    [
        {"backlight": ["enabled"]},
        {"backlight": {"bus_name": 5}},
        {"settings_file": 3},
        {"dbus": "yes"},
        {"logging": {"file": 1}},
    ],
)
def test_wrongly_typed_sections_are_rejected(cfg: dict) -> None:
    with pytest.raises(ConfigError):
        validate(cfg)


def test_normalize_strips_and_expands_paths() -> None:
    cfg = {"settings_file": "  ~/dim.yaml  ", "logging": {"file": "~/dim.log"}}
    normalize(cfg)
    assert cfg["settings_file"] == str(Path.home() / "dim.yaml")
    assert cfg["logging"]["file"] == str(Path.home() / "dim.log")


def test_load_from_file(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text(
        "settings_file: /tmp/s.yaml\nbacklight:\n  enabled: false\n  rounding: ceil\n"
        "dbus:\n  enabled: false\n",
        encoding="utf-8",
    )
    cfg = load(p)
    assert cfg["settings_file"] == "/tmp/s.yaml"
    assert cfg["backlight"]["enabled"] is False
    assert cfg["backlight"]["rounding"] == "ceil"
    assert cfg["backlight"]["interface"] == "org.gnome.SettingsDaemon.Power.Screen"
    assert cfg["dbus"]["enabled"] is False


def test_load_rejects_non_mapping(tmp_path: Path) -> None:
    p = tmp_path / "config.yaml"
    p.write_text("- a\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load(p)


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load(tmp_path / "missing.yaml")


def test_missing_default_file_is_fine(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    cfg = load()
    assert cfg["backlight"]["enabled"] is True
