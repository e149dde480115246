from __future__ import annotations

import pytest
from dbus_next import Variant
from dbus_next.errors import InterfaceNotFoundError

from fakes import QueueDispatcher
from soft_brightness.system.backlight import GSD_POWER_SCREEN, GsdPowerBacklight, NoBacklight


def _channel() -> tuple[GsdPowerBacklight, QueueDispatcher, list[int | None]]:
    dispatcher = QueueDispatcher()
    ch = GsdPowerBacklight(dispatcher)
    seen: list[int | None] = []
    ch.connect_changed(lambda: seen.append(ch.level))
    return ch, dispatcher, seen


def test_unconnected_channel_is_unavailable() -> None:
    ch, dispatcher, seen = _channel()
    assert ch.level is None
    assert ch.available is False

    ch.set_level(40)
    assert dispatcher.drain() == 0
    assert seen == []


def test_properties_changed_updates_level() -> None:
    ch, dispatcher, seen = _channel()

    ch._on_properties_changed(GSD_POWER_SCREEN, {"Brightness": Variant("i", 42)}, [])
    dispatcher.drain()

    assert ch.level == 42
    assert ch.available is True
    assert seen == [42]


def test_other_interfaces_and_properties_are_ignored() -> None:
    ch, dispatcher, seen = _channel()

    ch._on_properties_changed("org.example.Other", {"Brightness": Variant("i", 10)}, [])
    ch._on_properties_changed(GSD_POWER_SCREEN, {"Contrast": Variant("i", 10)}, [])

    assert dispatcher.drain() == 0
    assert ch.level is None


def test_no_backlight_reports_negative_level() -> None:
    ch, dispatcher, seen = _channel()
    ch._on_level_read(-1, None)
    dispatcher.drain()

    assert ch.level == -1
    assert ch.available is False
    assert seen == [-1]


def test_failed_read_or_write_marks_channel_unavailable() -> None:
    ch, dispatcher, seen = _channel()
    ch._on_level_read(None, RuntimeError("no such property"))
    ch._on_level_written(None, RuntimeError("denied"))
    dispatcher.drain()

    assert ch.level == -1
    assert seen == [-1, -1]


def test_disabled_backlight() -> None:
    ch = NoBacklight(QueueDispatcher())
    assert ch.level == -1
    assert ch.available is False
    ch.set_level(50)
    assert ch.level == -1


class _BusWithoutScreen:
    """Session bus whose power object lacks the Screen interface."""

    disconnected = False

    def __init__(self, bus_type: object = None) -> None:
        pass

    def connect_sync(self) -> _BusWithoutScreen:
        return self

    def introspect_sync(self, bus_name: str, object_path: str) -> object:
        return object()

    def get_proxy_object(self, bus_name: str, object_path: str, introspection: object) -> object:
        return self

    def get_interface(self, name: str) -> object:
        raise InterfaceNotFoundError(f"interface not found on this object: {name}")

    def disconnect(self) -> None:
        _BusWithoutScreen.disconnected = True


def test_missing_screen_interface_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("dbus_next.glib.MessageBus", _BusWithoutScreen)
    monkeypatch.setattr(_BusWithoutScreen, "disconnected", False)
    ch, dispatcher, seen = _channel()

    assert ch.connect() is False
    dispatcher.drain()

    assert _BusWithoutScreen.disconnected is True
    assert ch.available is False
    assert seen == [None]
