from __future__ import annotations

import abc
import logging
from typing import Any

from soft_brightness.model import level_is_concrete
from soft_brightness.signals import Dispatcher, Handler, Notifier

logger = logging.getLogger(__name__)

GSD_POWER_BUS = "org.gnome.SettingsDaemon.Power"
GSD_POWER_PATH = "/org/gnome/SettingsDaemon/Power"
GSD_POWER_SCREEN = "org.gnome.SettingsDaemon.Power.Screen"
PROPERTIES_IFACE = "org.freedesktop.DBus.Properties"


class BrightnessChannel(abc.ABC):
    """Hardware brightness as an integer level in [0, 100].

    ``level`` is None until the hardware has reported, and negative when the
    hardware reports that there is no backlight to control.
    """

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._changed = Notifier(dispatcher, "brightness-changed")

    @property
    @abc.abstractmethod
    def level(self) -> int | None:
        raise NotImplementedError

    @property
    def available(self) -> bool:
        return level_is_concrete(self.level)

    @abc.abstractmethod
    def set_level(self, level: int) -> None:
        raise NotImplementedError

    def connect_changed(self, handler: Handler) -> int:
        return self._changed.connect(handler)

    def disconnect(self, handler_id: int) -> None:
        self._changed.disconnect(handler_id)

    def handler_count(self) -> int:
        return len(self._changed)

    def close(self) -> None:
        return None


class NoBacklight(BrightnessChannel):
    """Channel used when backlight control is turned off in the config."""

    @property
    def level(self) -> int | None:
        return -1

    def set_level(self, level: int) -> None:
        logger.debug("set_level(%d) ignored, backlight control disabled", level)


class GsdPowerBacklight(BrightnessChannel):
    """Screen brightness exposed by the GNOME Settings Daemon power plugin."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        bus_name: str = GSD_POWER_BUS,
        object_path: str = GSD_POWER_PATH,
        interface: str = GSD_POWER_SCREEN,
    ) -> None:
        super().__init__(dispatcher)
        self._bus_name = bus_name
        self._object_path = object_path
        self._interface = interface
        self._level: int | None = None
        self._bus: Any = None
        self._screen: Any = None

    @property
    def level(self) -> int | None:
        return self._level

    def connect(self) -> bool:
        from dbus_next import BusType
        from dbus_next.errors import AuthError, DBusError, InterfaceNotFoundError
        from dbus_next.glib import MessageBus

        try:
            self._bus = MessageBus(bus_type=BusType.SESSION).connect_sync()
            introspection = self._bus.introspect_sync(self._bus_name, self._object_path)
            obj = self._bus.get_proxy_object(self._bus_name, self._object_path, introspection)
            self._screen = obj.get_interface(self._interface)
            props = obj.get_interface(PROPERTIES_IFACE)
        except (AuthError, DBusError, InterfaceNotFoundError, OSError, ValueError) as e:
            logger.info("Backlight channel %s unavailable: %s", self._bus_name, e)
            self.close()
            # Nothing will ever be reported; let waiting listeners fall back.
            self._changed.emit()
            return False

        props.on_properties_changed(self._on_properties_changed)
        self._screen.get_brightness(self._on_level_read)
        return True

    def set_level(self, level: int) -> None:
        if self._screen is None:
            logger.debug("set_level(%d) dropped, not connected", level)
            return
        if level == self._level:
            # No PropertiesChanged will follow an unchanged write.
            self._changed.emit()
            return
        self._screen.set_brightness(int(level), self._on_level_written)

    def close(self) -> None:
        if self._bus is not None:
            self._bus.disconnect()
        self._bus = None
        self._screen = None

    def _update(self, value: Any) -> None:
        try:
            level = int(value)
        except (TypeError, ValueError):
            logger.debug("Ignoring brightness value %r", value)
            level = -1
        logger.debug("Backlight level %s -> %d", self._level, level)
        self._level = level
        self._changed.emit()

    def _on_level_read(self, value: Any, err: Exception | None) -> None:
        if err is not None:
            logger.debug("Reading Brightness failed: %s", err)
            self._level = -1
            self._changed.emit()
            return
        self._update(value)

    def _on_level_written(self, _result: Any, err: Exception | None) -> None:
        if err is not None:
            logger.debug("Writing Brightness failed: %s", err)
            self._level = -1
            self._changed.emit()

    def _on_properties_changed(
        self, interface_name: str, changed: dict[str, Any], invalidated: list[str]
    ) -> None:
        if interface_name != self._interface:
            return
        if "Brightness" in changed:
            self._update(changed["Brightness"].value)
        elif "Brightness" in invalidated and self._screen is not None:
            self._screen.get_brightness(self._on_level_read)
