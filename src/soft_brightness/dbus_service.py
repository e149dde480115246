from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from dbus_next.service import ServiceInterface, method

# dbus-next uses signature strings ("d", "b") in annotations.
# Ruff tries to treat these as Python types.


BUS_NAME = "io.github.soft_brightness"
OBJ_PATH = "/io/github/soft_brightness"


@dataclass(frozen=True)
class Callbacks:
    get_brightness: Callable[[], float]
    set_brightness: Callable[[float], bool]
    set_min_brightness: Callable[[float], bool]
    set_monitors: Callable[[str], bool]
    set_use_backlight: Callable[[bool], bool]
    set_debug: Callable[[bool], bool]


class SoftBrightnessInterface(ServiceInterface):
    def __init__(self, cb: Callbacks):
        super().__init__(BUS_NAME)
        self._cb = cb

    @method()
    def GetBrightness(self) -> "d":  # noqa: N802
        return float(self._cb.get_brightness())

    @method()
    def SetBrightness(self, value: "d") -> "b":  # noqa: N802
        return bool(self._cb.set_brightness(value))

    @method()
    def SetMinBrightness(self, value: "d") -> "b":  # noqa: N802
        return bool(self._cb.set_min_brightness(value))

    @method()
    def SetMonitors(self, monitors: "s") -> "b":  # noqa: N802
        return bool(self._cb.set_monitors(monitors))

    @method()
    def SetUseBacklight(self, enabled: "b") -> "b":  # noqa: N802
        return bool(self._cb.set_use_backlight(enabled))

    @method()
    def SetDebug(self, enabled: "b") -> "b":  # noqa: N802
        return bool(self._cb.set_debug(enabled))


def serve(iface: SoftBrightnessInterface) -> Any:
    """Export the interface on the session bus from the GLib main loop."""

    from dbus_next.glib import MessageBus

    bus = MessageBus().connect_sync()
    bus.export(OBJ_PATH, iface)
    bus.request_name_sync(BUS_NAME)
    return bus
