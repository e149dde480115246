from __future__ import annotations

import logging
import signal
from collections.abc import Callable
from typing import Any

from soft_brightness.controller import BrightnessController
from soft_brightness.dbus_service import Callbacks, SoftBrightnessInterface, serve
from soft_brightness.logging_config import set_debug
from soft_brightness.model import MonitorSelection, Rounding
from soft_brightness.settings import SettingsError, SettingsStore

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[SettingsStore], BrightnessController]


class SoftBrightnessApp:
    """Outer lifecycle: debug toggle plus one controller per enable()."""

    def __init__(
        self, settings: SettingsStore, build_controller: ControllerFactory, verbose: bool = False
    ) -> None:
        self._settings = settings
        self._verbose = verbose
        self._build_controller = build_controller
        self._controller: BrightnessController | None = None
        self._debug_handler: int | None = None

    @property
    def enabled(self) -> bool:
        return self._controller is not None

    @property
    def controller(self) -> BrightnessController | None:
        return self._controller

    def enable(self) -> bool:
        if self._controller is not None:
            logger.debug("enable() skipped as already enabled")
            return True

        self._debug_handler = self._settings.connect("changed::debug", self._on_debug_change)
        set_debug(self._verbose or self._settings.get_boolean("debug"))
        logger.debug("enable()")

        controller = self._build_controller(self._settings)
        if not controller.enable():
            self._settings.disconnect(self._debug_handler)
            self._debug_handler = None
            return False
        self._controller = controller
        logger.debug("Soft brightness enabled")
        return True

    def disable(self) -> None:
        if self._controller is None:
            logger.warning("disable() called when not enabled")
            return
        logger.debug("disable()")
        if self._debug_handler is not None:
            self._settings.disconnect(self._debug_handler)
            self._debug_handler = None
        self._controller.disable()
        self._controller = None
        logger.debug("Soft brightness disabled")

    def _on_debug_change(self, _key: str) -> None:
        debug = self._settings.get_boolean("debug")
        set_debug(self._verbose or debug)
        logger.info("debug = %s", debug)

    def get_brightness(self) -> float:
        if self._controller is None:
            return self._settings.get_double("current-brightness")
        return self._controller.read_brightness()

    def set_brightness(self, value: float) -> bool:
        if self._controller is None or not 0.0 <= value <= 1.0:
            return False
        self._controller.on_user_adjust(value)
        return True

    def _set(self, key: str, value: Any) -> bool:
        try:
            self._settings.set(key, value)
        except SettingsError as e:
            logger.warning("Rejected %s: %s", key, e)
            return False
        return True

    def set_min_brightness(self, value: float) -> bool:
        return self._set("min-brightness", value)

    def set_monitors(self, monitors: str) -> bool:
        if MonitorSelection.parse(monitors) is None:
            logger.warning("Rejected monitors: %r", monitors)
            return False
        return self._set("monitors", monitors)

    def set_use_backlight(self, enabled: bool) -> bool:
        return self._set("use-backlight", bool(enabled))

    def set_debug(self, enabled: bool) -> bool:
        return self._set("debug", bool(enabled))

    def callbacks(self) -> Callbacks:
        return Callbacks(
            get_brightness=self.get_brightness,
            set_brightness=self.set_brightness,
            set_min_brightness=self.set_min_brightness,
            set_monitors=self.set_monitors,
            set_use_backlight=self.set_use_backlight,
            set_debug=self.set_debug,
        )


def run(cfg: dict[str, Any]) -> None:
    """Run the daemon on the GLib main loop until SIGINT/SIGTERM."""

    # Import Gtk lazily so the base package remains importable on non-GUI systems.
    try:
        from gi.repository import GLib  # type: ignore

        from soft_brightness.gtk.panel import PanelBrightnessSlot, PanelWindow, SoftBrightnessScale
        from soft_brightness.gtk.surfaces import OverlayWindow
        from soft_brightness.gtk.topology import GdkTopology
    except Exception as e:  # pragma: no cover
        raise SystemExit(
            "soft-brightness requires GTK3 + PyGObject (apt install python3-gi gir1.2-gtk-3.0)"
        ) from e

    from soft_brightness.overlays import OverlayManager
    from soft_brightness.signals import GLibDispatcher
    from soft_brightness.system.backlight import BrightnessChannel, GsdPowerBacklight, NoBacklight

    dispatcher = GLibDispatcher()
    settings = SettingsStore(cfg["settings_file"], dispatcher)

    bl = cfg["backlight"]
    channel: BrightnessChannel
    if bl["enabled"]:
        gsd = GsdPowerBacklight(
            dispatcher,
            bus_name=bl["bus_name"],
            object_path=bl["object_path"],
            interface=bl["interface"],
        )
        gsd.connect()
        channel = gsd
    else:
        channel = NoBacklight(dispatcher)

    topology = GdkTopology(dispatcher)
    panel = PanelWindow(channel, dispatcher)
    control = SoftBrightnessScale(dispatcher)
    rounding = Rounding(bl["rounding"])

    def build_controller(store: SettingsStore) -> BrightnessController:
        return BrightnessController(
            settings=store,
            channel=channel,
            topology=topology,
            overlays=OverlayManager(OverlayWindow),
            control=control,
            slot=PanelBrightnessSlot(panel),
            rounding=rounding,
        )

    app = SoftBrightnessApp(settings, build_controller, verbose=bool(cfg.get("verbose")))
    loop = GLib.MainLoop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signum, _quit, loop)

    panel.show_all()
    app.enable()

    bus = None
    if cfg["dbus"]["enabled"]:
        bus = serve(SoftBrightnessInterface(app.callbacks()))

    try:
        loop.run()
    finally:
        if app.enabled:
            app.disable()
        if bus is not None:
            bus.disconnect()
        channel.close()
        topology.close()
        panel.destroy()


def _quit(loop: Any) -> bool:
    logger.info("Shutting down")
    loop.quit()
    return False
