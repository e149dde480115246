from __future__ import annotations

import logging
from dataclasses import dataclass

from soft_brightness.model import (
    Rounding,
    SourceMode,
    brightness_from_level,
    level_from_brightness,
    level_is_concrete,
    opacity_for,
)
from soft_brightness.overlays import OverlayManager
from soft_brightness.settings import SettingsStore
from soft_brightness.signals import Subscriptions
from soft_brightness.system.backlight import BrightnessChannel
from soft_brightness.system.topology import DisplayTopology
from soft_brightness.ui import BrightnessControl, PanelSlot

logger = logging.getLogger(__name__)


@dataclass
class BrightnessController:
    """Decides the effective brightness and keeps the overlays in line with it.

    Brightness comes either from the hardware channel or from the
    ``current-brightness`` setting (see ``source_mode``). Whichever source is
    authoritative is the only one read and the only one written back. All
    entry points run as callbacks on the host loop, one at a time.
    """

    settings: SettingsStore
    channel: BrightnessChannel
    topology: DisplayTopology
    overlays: OverlayManager
    control: BrightnessControl
    slot: PanelSlot
    rounding: Rounding = Rounding.BIASED

    def __post_init__(self) -> None:
        self._subs = Subscriptions()
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def subscription_count(self) -> int:
        return len(self._subs)

    @property
    def source_mode(self) -> SourceMode:
        if self.settings.get_boolean("use-backlight") and self.channel.available:
            return SourceMode.USE_BACKLIGHT
        return SourceMode.USE_SOFTWARE_SETTING

    def enable(self) -> bool:
        if self._enabled:
            logger.debug("enable() skipped, already enabled")
            return True
        logger.debug("enable()")

        if not self.slot.install(self.control):
            logger.error("enable(): Cannot find brightness slot, not enabling")
            return False

        s = self.settings
        self._subs.add(s, s.connect("changed::min-brightness", self._on_brightness_setting_change))
        self._subs.add(
            s, s.connect("changed::current-brightness", self._on_brightness_setting_change)
        )
        self._subs.add(s, s.connect("changed::monitors", self.on_monitor_selection_change))
        self._subs.add(s, s.connect("changed::use-backlight", self.on_source_mode_change))
        self._subs.add(self.topology, self.topology.connect_changed(self.on_topology_change))
        self._subs.add(self.channel, self.channel.connect_changed(self._on_hardware_change))
        self._subs.add(self.control, self.control.connect_user_edit(self.on_user_adjust))
        self._enabled = True

        # The channel may still be connecting; its first report starts things.
        if s.get_boolean("use-backlight") and self.channel.level is None:
            logger.debug("enable(): waiting for the backlight to report")
            return True

        self.control.set_value(self.read_brightness())
        self.recompute_effective()
        return True

    def disable(self) -> None:
        if not self._enabled:
            logger.warning("disable() called when not enabled")
            return
        logger.debug("disable()")
        self._enabled = False
        self._subs.clear()
        self.overlays.hide_overlays()
        self.slot.restore()

    def _alive(self, what: str) -> bool:
        if not self._enabled:
            logger.debug("%s dropped, controller disabled", what)
        return self._enabled

    def read_brightness(self) -> float:
        level = self.channel.level
        if self.source_mode is SourceMode.USE_BACKLIGHT and level is not None:
            value = brightness_from_level(level)
            logger.debug("read_brightness() by backlight = %s <- %d", value, level)
            return value
        value = self.settings.get_double("current-brightness")
        logger.debug("read_brightness() by setting = %s", value)
        return value

    def store_brightness(self, value: float) -> None:
        if self.source_mode is SourceMode.USE_BACKLIGHT:
            level = level_from_brightness(value, self.rounding)
            logger.debug("store_brightness(%s) by backlight -> %d", value, level)
            self.channel.set_level(level)
        else:
            logger.debug("store_brightness(%s) by setting", value)
            self.settings.set_double("current-brightness", value)

    def recompute_effective(self) -> None:
        current = self.read_brightness()
        minimum = self.settings.get_double("min-brightness")
        logger.debug("recompute: current-brightness=%s, min-brightness=%s", current, minimum)

        if current < minimum:
            # The write triggers a fresh notification which finishes the job.
            if self.source_mode is SourceMode.USE_SOFTWARE_SETTING:
                self.control.set_value(minimum)
            self.store_brightness(minimum)
            return

        if current >= 1:
            self.overlays.hide_overlays()
            return

        opacity = opacity_for(current)
        logger.debug("recompute: opacity=%d", opacity)
        self.overlays.show_overlays(opacity, self.settings.get_string("monitors"), self.topology)

    def on_user_adjust(self, value: float) -> None:
        if not self._alive("on_user_adjust()"):
            return
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"brightness must be within [0, 1], got {value}")
        logger.debug("on_user_adjust(%s)", value)
        self.store_brightness(value)

    def on_source_mode_change(self, *_: object) -> None:
        if not self._alive("on_source_mode_change()"):
            return
        if self.settings.get_boolean("use-backlight"):
            logger.debug("on_source_mode_change(): to backlight")
            self.store_brightness(self.settings.get_double("current-brightness"))
            return
        level = self.channel.level
        if level is not None and level_is_concrete(level):
            logger.debug("on_source_mode_change(): to setting")
            self.store_brightness(brightness_from_level(level))

    def on_monitor_selection_change(self, *_: object) -> None:
        if not self._alive("on_monitor_selection_change()"):
            return
        logger.debug("on_monitor_selection_change()")
        self.overlays.hide_overlays()
        self.recompute_effective()

    def on_topology_change(self, *_: object) -> None:
        if not self._alive("on_topology_change()"):
            return
        logger.debug("on_topology_change()")
        self.overlays.hide_overlays()
        self.recompute_effective()

    def _on_brightness_setting_change(self, key: str) -> None:
        if not self._alive(f"changed::{key}"):
            return
        self.recompute_effective()
        if key == "current-brightness" and self.source_mode is SourceMode.USE_SOFTWARE_SETTING:
            self.control.set_value(self.read_brightness())

    def _on_hardware_change(self, *_: object) -> None:
        if not self._alive("backlight change"):
            return
        logger.debug("backlight changed: level=%s", self.channel.level)
        self.recompute_effective()
        self.control.set_value(self.read_brightness())
