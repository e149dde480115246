from __future__ import annotations

import logging

from gi.repository import Gtk  # type: ignore

from soft_brightness.signals import Dispatcher
from soft_brightness.system.backlight import BrightnessChannel
from soft_brightness.ui import BacklightBinding, BrightnessControl, PanelSlot

logger = logging.getLogger(__name__)

BRIGHTNESS_SLOT = "brightness"


def _scale() -> Gtk.Scale:
    scale = Gtk.Scale.new_with_range(Gtk.Orientation.HORIZONTAL, 0.0, 1.0, 0.01)
    scale.set_draw_value(False)
    scale.set_size_request(200, -1)
    return scale


class SoftBrightnessScale(BrightnessControl):
    def __init__(self, dispatcher: Dispatcher) -> None:
        super().__init__(dispatcher)
        self._silent = False
        self.widget = _scale()
        self.widget.connect("value-changed", self._on_value_changed)

    @property
    def value(self) -> float:
        return float(self.widget.get_value())

    def set_value(self, value: float) -> None:
        self._silent = True
        try:
            self.widget.set_value(value)
        finally:
            self._silent = False

    def _on_value_changed(self, scale: Gtk.Scale) -> None:
        if not self._silent:
            self._user_edited(float(scale.get_value()))


class PanelWindow(Gtk.Window):
    """Small always-on-top panel holding named widget slots.

    Out of the box the brightness slot holds a plain backlight scale.
    """

    def __init__(self, channel: BrightnessChannel, dispatcher: Dispatcher) -> None:
        super().__init__(title="soft-brightness")
        self.set_decorated(False)
        self.set_keep_above(True)
        self.stick()

        self._box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        self._box.pack_start(
            Gtk.Image.new_from_icon_name("display-brightness-symbolic", Gtk.IconSize.MENU),
            False,
            False,
            0,
        )
        self._slots: dict[str, Gtk.Box] = {}

        slot = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL)
        stock = SoftBrightnessScale(dispatcher)
        self._binding = BacklightBinding(channel, stock)
        self._binding.attach()
        slot.pack_start(stock.widget, True, True, 0)
        self.add_slot(BRIGHTNESS_SLOT, slot)

        self.add(self._box)
        self.connect("destroy", self._on_destroy)

    def add_slot(self, name: str, container: Gtk.Box) -> None:
        self._slots[name] = container
        self._box.pack_start(container, True, True, 0)

    def slot(self, name: str) -> Gtk.Box | None:
        return self._slots.get(name)

    def _on_destroy(self, _window: Gtk.Window) -> None:
        self._binding.detach()


class PanelBrightnessSlot(PanelSlot):
    def __init__(self, panel: PanelWindow, name: str = BRIGHTNESS_SLOT) -> None:
        self._panel = panel
        self._name = name
        self._stock: list[Gtk.Widget] = []
        self._installed: SoftBrightnessScale | None = None

    def install(self, control: BrightnessControl) -> bool:
        container = self._panel.slot(self._name)
        if container is None or not isinstance(control, SoftBrightnessScale):
            logger.error("install(): Cannot find %s slot", self._name)
            return False
        logger.debug("install(): Replacing widgets in %s slot", self._name)
        self._stock = list(container.get_children())
        for child in self._stock:
            container.remove(child)
        container.pack_start(control.widget, True, True, 0)
        control.widget.show()
        self._installed = control
        return True

    def restore(self) -> None:
        container = self._panel.slot(self._name)
        if container is None or self._installed is None:
            return
        container.remove(self._installed.widget)
        for child in self._stock:
            container.pack_start(child, True, True, 0)
            child.show()
        self._stock = []
        self._installed = None
