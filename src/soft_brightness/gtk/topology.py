from __future__ import annotations

from gi.repository import Gdk  # type: ignore

from soft_brightness.model import DisplayRegion
from soft_brightness.signals import Dispatcher
from soft_brightness.system.topology import DisplayTopology


class GdkTopology(DisplayTopology):
    def __init__(self, dispatcher: Dispatcher) -> None:
        super().__init__(dispatcher)
        self._display = Gdk.Display.get_default()
        self._screen = Gdk.Screen.get_default()
        self._handler: int | None = self._screen.connect(
            "monitors-changed", self._on_monitors_changed
        )

    def regions(self) -> list[DisplayRegion]:
        monitors = [self._display.get_monitor(i) for i in range(self._display.get_n_monitors())]
        primary = self._display.get_primary_monitor()
        # Wayland backends may not designate one; treat the first as built-in.
        if primary is None and monitors:
            primary = monitors[0]

        out: list[DisplayRegion] = []
        for monitor in monitors:
            g = monitor.get_geometry()
            out.append(DisplayRegion(g.x, g.y, g.width, g.height, is_primary=monitor == primary))
        return out

    def close(self) -> None:
        if self._handler is not None:
            self._screen.disconnect(self._handler)
            self._handler = None

    def _on_monitors_changed(self, _screen: Gdk.Screen) -> None:
        self._changed.emit()
