from __future__ import annotations

import cairo  # type: ignore
from gi.repository import Gtk  # type: ignore

from soft_brightness.model import DisplayRegion
from soft_brightness.overlays import Surface


class OverlayWindow(Surface):
    """Click-through black window covering one monitor."""

    def __init__(self, region: DisplayRegion) -> None:
        self._alpha = 0.0

        win = Gtk.Window(type=Gtk.WindowType.POPUP)
        win.set_decorated(False)
        win.set_keep_above(True)
        win.set_accept_focus(False)
        win.set_skip_taskbar_hint(True)
        win.set_skip_pager_hint(True)
        win.set_app_paintable(True)
        visual = win.get_screen().get_rgba_visual()
        if visual is not None:
            win.set_visual(visual)

        win.move(region.x, region.y)
        win.set_default_size(region.width, region.height)
        win.resize(region.width, region.height)
        win.connect("draw", self._on_draw)
        # Empty input shape: pointer events go to the windows underneath.
        win.input_shape_combine_region(cairo.Region())
        win.show()
        self._window = win

    def set_opacity(self, opacity: int) -> None:
        self._alpha = max(0, min(255, opacity)) / 255.0
        self._window.queue_draw()

    def destroy(self) -> None:
        self._window.destroy()

    def _on_draw(self, _widget: Gtk.Widget, cr: cairo.Context) -> bool:
        cr.set_operator(cairo.OPERATOR_SOURCE)
        cr.set_source_rgba(0.0, 0.0, 0.0, self._alpha)
        cr.paint()
        return False
