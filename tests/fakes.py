from __future__ import annotations

from collections import deque
from collections.abc import Callable
from typing import Any

from soft_brightness.controller import BrightnessController
from soft_brightness.model import DisplayRegion, Rounding
from soft_brightness.overlays import OverlayManager, Surface
from soft_brightness.settings import SettingsStore
from soft_brightness.signals import Dispatcher
from soft_brightness.system.backlight import BrightnessChannel
from soft_brightness.system.topology import DisplayTopology
from soft_brightness.ui import BrightnessControl, PanelSlot

PRIMARY = DisplayRegion(0, 0, 1920, 1080, is_primary=True)
EXTERNAL = DisplayRegion(1920, 0, 2560, 1440)
SECOND_EXTERNAL = DisplayRegion(4480, 0, 1280, 1024)


class QueueDispatcher(Dispatcher):
    """Stands in for the host loop: nothing runs until drain()."""

    def __init__(self) -> None:
        self._queue: deque[tuple[Callable[..., None], tuple[Any, ...]]] = deque()

    def post(self, fn: Callable[..., None], *args: Any) -> None:
        self._queue.append((fn, args))

    def __len__(self) -> int:
        return len(self._queue)

    def drain(self, limit: int = 100) -> int:
        delivered = 0
        while self._queue:
            assert delivered < limit, "notifications did not settle"
            fn, args = self._queue.popleft()
            fn(*args)
            delivered += 1
        return delivered


class FakeChannel(BrightnessChannel):
    def __init__(self, dispatcher: Dispatcher, level: int | None = None) -> None:
        super().__init__(dispatcher)
        self._level = level
        self.writes: list[int] = []

    @property
    def level(self) -> int | None:
        return self._level

    def set_level(self, level: int) -> None:
        self.writes.append(level)
        self.report(level)

    def report(self, level: int | None) -> None:
        self._level = level
        self._changed.emit()


class StaticTopology(DisplayTopology):
    def __init__(self, dispatcher: Dispatcher, regions: list[DisplayRegion]) -> None:
        super().__init__(dispatcher)
        self._regions = list(regions)

    def regions(self) -> list[DisplayRegion]:
        return list(self._regions)

    def set_regions(self, regions: list[DisplayRegion]) -> None:
        self._regions = list(regions)
        self._changed.emit()


class RecordingSurface(Surface):
    def __init__(self, region: DisplayRegion) -> None:
        self.region = region
        self.opacity: int | None = None
        self.destroyed = False

    def set_opacity(self, opacity: int) -> None:
        assert not self.destroyed
        self.opacity = opacity

    def destroy(self) -> None:
        assert not self.destroyed
        self.destroyed = True


class SurfaceLog:
    def __init__(self) -> None:
        self.created: list[RecordingSurface] = []

    def __call__(self, region: DisplayRegion) -> RecordingSurface:
        surface = RecordingSurface(region)
        self.created.append(surface)
        return surface

    @property
    def live(self) -> list[RecordingSurface]:
        return [s for s in self.created if not s.destroyed]


class FakeControl(BrightnessControl):
    def __init__(self, dispatcher: Dispatcher) -> None:
        super().__init__(dispatcher)
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        self._value = value

    def drag(self, value: float) -> None:
        self._value = value
        self._user_edited(value)


class FakeSlot(PanelSlot):
    def __init__(self, present: bool = True) -> None:
        self.present = present
        self.installed: BrightnessControl | None = None
        self.restored = 0

    def install(self, control: BrightnessControl) -> bool:
        if not self.present:
            return False
        self.installed = control
        return True

    def restore(self) -> None:
        self.installed = None
        self.restored += 1


class Rig:
    """A controller wired to fakes for every collaborator."""

    def __init__(self, regions: list[DisplayRegion] | None = None) -> None:
        self.dispatcher = QueueDispatcher()
        self.settings = SettingsStore(None, self.dispatcher)
        self.channel = FakeChannel(self.dispatcher)
        self.topology = StaticTopology(
            self.dispatcher, regions if regions is not None else [PRIMARY, EXTERNAL]
        )
        self.surfaces = SurfaceLog()
        self.overlays = OverlayManager(self.surfaces)
        self.control = FakeControl(self.dispatcher)
        self.slot = FakeSlot()

    def build(self, rounding: Rounding = Rounding.BIASED) -> BrightnessController:
        return BrightnessController(
            settings=self.settings,
            channel=self.channel,
            topology=self.topology,
            overlays=self.overlays,
            control=self.control,
            slot=self.slot,
            rounding=rounding,
        )

    def preset(self, **values: Any) -> None:
        """Write settings before anything listens, without queued notifications."""

        for key, value in values.items():
            self.settings.set(key.replace("_", "-"), value)
        self.dispatcher.drain()

    def opacities(self) -> list[int | None]:
        return [s.opacity for s in self.surfaces.live]

    def live_regions(self) -> list[DisplayRegion]:
        return [s.region for s in self.surfaces.live]
