from __future__ import annotations

import abc
import logging
from collections.abc import Callable

from soft_brightness.model import DisplayRegion, MonitorSelection, select_regions
from soft_brightness.system.topology import DisplayTopology

logger = logging.getLogger(__name__)


class Surface(abc.ABC):
    """A black layer covering one display region."""

    @abc.abstractmethod
    def set_opacity(self, opacity: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def destroy(self) -> None:
        raise NotImplementedError


SurfaceFactory = Callable[[DisplayRegion], Surface]


class OverlayManager:
    """Owns the overlay surfaces, at most one per selected display region."""

    def __init__(self, factory: SurfaceFactory) -> None:
        self._factory = factory
        self._overlays: list[Surface] | None = None

    def __len__(self) -> int:
        return len(self._overlays or [])

    @property
    def shown(self) -> bool:
        return self._overlays is not None

    def show_overlays(
        self, opacity: int, selection: MonitorSelection | str, topology: DisplayTopology
    ) -> None:
        parsed = MonitorSelection.parse(selection)
        if parsed is None:
            logger.error('show_overlays(): Unhandled "monitors" setting = %r', selection)
            return

        if self._overlays is None:
            regions = select_regions(parsed, topology.regions())
            logger.debug("show_overlays(): monitors=%s, regions=%d", parsed.value, len(regions))
            created: list[Surface] = []
            try:
                for i, r in enumerate(regions):
                    logger.debug("Create overlay #%d: %dx%d@%d,%d", i, r.width, r.height, r.x, r.y)
                    created.append(self._factory(r))
            except BaseException:
                for surface in created:
                    surface.destroy()
                raise
            self._overlays = created

        for i, surface in enumerate(self._overlays):
            logger.debug("show_overlays(): set opacity %d on overlay #%d", opacity, i)
            surface.set_opacity(opacity)

    def hide_overlays(self) -> None:
        if self._overlays is None:
            return
        logger.debug("drop overlays, count=%d", len(self._overlays))
        overlays, self._overlays = self._overlays, None
        for surface in overlays:
            surface.destroy()
