from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class SourceMode(enum.Enum):
    USE_BACKLIGHT = "backlight"
    USE_SOFTWARE_SETTING = "setting"


class MonitorSelection(enum.Enum):
    ALL = "All"
    BUILTIN_ONLY = "Built-in"
    EXTERNAL_ONLY = "External"

    @classmethod
    def parse(cls, raw: object) -> MonitorSelection | None:
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return None


class Rounding(enum.Enum):
    """How a brightness in [0, 1] becomes a hardware level in [0, 100]."""

    BIASED = "biased"
    CEIL = "ceil"


@dataclass(frozen=True)
class DisplayRegion:
    x: int
    y: int
    width: int
    height: int
    is_primary: bool = False


def select_regions(
    selection: MonitorSelection, regions: list[DisplayRegion]
) -> list[DisplayRegion]:
    if selection is MonitorSelection.ALL:
        return list(regions)
    if selection is MonitorSelection.BUILTIN_ONLY:
        return [r for r in regions if r.is_primary]
    return [r for r in regions if not r.is_primary]


def opacity_for(brightness: float) -> int:
    """Overlay opacity in [0, 255] for a brightness in [0, 1], rounded half up."""

    dim = min(1.0, max(0.0, 1.0 - brightness))
    return int(math.floor(dim * 255 + 0.5))


def level_from_brightness(value: float, rounding: Rounding = Rounding.BIASED) -> int:
    # Both policies land on or above value * 100, so a level written for the
    # floor never reads back below it.
    if rounding is Rounding.CEIL:
        level = math.ceil(round(value * 100, 6))
    else:
        level = math.floor(value * 100 + 0.5) + 1
    return max(0, min(100, level))


def brightness_from_level(level: int) -> float:
    return level / 100.0


def level_is_concrete(level: int | None) -> bool:
    return level is not None and 0 <= level <= 100


def nearest_level(value: float) -> int:
    """Level shown by a plain slider: value * 100 rounded half up, clamped."""

    return max(0, min(100, int(math.floor(value * 100 + 0.5))))
