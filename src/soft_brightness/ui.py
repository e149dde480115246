from __future__ import annotations

import abc

from soft_brightness.model import brightness_from_level, level_is_concrete, nearest_level
from soft_brightness.signals import Dispatcher, Handler, Notifier, Subscriptions
from soft_brightness.system.backlight import BrightnessChannel


class BrightnessControl(abc.ABC):
    """Slider the user drags; set_value() never reports a user edit."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._edited = Notifier(dispatcher, "user-edit")

    @property
    @abc.abstractmethod
    def value(self) -> float:
        raise NotImplementedError

    @abc.abstractmethod
    def set_value(self, value: float) -> None:
        raise NotImplementedError

    def connect_user_edit(self, handler: Handler) -> int:
        return self._edited.connect(handler)

    def disconnect(self, handler_id: int) -> None:
        self._edited.disconnect(handler_id)

    def handler_count(self) -> int:
        return len(self._edited)

    def _user_edited(self, value: float) -> None:
        self._edited.emit(value)


class PanelSlot(abc.ABC):
    """Place in the host panel where the stock brightness widget lives."""

    @abc.abstractmethod
    def install(self, control: BrightnessControl) -> bool:
        """Swap the stock widget for ``control``; False if the slot is missing."""
        raise NotImplementedError

    @abc.abstractmethod
    def restore(self) -> None:
        raise NotImplementedError


class BacklightBinding:
    """Stock slider: shows the hardware level and writes user edits to it.

    Stays attached while the slider is swapped out, so it is current when
    the slot is restored.
    """

    def __init__(self, channel: BrightnessChannel, control: BrightnessControl) -> None:
        self._channel = channel
        self._control = control
        self._subs = Subscriptions()

    @property
    def attached(self) -> bool:
        return len(self._subs) > 0

    def attach(self) -> None:
        if self.attached:
            return
        self._subs.add(self._channel, self._channel.connect_changed(self._on_level_changed))
        self._subs.add(self._control, self._control.connect_user_edit(self._on_user_edit))
        self.sync()

    def detach(self) -> None:
        self._subs.clear()

    def sync(self) -> None:
        level = self._channel.level
        if level is not None and level_is_concrete(level):
            self._control.set_value(brightness_from_level(level))

    def _on_level_changed(self, *_: object) -> None:
        self.sync()

    def _on_user_edit(self, value: float) -> None:
        self._channel.set_level(nearest_level(value))
