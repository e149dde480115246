from __future__ import annotations

import abc

from soft_brightness.model import DisplayRegion
from soft_brightness.signals import Dispatcher, Handler, Notifier


class DisplayTopology(abc.ABC):
    """Active display regions plus a notification when they change."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self._changed = Notifier(dispatcher, "monitors-changed")

    @abc.abstractmethod
    def regions(self) -> list[DisplayRegion]:
        raise NotImplementedError

    def connect_changed(self, handler: Handler) -> int:
        return self._changed.connect(handler)

    def disconnect(self, handler_id: int) -> None:
        self._changed.disconnect(handler_id)

    def handler_count(self) -> int:
        return len(self._changed)

    def close(self) -> None:
        return None
