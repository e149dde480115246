from __future__ import annotations

import abc
import itertools
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

Handler = Callable[..., None]


class Dispatcher(abc.ABC):
    """Delivers notifications one at a time, never inside the call that raised them."""

    @abc.abstractmethod
    def post(self, fn: Callable[..., None], *args: Any) -> None:
        raise NotImplementedError


class GLibDispatcher(Dispatcher):
    def __init__(self) -> None:
        from gi.repository import GLib  # type: ignore

        self._glib = GLib

    def post(self, fn: Callable[..., None], *args: Any) -> None:
        def once() -> bool:
            fn(*args)
            return False

        self._glib.idle_add(once)


class Notifier:
    """Handler table for a single notification source.

    Handlers are looked up when a notification is delivered, not when it is
    emitted, so a handler disconnected while a notification is queued is
    never called.
    """

    def __init__(
        self, dispatcher: Dispatcher, name: str = "", ids: Iterator[int] | None = None
    ) -> None:
        self._dispatcher = dispatcher
        self._name = name
        self._ids = ids if ids is not None else itertools.count(1)
        self._handlers: dict[int, Handler] = {}

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._handlers

    def connect(self, handler: Handler) -> int:
        handler_id = next(self._ids)
        self._handlers[handler_id] = handler
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        if self._handlers.pop(handler_id, None) is None:
            logger.warning("%s: disconnect of unknown handler %d", self._name, handler_id)

    def emit(self, *args: Any) -> None:
        self._dispatcher.post(self._deliver, *args)

    def _deliver(self, *args: Any) -> None:
        for handler_id in list(self._handlers):
            handler = self._handlers.get(handler_id)
            if handler is not None:
                handler(*args)


class Disconnectable(Protocol):
    def disconnect(self, handler_id: int) -> None: ...


@dataclass
class Subscriptions:
    """Registration table: every connect recorded here is undone by clear()."""

    _entries: list[tuple[Disconnectable, int]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, source: Disconnectable, handler_id: int) -> None:
        self._entries.append((source, handler_id))

    def clear(self) -> None:
        while self._entries:
            source, handler_id = self._entries.pop()
            source.disconnect(handler_id)
