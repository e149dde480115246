from __future__ import annotations

import itertools
import logging
import math
import os
import tempfile
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from soft_brightness.signals import Dispatcher, Handler, Notifier

logger = logging.getLogger(__name__)

CHANGED = "changed::"


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class Key:
    name: str
    kind: type
    default: Any
    minimum: float | None = None
    maximum: float | None = None

    def check(self, value: Any) -> Any:
        if self.kind is float:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsError(f"{self.name} must be a number, got {value!r}")
            value = float(value)
            if not math.isfinite(value):
                raise SettingsError(f"{self.name} must be finite, got {value}")
            if self.minimum is not None and value < self.minimum:
                raise SettingsError(f"{self.name} must be >= {self.minimum}, got {value}")
            if self.maximum is not None and value > self.maximum:
                raise SettingsError(f"{self.name} must be <= {self.maximum}, got {value}")
            return value
        if not isinstance(value, self.kind):
            raise SettingsError(f"{self.name} must be {self.kind.__name__}, got {value!r}")
        return value


KEYS: dict[str, Key] = {
    k.name: k
    for k in (
        Key("min-brightness", float, 0.1, minimum=0.0, maximum=1.0),
        Key("current-brightness", float, 1.0, minimum=0.0, maximum=1.0),
        Key("monitors", str, "All"),
        Key("use-backlight", bool, False),
        Key("debug", bool, False),
    )
}


def _key(name: str) -> Key:
    try:
        return KEYS[name]
    except KeyError:
        raise SettingsError(f"Unknown settings key: {name}") from None


def _read(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Cannot read settings from %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level settings must be a mapping", path)
        return {}

    out: dict[str, Any] = {}
    for name, raw in data.items():
        key = KEYS.get(str(name))
        if key is None:
            continue
        try:
            out[key.name] = key.check(raw)
        except SettingsError as e:
            logger.warning("%s: %s, using default %r", path, e, key.default)
    return out


class SettingsStore:
    """Flat key-value settings with per-key change notification.

    Values are persisted to a YAML mapping when a path is given and kept in
    memory otherwise. Writing a key's current value is not a change and does
    not notify.
    """

    def __init__(self, path: str | Path | None, dispatcher: Dispatcher) -> None:
        self._path = Path(path) if path is not None else None
        ids = itertools.count(1)
        self._notifiers = {name: Notifier(dispatcher, CHANGED + name, ids) for name in KEYS}
        self._values: dict[str, Any] = {name: key.default for name, key in KEYS.items()}
        if self._path is not None:
            self._values.update(_read(self._path))

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, name: str) -> Any:
        return self._values[_key(name).name]

    def _get_typed(self, name: str, kind: type) -> Any:
        key = _key(name)
        if key.kind is not kind:
            raise SettingsError(f"{name} is a {key.kind.__name__} key")
        return self._values[name]

    def get_double(self, name: str) -> float:
        return self._get_typed(name, float)

    def get_boolean(self, name: str) -> bool:
        return self._get_typed(name, bool)

    def get_string(self, name: str) -> str:
        return self._get_typed(name, str)

    def set(self, name: str, value: Any) -> None:
        key = _key(name)
        value = key.check(value)
        if self._values[name] == value:
            return
        self._values[name] = value
        self._save()
        self._notifiers[name].emit(name)

    def set_double(self, name: str, value: float) -> None:
        self._get_typed(name, float)
        self.set(name, value)

    def set_boolean(self, name: str, value: bool) -> None:
        self._get_typed(name, bool)
        self.set(name, value)

    def set_string(self, name: str, value: str) -> None:
        self._get_typed(name, str)
        self.set(name, value)

    def connect(self, signal: str, handler: Handler) -> int:
        """Subscribe to ``changed::<key>``; the handler receives the key name."""

        if not signal.startswith(CHANGED):
            raise SettingsError(f"Unknown settings signal: {signal}")
        name = _key(signal[len(CHANGED) :]).name
        return self._notifiers[name].connect(handler)

    def disconnect(self, handler_id: int) -> None:
        for notifier in self._notifiers.values():
            if handler_id in notifier:
                notifier.disconnect(handler_id)
                return
        logger.warning("disconnect of unknown settings handler %d", handler_id)

    def handler_count(self, name: str | None = None) -> int:
        if name is not None:
            return len(self._notifiers[_key(name).name])
        return sum(len(n) for n in self._notifiers.values())

    def _save(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".settings-", suffix=".yaml")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    yaml.safe_dump(self._values, fh, default_flow_style=False, sort_keys=True)
                os.replace(tmp, self._path)
            except BaseException:
                with suppress(FileNotFoundError):
                    os.unlink(tmp)
                raise
        except OSError as e:
            logger.warning("Failed to save settings to %s: %s", self._path, e)
