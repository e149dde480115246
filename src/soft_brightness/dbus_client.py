from __future__ import annotations

from dataclasses import dataclass

from dbus_next.aio import MessageBus

from soft_brightness.dbus_service import BUS_NAME, OBJ_PATH


@dataclass
class SoftBrightnessClient:
    bus: MessageBus
    iface: object

    @classmethod
    async def connect(cls) -> SoftBrightnessClient:
        bus = await MessageBus().connect()
        introspection = await bus.introspect(BUS_NAME, OBJ_PATH)
        obj = bus.get_proxy_object(BUS_NAME, OBJ_PATH, introspection)
        iface = obj.get_interface(BUS_NAME)
        return cls(bus=bus, iface=iface)

    async def get_brightness(self) -> float:
        return float(await self.iface.call_get_brightness())

    async def set_brightness(self, value: float) -> bool:
        return bool(await self.iface.call_set_brightness(value))

    async def set_min_brightness(self, value: float) -> bool:
        return bool(await self.iface.call_set_min_brightness(value))

    async def set_monitors(self, monitors: str) -> bool:
        return bool(await self.iface.call_set_monitors(monitors))

    async def set_use_backlight(self, enabled: bool) -> bool:
        return bool(await self.iface.call_set_use_backlight(enabled))

    async def set_debug(self, enabled: bool) -> bool:
        return bool(await self.iface.call_set_debug(enabled))

    async def close(self) -> None:
        self.bus.disconnect()
