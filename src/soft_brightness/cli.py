from __future__ import annotations

import argparse
import asyncio

from soft_brightness import __version__
from soft_brightness.model import MonitorSelection

_ON_OFF = {"on": True, "off": False}


def _brightness(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw}") from None
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError(f"must be within [0, 1]: {raw}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="soft-brightness")
    ap.add_argument("--version", action="version", version=__version__)

    sub = ap.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Run the soft brightness daemon")
    run.add_argument("-c", "--config")
    run.add_argument("--settings", help="Settings file (overrides settings_file)")
    run.add_argument("-v", "--verbose", action="store_true")

    sub.add_parser("get", help="Print the current brightness")

    set_ = sub.add_parser("set", help="Set the brightness")
    set_.add_argument("value", type=_brightness)

    min_ = sub.add_parser("min", help="Set the minimum brightness")
    min_.add_argument("value", type=_brightness)

    monitors = sub.add_parser("monitors", help="Choose which monitors are dimmed")
    monitors.add_argument("value", choices=[m.value for m in MonitorSelection])

    backlight = sub.add_parser("backlight", help="Use the hardware backlight as source")
    backlight.add_argument("value", choices=sorted(_ON_OFF))

    debug = sub.add_parser("debug", help="Toggle verbose logging in the daemon")
    debug.add_argument("value", choices=sorted(_ON_OFF))

    return ap


async def _remote(args: argparse.Namespace) -> None:
    from soft_brightness.dbus_client import SoftBrightnessClient

    client = await SoftBrightnessClient.connect()
    try:
        if args.cmd == "get":
            print(f"{await client.get_brightness():.2f}")
            return
        if args.cmd == "set":
            ok = await client.set_brightness(args.value)
        elif args.cmd == "min":
            ok = await client.set_min_brightness(args.value)
        elif args.cmd == "monitors":
            ok = await client.set_monitors(args.value)
        elif args.cmd == "backlight":
            ok = await client.set_use_backlight(_ON_OFF[args.value])
        else:
            ok = await client.set_debug(_ON_OFF[args.value])
        if not ok:
            raise SystemExit(f"soft-brightness rejected {args.cmd} {args.value}")
    finally:
        await client.close()


def main() -> None:
    args = _build_parser().parse_args()
    if args.cmd == "run":
        from soft_brightness.app import run
        from soft_brightness.config import load
        from soft_brightness.logging_config import setup_logging

        cfg = load(args.config)
        if args.settings:
            cfg["settings_file"] = args.settings
        cfg["verbose"] = args.verbose
        setup_logging(verbose=args.verbose, log_file=cfg["logging"]["file"])
        run(cfg)
        return

    from dbus_next.errors import DBusError

    try:
        asyncio.run(_remote(args))
    except (DBusError, OSError) as e:
        raise SystemExit(f"Cannot reach the soft-brightness daemon: {e}") from e
