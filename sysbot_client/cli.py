"""Command-line interface for sysbot-client."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .client import SysBotClient
from .config import SysBotConfig, load_config
from .errors import SysBotError
from .health import HealthReporter, HealthServer
from .logging import configure_logging
from .monitor import ConsoleMonitor
from .types import Button, PeekArgs, PokeArgs

LOGGER = logging.getLogger(__name__)

_PEEK_METHODS = {
    "heap": "peek",
    "main": "peek_main",
    "absolute": "peek_absolute",
}

_POKE_METHODS = {
    "heap": "poke",
    "main": "poke_main",
    "absolute": "poke_absolute",
}


def _int_value(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from exc


def _hex_bytes(text: str) -> bytes:
    digits = text[2:] if text.lower().startswith("0x") else text
    try:
        return bytes.fromhex(digits)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid hex data: {text!r}") from exc


def _button(text: str) -> Button:
    try:
        return Button[text.upper()]
    except KeyError:
        try:
            return Button(text.upper())
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"unknown button: {text!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysbot-client", description="Client for the sys-botbase console service"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--host", help="Console IP address (overrides config)")
    parser.add_argument("--port", type=int, help="Service port (overrides config)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )
    subparsers.add_parser("info", help="Print version and process information")

    peek_parser = subparsers.add_parser("peek", help="Read memory and print it as hex")
    peek_parser.add_argument("address", type=_int_value)
    peek_parser.add_argument("size", type=_int_value)
    peek_parser.add_argument(
        "--region", choices=sorted(_PEEK_METHODS), default="heap"
    )

    poke_parser = subparsers.add_parser("poke", help="Write hex data to memory")
    poke_parser.add_argument("address", type=_int_value)
    poke_parser.add_argument("data", type=_hex_bytes)
    poke_parser.add_argument(
        "--region", choices=sorted(_POKE_METHODS), default="heap"
    )

    click_parser = subparsers.add_parser("click", help="Tap a controller button")
    click_parser.add_argument("button", type=_button)

    subparsers.add_parser(
        "monitor", help="Poll the console and optionally serve /healthz"
    )

    return parser


def _apply_overrides(config: SysBotConfig, args: argparse.Namespace) -> None:
    if args.host:
        config.connection.host = args.host
        config.raw.set("connection", "host", args.host)
    if args.port:
        config.connection.port = args.port
        config.raw.set("connection", "port", str(args.port))


async def _call(config: SysBotConfig, awaitable):
    return await asyncio.wait_for(
        awaitable, timeout=config.connection.request_timeout_seconds
    )


async def _run_info(client: SysBotClient, config: SysBotConfig) -> None:
    version = await _call(config, client.get_version())
    print(f"version        {version}")
    running = await _call(config, client.is_program_running())
    print(f"running        {running}")
    if not running:
        return
    title_id = await _call(config, client.get_title_id())
    build_id = await _call(config, client.get_build_id())
    main_base = await _call(config, client.get_main_nso_base())
    heap_base = await _call(config, client.get_heap_base())
    language = await _call(config, client.get_system_language())
    print(f"title id       {title_id:016X}")
    print(f"build id       {build_id:016X}")
    print(f"main nso base  0x{main_base:X}")
    print(f"heap base      0x{heap_base:X}")
    print(f"language       {language}")


async def _run_monitor(client: SysBotClient, config: SysBotConfig) -> None:
    reporter = HealthReporter()
    await reporter.update("console", True, "starting")
    server: Optional[HealthServer] = None
    if config.health.enabled:
        server = HealthServer(reporter, config.health.host, config.health.port)
        await server.start()

    monitor = ConsoleMonitor(
        client,
        reporter,
        interval=config.monitor.interval_seconds,
        peer=client.peer,
        request_timeout=config.connection.request_timeout_seconds,
    )
    try:
        await monitor.run()
    finally:
        if server is not None:
            await server.stop()


async def _run_command(config: SysBotConfig, args: argparse.Namespace) -> int:
    async with await SysBotClient.from_config(config) as client:
        if args.command == "info":
            await _run_info(client, config)
        elif args.command == "peek":
            method = getattr(client, _PEEK_METHODS[args.region])
            data = await _call(config, method(PeekArgs(args.address, args.size)))
            print(data.hex().upper())
        elif args.command == "poke":
            method = getattr(client, _POKE_METHODS[args.region])
            await _call(config, method(PokeArgs(args.address, args.data)))
        elif args.command == "click":
            await _call(config, client.click(args.button))
        elif args.command == "monitor":
            await _run_monitor(client, config)
            if not client.is_connected:
                return 1
        else:
            LOGGER.error("Unknown command: %s", args.command)
            return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    _apply_overrides(config, args)

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    configure_logging(
        config.logging.level,
        log_path=config.logging.path,
        log_wire=config.logging.log_wire,
    )

    try:
        return asyncio.run(_run_command(config, args))
    except (SysBotError, ValueError) as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1
    except asyncio.TimeoutError:
        LOGGER.error(
            "%s timed out after %.1fs",
            args.command,
            config.connection.request_timeout_seconds or 0.0,
        )
        return 1
    except KeyboardInterrupt:
        LOGGER.info("sysbot-client received shutdown signal")
        return 0


if __name__ == "__main__":
    sys.exit(main())
