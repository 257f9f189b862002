"""Command-line entry point.

Usage::

    hms2osc --config config.json
    hms2osc --config config.json --list
    hms2osc --config config.json --log hms2osc.engine=debug,info
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .bridge import HueBridge, default_user_file_path, ensure_user
from .catalog import resolve_transformers
from .config import load_config, resolve_host, resolve_socket_addr
from .engine import PollDispatchLoop
from .errors import Hms2OscError
from .renderers.json_stream import SensorListRenderer
from .renderers.osc import OscUdpSender

logger = logging.getLogger("hms2osc")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVEL_ALIASES = {
    "trace": logging.DEBUG,
    "warn": logging.WARNING,
    "off": logging.CRITICAL + 10,
}


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def parse_level(name: str) -> int:
    """Turn a level name such as ``"debug"`` into a :mod:`logging` level."""
    key = name.strip().lower()
    if key in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[key]
    level = logging.getLevelName(key.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {name!r}")
    return level


def parse_log_filter(log_filter: str) -> tuple[int, dict[str, int]]:
    """Parse ``level`` / ``logger=level`` entries separated by commas.

    Returns the root level and a per-logger override map.
    """
    root_level = logging.INFO
    overrides: dict[str, int] = {}
    for part in log_filter.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, level = part.rpartition("=")
        if sep:
            overrides[name.strip()] = parse_level(level)
        else:
            root_level = parse_level(level)
    return root_level, overrides


def configure_logging(log_filter: str) -> None:
    root_level, overrides = parse_log_filter(log_filter)
    logging.basicConfig(level=root_level, format=LOG_FORMAT, force=True)
    for name, level in overrides.items():
        logging.getLogger(name).setLevel(level)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _log_filter(value: str) -> str:
    try:
        parse_log_filter(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hms2osc",
        description="Publish Hue sensor readings as OSC messages over UDP.",
    )
    parser.add_argument("--config", required=True, type=Path, help="Path to the JSON config file")
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the resolved sensors and their raw state, then exit",
    )
    parser.add_argument(
        "--log",
        default="info",
        type=_log_filter,
        help="Log filter, e.g. 'debug' or 'hms2osc.engine=debug,warning' (default: info)",
    )
    parser.add_argument(
        "--user-file",
        type=Path,
        default=None,
        help=f"Bridge username file (default: {default_user_file_path()})",
    )
    parser.add_argument(
        "--pair-timeout",
        type=float,
        default=None,
        help="Seconds to wait for the bridge link button (default: wait forever)",
    )
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    bridge_host = resolve_host(config.bridge_host)

    user_file = args.user_file or default_user_file_path()
    username = ensure_user(bridge_host, user_file, timeout=args.pair_timeout)

    bridge = HueBridge(bridge_host, username)
    all_sensors = bridge.get_all_sensors()
    logger.debug("bridge reports %d sensor(s)", len(all_sensors))
    transformers = resolve_transformers(all_sensors, config.sensors)

    if args.list:
        by_id = {s.id: s for s in all_sensors}
        renderer = SensorListRenderer()
        for transformer in transformers:
            renderer.render(transformer, by_id[transformer.sensor_id])
        return 0

    family, destination = resolve_socket_addr(config.osc_out_addr)
    with OscUdpSender(family, destination) as sender:
        loop = PollDispatchLoop(config, transformers, bridge, sender)
        loop.run()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hms2osc`` command."""
    args = parse_args(argv)
    configure_logging(args.log)

    try:
        return run(args)
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 0
    except (Hms2OscError, OSError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
