"""Configuration loader and validator.

Loads a JSON config file (or YAML, for ``.yaml``/``.yml`` files, through
PyYAML) into typed dataclass instances that the CLI and the
:class:`~hms2osc.engine.PollDispatchLoop` consume directly.  Validation
catches common mistakes (missing or mistyped fields, bad OSC addresses,
negative intervals) before anything touches the network.

Example file::

    {
      "bridgeHost": "192.168.1.20",
      "oscOutAddr": "127.0.0.1:9000",
      "pollInterval": 0.5,
      "sensors": [
        {"name": "Hue motion sensor 1", "oscAddress": "/hall/presence",
         "sendChangesOnly": true}
      ]
    }
"""

from __future__ import annotations

import json
import math
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass
class SensorConfig:
    """User-declared binding of a bridge sensor to an OSC address."""

    name: str
    osc_address: str
    enabled: bool = True
    send_changes_only: bool = False


@dataclass
class Config:
    """Complete process configuration.

    Attributes
    ----------
    bridge_host:
        Hostname or IP address of the Hue bridge.
    osc_out_addr:
        ``host:port`` of the OSC receiver (``[addr]:port`` for IPv6).
    poll_interval:
        Seconds between the start of two poll cycles.
    sensors:
        Sensor bindings, in publishing order.
    """

    bridge_host: str
    osc_out_addr: str
    poll_interval: float = 1.0
    sensors: list[SensorConfig] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

YAML_SUFFIXES = (".yaml", ".yml")


def load_config(path: str | Path) -> Config:
    """Parse and validate a config file.

    Parameters
    ----------
    path:
        Filesystem path to a ``.json`` (or ``.yaml``) file.

    Returns
    -------
    Config
        Fully populated configuration object.

    Raises
    ------
    ConfigError
        If the file is missing, is not a mapping, or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.suffix.lower() in YAML_SUFFIXES:
                raw: Any = yaml.safe_load(fh)
            else:
                raw = json.load(fh)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot parse config file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(raw).__name__}")

    return load_config_from_dict(raw)


def load_config_from_dict(raw: dict[str, Any]) -> Config:
    """Build and validate a :class:`Config` from an already-parsed dict."""
    config = _parse_config(raw)
    errors = validate_config(config)
    if errors:
        raise ConfigError("Invalid configuration:\n  " + "\n  ".join(errors))
    return config


_TYPE_NAMES = {str: "a string", bool: "a boolean"}
_REQUIRED = object()


def _field(
    raw: dict[str, Any], key: str, expected: type, where: str = "", default: Any = _REQUIRED
) -> Any:
    """Return ``raw[key]``, raising :class:`ConfigError` unless it is an *expected*."""
    if key not in raw:
        if default is _REQUIRED:
            raise ConfigError(f"{where}missing required field {key!r}")
        return default
    value = raw[key]
    if not isinstance(value, expected):
        raise ConfigError(
            f"{where}field {key!r} must be {_TYPE_NAMES[expected]}, got {type(value).__name__}"
        )
    return value


def _parse_config(raw: dict[str, Any]) -> Config:
    """Internal helper that converts a raw dict to a config object."""
    bridge_host = _field(raw, "bridgeHost", str)
    osc_out_addr = _field(raw, "oscOutAddr", str)

    sensors: list[SensorConfig] = []
    for i, s in enumerate(raw.get("sensors") or []):
        if not isinstance(s, dict):
            raise ConfigError(f"Sensor #{i}: expected a mapping, got {type(s).__name__}")
        where = f"Sensor #{i}: "
        sensors.append(
            SensorConfig(
                name=_field(s, "name", str, where),
                osc_address=_field(s, "oscAddress", str, where),
                enabled=_field(s, "enabled", bool, where, default=True),
                send_changes_only=_field(s, "sendChangesOnly", bool, where, default=False),
            )
        )

    value = raw.get("pollInterval", 1.0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"pollInterval must be a number, got {value!r}")

    return Config(
        bridge_host=bridge_host,
        osc_out_addr=osc_out_addr,
        poll_interval=float(value),
        sensors=sensors,
    )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

def validate_config(config: Config) -> list[str]:
    """Check *config* for common errors.

    Returns a list of human-readable error strings.  An empty list means
    the configuration is valid.
    """
    errors: list[str] = []

    if not config.bridge_host.strip():
        errors.append("bridgeHost is empty.")

    try:
        split_host_port(config.osc_out_addr)
    except ConfigError as exc:
        errors.append(str(exc))

    if not math.isfinite(config.poll_interval) or config.poll_interval < 0:
        errors.append(f"pollInterval must be a finite number >= 0, got {config.poll_interval}.")

    for i, s in enumerate(config.sensors):
        if not s.name:
            errors.append(f"Sensor #{i}: name is empty.")
        if not s.osc_address.startswith("/"):
            errors.append(
                f"Sensor #{i} ({s.name}): oscAddress {s.osc_address!r} must start with '/'."
            )

    return errors


# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------

def split_host_port(addr: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6addr]:port``) into its parts."""
    host, sep, port = addr.rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Address {addr!r} is not of the form host:port.")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError(f"Address {addr!r} has a non-numeric port.") from None
    if not 0 < port_num < 65536:
        raise ConfigError(f"Address {addr!r} has an out-of-range port.")
    return host, port_num


def resolve_host(host: str) -> str:
    """Resolve a hostname to the first IP address it maps to."""
    try:
        infos = socket.getaddrinfo(host, None)
    except OSError as exc:
        raise ConfigError(f"Cannot resolve host {host!r}: {exc}") from exc
    return infos[0][4][0]


def resolve_socket_addr(addr: str) -> tuple[socket.AddressFamily, tuple]:
    """Resolve ``host:port`` to ``(family, sockaddr)`` for a UDP send."""
    host, port = split_host_port(addr)
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except OSError as exc:
        raise ConfigError(f"Cannot resolve address {addr!r}: {exc}") from exc
    family, _type, _proto, _canon, sockaddr = infos[0]
    return family, sockaddr


def bind_addr_for(family: socket.AddressFamily) -> tuple:
    """Return the any-address/any-port tuple matching *family*."""
    if family == socket.AF_INET6:
        return ("::", 0)
    return ("0.0.0.0", 0)
