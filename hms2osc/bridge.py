"""Hue bridge REST client and pairing.

Only the small part of the Hue v1 API hms2osc needs is covered:

* ``POST /api`` to register a client and obtain a username,
* ``GET /api/<username>/sensors`` to list every sensor,
* ``GET /api/<username>/sensors/<id>`` to read one sensor.

The bridge signals failures in-band as a JSON list of
``{"error": {"type": ..., "address": ..., "description": ...}}`` objects;
those become :class:`~hms2osc.errors.BridgeResponseError`.  Requests are
made without a timeout and are never retried.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Callable

import requests

from .errors import (
    BridgeConnectionError,
    BridgeResponseError,
    LinkButtonNotPressed,
    PairingTimeoutError,
)
from .sensors import BridgeSensor, SensorSnapshot

logger = logging.getLogger(__name__)

APP_NAME = "hms2osc"
DEVICE_TYPE = APP_NAME

# Hue API error type for "link button not pressed"
ERROR_LINK_BUTTON_NOT_PRESSED = 101

PAIRING_POLL_INTERVAL = 1.0


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------

def _base_url(host: str) -> str:
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"http://{host}/api"


def _raise_for_errors(payload: Any) -> None:
    """Raise the first error object in a bridge response, if any."""
    if not isinstance(payload, list):
        return
    for item in payload:
        if isinstance(item, dict) and "error" in item:
            error = item["error"]
            error_type = int(error.get("type", 0))
            cls = (
                LinkButtonNotPressed
                if error_type == ERROR_LINK_BUTTON_NOT_PRESSED
                else BridgeResponseError
            )
            raise cls(error_type, error.get("description", ""), error.get("address", ""))


def _request(session: requests.Session, method: str, url: str, **kwargs: Any) -> Any:
    try:
        response = session.request(method, url, **kwargs)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as exc:
        raise BridgeConnectionError(f"{method} {url} failed: {exc}") from exc
    except ValueError as exc:
        raise BridgeConnectionError(f"{method} {url} returned invalid JSON: {exc}") from exc
    _raise_for_errors(payload)
    return payload


# ---------------------------------------------------------------------------
# Bridge client
# ---------------------------------------------------------------------------

class HueBridge:
    """Reads sensors from a paired Hue bridge.

    Parameters
    ----------
    host:
        IP address or hostname of the bridge.
    username:
        Credential issued by :func:`register_user`.
    session:
        Optional :class:`requests.Session` to reuse (tests pass a mock).
    """

    def __init__(
        self,
        host: str,
        username: str,
        session: requests.Session | None = None,
    ) -> None:
        self.host = host
        self.username = username
        self.session = session or requests.Session()
        self._url = f"{_base_url(host)}/{username}"

    def get_all_sensors(self) -> list[BridgeSensor]:
        """Return every sensor the bridge knows about, in the order it reports them."""
        payload = _request(self.session, "GET", f"{self._url}/sensors")
        if not isinstance(payload, dict):
            raise BridgeConnectionError(f"Unexpected sensor list payload: {payload!r}")
        return [BridgeSensor.from_record(sid, rec) for sid, rec in payload.items()]

    def get_sensor(self, sensor_id: str) -> BridgeSensor:
        """Read one sensor by id."""
        payload = _request(self.session, "GET", f"{self._url}/sensors/{sensor_id}")
        if not isinstance(payload, dict):
            raise BridgeConnectionError(f"Unexpected sensor payload: {payload!r}")
        return BridgeSensor.from_record(sensor_id, payload)

    def get_snapshot(self, sensor_id: str) -> SensorSnapshot:
        """Read the current state of one sensor."""
        return self.get_sensor(sensor_id).snapshot


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------

def register_user(
    host: str,
    device_type: str = DEVICE_TYPE,
    session: requests.Session | None = None,
) -> str:
    """Ask the bridge for a new username.

    Raises :class:`~hms2osc.errors.LinkButtonNotPressed` until someone
    presses the bridge's link button.
    """
    session = session or requests.Session()
    payload = _request(session, "POST", _base_url(host), json={"devicetype": device_type})
    for item in payload if isinstance(payload, list) else []:
        success = item.get("success") if isinstance(item, dict) else None
        if success and "username" in success:
            return str(success["username"])
    raise BridgeConnectionError(f"Unexpected registration payload: {payload!r}")


def wait_for_registration(
    host: str,
    device_type: str = DEVICE_TYPE,
    poll_interval: float = PAIRING_POLL_INTERVAL,
    timeout: float | None = None,
    session: requests.Session | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Register with the bridge, waiting for the link button if needed.

    Parameters
    ----------
    poll_interval:
        Seconds between attempts while the button has not been pressed.
    timeout:
        Give up after this many seconds.  ``None`` waits forever.

    Raises
    ------
    PairingTimeoutError
        If *timeout* elapses before the button is pressed.
    """
    logger.info("registering user on Hue bridge %s", host)
    deadline = None if timeout is None else time.monotonic() + timeout
    waiting = False

    while True:
        try:
            return register_user(host, device_type, session=session)
        except LinkButtonNotPressed:
            if not waiting:
                logger.info("waiting for the link button to be pressed...")
                waiting = True
            if deadline is not None and time.monotonic() >= deadline:
                raise PairingTimeoutError(
                    f"Link button on {host} was not pressed within {timeout:g}s"
                ) from None
            sleep(poll_interval)


def default_user_file_path() -> Path:
    """Return the per-platform location of the stored bridge username."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
        data_dir = base / "pulusound" / APP_NAME / "data"
    elif sys.platform == "darwin":
        data_dir = Path.home() / "Library" / "Application Support" / f"fi.pulusound.{APP_NAME}"
    else:
        base = Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")
        data_dir = base / APP_NAME
    return data_dir / "username.txt"


def ensure_user(
    host: str,
    user_file_path: str | Path,
    device_type: str = DEVICE_TYPE,
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> str:
    """Return the stored username, pairing and storing one if there is none."""
    path = Path(user_file_path)
    if path.exists():
        logger.info("connecting to Hue bridge with username from %s", path)
        return path.read_text(encoding="utf-8").strip()

    username = wait_for_registration(host, device_type, timeout=timeout, session=session)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(username, encoding="utf-8")
    logger.info("stored new bridge username in %s", path)
    return username
