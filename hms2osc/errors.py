"""Exception hierarchy for hms2osc.

Every failure the program reports on its own is a subclass of
:class:`Hms2OscError`, so the CLI can turn them into a log line and a
non-zero exit status.  Socket failures while sending are left as
:class:`OSError`.
"""

from __future__ import annotations


class Hms2OscError(Exception):
    """Base exception for hms2osc."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigError(Hms2OscError):
    """The config file or one of its values is unusable."""


class SensorResolutionError(ConfigError):
    """A configured sensor name does not bind to exactly one bridge sensor."""


class SensorNotFoundError(SensorResolutionError):
    """No bridge sensor carries the configured name."""


class AmbiguousSensorError(SensorResolutionError):
    """Several bridge sensors carry the configured name."""


class UnknownSensorTypeError(ConfigError):
    """The bridge reported a sensor type identifier we cannot convert."""

    def __init__(self, type_id: str) -> None:
        super().__init__(f"unsupported sensor type {type_id!r}")
        self.type_id = type_id


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------

class BridgeError(Hms2OscError):
    """Talking to the bridge failed."""


class BridgeConnectionError(BridgeError):
    """The HTTP request did not complete."""


class BridgeResponseError(BridgeError):
    """The bridge answered with an error payload."""

    def __init__(self, error_type: int, description: str, address: str = "") -> None:
        super().__init__(f"bridge error {error_type} at {address or '/'}: {description}")
        self.error_type = error_type
        self.description = description
        self.address = address


class LinkButtonNotPressed(BridgeResponseError):
    """Pairing was attempted before the link button was pressed."""


class PairingTimeoutError(BridgeError):
    """The link button was not pressed before the pairing deadline."""


# ---------------------------------------------------------------------------
# OSC
# ---------------------------------------------------------------------------

class OscEncodeError(Hms2OscError):
    """An address/argument list could not be encoded as an OSC message."""
