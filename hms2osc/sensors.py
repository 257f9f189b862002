"""Sensor model shared by the bridge client, the resolver and the transformers.

The Hue bridge reports every sensor as a JSON record with a ``name``, a
``type`` identifier and a ``state`` object whose keys depend on the type.
This module turns those records into a uniform :class:`BridgeSensor`
envelope so downstream code never touches raw JSON, and defines the closed
set of sensor kinds hms2osc knows how to convert.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import UnknownSensorTypeError


# ---------------------------------------------------------------------------
# Sensor kinds
# ---------------------------------------------------------------------------

class SensorKind(Enum):
    """Sensor semantics supported by the transformers.

    Each kind publishes a fixed number of OSC arguments (:attr:`arity`).
    """

    LIGHT_LEVEL = "LightLevel"
    PRESENCE = "Presence"
    TEMPERATURE = "Temperature"

    @property
    def arity(self) -> int:
        return _ARITY[self]

    def __str__(self) -> str:
        return self.value


_ARITY: dict[SensorKind, int] = {
    SensorKind.LIGHT_LEVEL: 3,
    SensorKind.PRESENCE: 1,
    SensorKind.TEMPERATURE: 1,
}


# ---------------------------------------------------------------------------
# Bridge type registry
# ---------------------------------------------------------------------------

BRIDGE_TYPE_REGISTRY: dict[str, SensorKind] = {
    "ZLLLightLevel": SensorKind.LIGHT_LEVEL,
    "ZLLPresence": SensorKind.PRESENCE,
    "ZLLTemperature": SensorKind.TEMPERATURE,
}


def kind_for_type(type_id: str) -> SensorKind:
    """Look up the :class:`SensorKind` for a bridge type identifier.

    Raises :class:`~hms2osc.errors.UnknownSensorTypeError` if *type_id* is
    not registered.
    """
    kind = BRIDGE_TYPE_REGISTRY.get(type_id)
    if kind is None:
        raise UnknownSensorTypeError(type_id)
    return kind


# ---------------------------------------------------------------------------
# Data envelopes
# ---------------------------------------------------------------------------

def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    return None


@dataclass(frozen=True)
class SensorSnapshot:
    """One point-in-time read of a sensor's state.

    Every field is ``None`` when the bridge omitted it or reported ``null``.
    Which fields are meaningful depends on the sensor kind.
    """

    lightlevel: int | None = None
    dark: bool | None = None
    daylight: bool | None = None
    presence: bool | None = None
    temperature: int | None = None

    @classmethod
    def from_state(cls, state: dict[str, Any] | None) -> "SensorSnapshot":
        """Build a snapshot from a bridge ``state`` object."""
        state = state or {}
        return cls(
            lightlevel=_optional_int(state.get("lightlevel")),
            dark=_optional_bool(state.get("dark")),
            daylight=_optional_bool(state.get("daylight")),
            presence=_optional_bool(state.get("presence")),
            temperature=_optional_int(state.get("temperature")),
        )


@dataclass(frozen=True)
class BridgeSensor:
    """Immutable envelope for one sensor record reported by the bridge.

    Attributes
    ----------
    id:
        The bridge's sensor id (opaque string, stable across reads).
    name:
        User-facing name, as set in the Hue app.
    type:
        Bridge type identifier, e.g. ``"ZLLPresence"``.
    snapshot:
        Parsed state.
    state:
        The raw ``state`` object, kept verbatim for listings.
    """

    id: str
    name: str
    type: str
    snapshot: SensorSnapshot
    state: dict[str, Any] = field(default_factory=dict)
    modelid: str | None = None
    manufacturername: str | None = None
    uniqueid: str | None = None

    @classmethod
    def from_record(cls, sensor_id: str, record: dict[str, Any]) -> "BridgeSensor":
        """Build a sensor from one entry of the bridge's ``/sensors`` map."""
        state = record.get("state") or {}
        return cls(
            id=str(sensor_id),
            name=str(record.get("name", "")),
            type=str(record.get("type", "")),
            snapshot=SensorSnapshot.from_state(state),
            state=dict(state),
            modelid=record.get("modelid"),
            manufacturername=record.get("manufacturername"),
            uniqueid=record.get("uniqueid"),
        )
