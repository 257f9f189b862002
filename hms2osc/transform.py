"""Sensor-to-OSC conversion and change filtering.

A :class:`SensorTransformer` sits between the bridge and the OSC sender.
On every poll it fetches a fresh :class:`~hms2osc.sensors.SensorSnapshot`,
converts it into a fixed-arity list of OSC arguments according to the
sensor's kind, and remembers the previous list so :func:`should_publish`
can drop unchanged messages.

Conversions per kind:
    - **LightLevel**: ``[lux, dark, daylight]`` where
      ``lux = 10 ** ((lightlevel - 1) / 10000)``
    - **Presence**: ``[presence]``
    - **Temperature**: ``[temperature / 100]`` (degrees Celsius)

Booleans become exactly ``1.0`` or ``0.0``.  A field the bridge did not
report becomes ``None`` in its position; the arity never changes.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from .config import SensorConfig
from .sensors import SensorKind, SensorSnapshot

logger = logging.getLogger(__name__)

#: One OSC argument: a number, or ``None`` when the source field was absent.
OscArg = Optional[float]


# ---------------------------------------------------------------------------
# Field conversions
# ---------------------------------------------------------------------------

def lightlevel_to_lux(lightlevel: int | None) -> OscArg:
    """Convert the bridge's logarithmic light level into lux."""
    if lightlevel is None:
        return None
    return 10.0 ** ((lightlevel - 1) / 10000.0)


def bool_to_float(value: bool | None) -> OscArg:
    """Map ``True``/``False`` to ``1.0``/``0.0``."""
    if value is None:
        return None
    return 1.0 if value else 0.0


def centi_to_degrees(temperature: int | None) -> OscArg:
    """Convert hundredths of a degree into degrees."""
    if temperature is None:
        return None
    return temperature / 100.0


# ---------------------------------------------------------------------------
# Kind converters
# ---------------------------------------------------------------------------

def convert_light_level(snapshot: SensorSnapshot) -> list[OscArg]:
    return [
        lightlevel_to_lux(snapshot.lightlevel),
        bool_to_float(snapshot.dark),
        bool_to_float(snapshot.daylight),
    ]


def convert_presence(snapshot: SensorSnapshot) -> list[OscArg]:
    return [bool_to_float(snapshot.presence)]


def convert_temperature(snapshot: SensorSnapshot) -> list[OscArg]:
    return [centi_to_degrees(snapshot.temperature)]


CONVERTERS: dict[SensorKind, Callable[[SensorSnapshot], list[OscArg]]] = {
    SensorKind.LIGHT_LEVEL: convert_light_level,
    SensorKind.PRESENCE: convert_presence,
    SensorKind.TEMPERATURE: convert_temperature,
}


# ---------------------------------------------------------------------------
# Transformer
# ---------------------------------------------------------------------------

class SnapshotProvider(Protocol):
    """Anything that can read the current state of a sensor by id."""

    def get_snapshot(self, sensor_id: str) -> SensorSnapshot: ...


class SensorTransformer:
    """Converts one bridge sensor into OSC arguments, poll after poll.

    Parameters
    ----------
    sensor_id:
        The bridge's id for the sensor.
    kind:
        Sensor kind, decides the conversion and the arity.
    config:
        The :class:`~hms2osc.config.SensorConfig` this sensor was bound from.

    Both :attr:`args` and :attr:`previous_args` are empty until the first
    :meth:`update`; afterwards ``len(args) == kind.arity``.
    """

    def __init__(self, sensor_id: str, kind: SensorKind, config: SensorConfig) -> None:
        self.sensor_id = sensor_id
        self.kind = kind
        self.config = config
        self.args: list[OscArg] = []
        self.previous_args: list[OscArg] = []

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def osc_address(self) -> str:
        return self.config.osc_address

    @property
    def has_missing(self) -> bool:
        """True if the current argument list carries an absent value."""
        return any(arg is None for arg in self.args)

    def update(self, provider: SnapshotProvider) -> None:
        """Read a fresh snapshot from *provider* and rebuild :attr:`args`.

        Errors raised by the provider propagate unchanged.
        """
        self.previous_args = list(self.args)
        snapshot = provider.get_snapshot(self.sensor_id)
        self.args = CONVERTERS[self.kind](snapshot)
        logger.debug("update sensor %s (%s): %s %r", self.name, self.sensor_id, self.osc_address, self.args)

        if self.has_missing:
            logger.warning(
                "sensor %s (%s) is missing data for kind %s; "
                "is the sensor bound to the right kind?",
                self.name,
                self.sensor_id,
                self.kind,
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.sensor_id}), kind={self.kind} -> {self.osc_address}"

    def __repr__(self) -> str:
        return (
            f"SensorTransformer(sensor_id={self.sensor_id!r}, kind={self.kind!r}, "
            f"osc_address={self.osc_address!r})"
        )


# ---------------------------------------------------------------------------
# Change filter
# ---------------------------------------------------------------------------

def should_publish(transformer: SensorTransformer) -> bool:
    """Decide whether the transformer's latest arguments should be sent.

    Always ``True`` unless the sensor is configured with
    ``send_changes_only``, in which case the new argument list must differ
    from the previous one.  ``None`` compares equal only to ``None``, so
    moving into or out of a missing value counts as a change.
    """
    if not transformer.config.send_changes_only:
        return True
    if transformer.args != transformer.previous_args:
        return True
    logger.debug("sensor %s (%s) unchanged, skipping", transformer.name, transformer.sensor_id)
    return False
