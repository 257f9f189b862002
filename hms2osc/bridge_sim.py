"""Simulated Hue bridge for development without hardware.

Provides an in-memory stand-in for :class:`~hms2osc.bridge.HueBridge` so
the pipeline can be run and tested without a bridge on the network.  Each
simulated sensor produces plausible state that drifts between reads
(daylight curves for light level, slow wander for temperature, occasional
presence flips) and returns the same :class:`~hms2osc.sensors.BridgeSensor`
envelope the real client does.
"""

from __future__ import annotations

import random
from typing import Any

from .sensors import BridgeSensor, SensorSnapshot


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class SimulatedSensor:
    """Base for all simulated sensors.

    Parameters
    ----------
    name:
        Name reported to the resolver.
    type_id:
        Bridge type identifier, e.g. ``"ZLLPresence"``.
    noise:
        Scale of the random drift applied on every read.  ``0.0`` freezes
        the sensor at its initial state.
    """

    def __init__(self, name: str, type_id: str, noise: float = 0.0) -> None:
        self.name = name
        self.type_id = type_id
        self.noise = max(0.0, noise)
        self.dropped: set[str] = set()
        self._tick: int = 0

    def read_state(self) -> dict[str, Any]:
        """Advance the simulation one step and return a bridge ``state`` object."""
        self._tick += 1
        state = self._generate()
        for key in self.dropped:
            state.pop(key, None)
        return state

    def _generate(self) -> dict[str, Any]:
        """Override in subclasses to produce sensor-specific state."""
        return {}


# ---------------------------------------------------------------------------
# Concrete sensors
# ---------------------------------------------------------------------------

class SimulatedLightLevel(SimulatedSensor):
    """Simulates a ``ZLLLightLevel`` sensor around *lightlevel*."""

    def __init__(
        self,
        name: str,
        lightlevel: int = 15000,
        noise: float = 0.0,
        tholddark: int = 16000,
        tholdoffset: int = 7000,
    ) -> None:
        super().__init__(name, "ZLLLightLevel", noise)
        self.lightlevel = lightlevel
        self.tholddark = tholddark
        self.tholdoffset = tholdoffset

    def _generate(self) -> dict[str, Any]:
        if self.noise > 0.0:
            self.lightlevel += int(random.gauss(0.0, self.noise * 1000))
            self.lightlevel = max(0, min(60000, self.lightlevel))
        return {
            "lightlevel": self.lightlevel,
            "dark": self.lightlevel <= self.tholddark,
            "daylight": self.lightlevel >= self.tholddark + self.tholdoffset,
        }


class SimulatedPresence(SimulatedSensor):
    """Simulates a ``ZLLPresence`` sensor that flips with probability *noise*."""

    def __init__(self, name: str, presence: bool = False, noise: float = 0.0) -> None:
        super().__init__(name, "ZLLPresence", noise)
        self.presence = presence

    def _generate(self) -> dict[str, Any]:
        if random.random() < self.noise:
            self.presence = not self.presence
        return {"presence": self.presence}


class SimulatedTemperature(SimulatedSensor):
    """Simulates a ``ZLLTemperature`` sensor in hundredths of a degree."""

    def __init__(self, name: str, temperature: int = 2100, noise: float = 0.0) -> None:
        super().__init__(name, "ZLLTemperature", noise)
        self.temperature = temperature

    def _generate(self) -> dict[str, Any]:
        if self.noise > 0.0:
            self.temperature += int(round(random.gauss(0.0, self.noise * 10)))
        return {"temperature": self.temperature}


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------

class SimulatedBridge:
    """In-memory bridge exposing the :class:`~hms2osc.bridge.HueBridge` read API.

    Sensors get ids ``"1"``, ``"2"``, ... in the order they are added.
    """

    def __init__(self, sensors: list[SimulatedSensor] | None = None) -> None:
        self._sensors: dict[str, SimulatedSensor] = {}
        self.reads: int = 0
        for sensor in sensors or []:
            self.add(sensor)

    def add(self, sensor: SimulatedSensor) -> str:
        """Register *sensor* and return its id."""
        sensor_id = str(len(self._sensors) + 1)
        self._sensors[sensor_id] = sensor
        return sensor_id

    def sensor(self, sensor_id: str) -> SimulatedSensor:
        return self._sensors[sensor_id]

    def _record(self, sensor: SimulatedSensor) -> dict[str, Any]:
        return {
            "name": sensor.name,
            "type": sensor.type_id,
            "modelid": "SIM001",
            "manufacturername": "hms2osc",
            "state": sensor.read_state(),
        }

    def get_all_sensors(self) -> list[BridgeSensor]:
        return [
            BridgeSensor.from_record(sid, self._record(sensor))
            for sid, sensor in self._sensors.items()
        ]

    def get_sensor(self, sensor_id: str) -> BridgeSensor:
        self.reads += 1
        return BridgeSensor.from_record(sensor_id, self._record(self._sensors[sensor_id]))

    def get_snapshot(self, sensor_id: str) -> SensorSnapshot:
        return self.get_sensor(sensor_id).snapshot
