"""Binding of configured sensors to the bridge's sensor catalog.

Runs once at startup: every enabled :class:`~hms2osc.config.SensorConfig`
is matched by exact name against the sensors the bridge reports, and the
match's type identifier decides the :class:`~hms2osc.sensors.SensorKind`.
Anything that does not bind cleanly is a configuration error.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .config import SensorConfig
from .errors import AmbiguousSensorError, SensorNotFoundError
from .sensors import BridgeSensor, kind_for_type
from .transform import SensorTransformer

logger = logging.getLogger(__name__)


def find_sensor(bridge_sensors: Iterable[BridgeSensor], name: str) -> BridgeSensor:
    """Return the single bridge sensor called *name*.

    Raises
    ------
    SensorNotFoundError
        If no sensor has that name.
    AmbiguousSensorError
        If more than one sensor has that name.
    """
    matches = [s for s in bridge_sensors if s.name == name]
    if not matches:
        raise SensorNotFoundError(f"No sensor named {name!r} on the bridge")
    if len(matches) > 1:
        ids = ", ".join(s.id for s in matches)
        raise AmbiguousSensorError(f"Sensor name {name!r} is shared by ids {ids}")
    return matches[0]


def resolve_transformers(
    bridge_sensors: Iterable[BridgeSensor],
    sensor_configs: Iterable[SensorConfig],
) -> list[SensorTransformer]:
    """Create one :class:`SensorTransformer` per enabled sensor config.

    Parameters
    ----------
    bridge_sensors:
        Every sensor the bridge reports.
    sensor_configs:
        Configured bindings.  Disabled entries are skipped.

    Returns
    -------
    list[SensorTransformer]
        In the same order as *sensor_configs*.
    """
    bridge_sensors = list(bridge_sensors)
    transformers: list[SensorTransformer] = []

    for sensor_config in sensor_configs:
        if not sensor_config.enabled:
            logger.debug("skipping disabled sensor %s", sensor_config.name)
            continue
        sensor = find_sensor(bridge_sensors, sensor_config.name)
        kind = kind_for_type(sensor.type)
        transformer = SensorTransformer(sensor.id, kind, sensor_config)
        logger.info("bound %s", transformer)
        transformers.append(transformer)

    return transformers
