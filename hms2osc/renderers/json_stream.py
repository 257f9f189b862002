"""JSON lines listing of resolved sensors, used by ``--list``.

Each resolved sensor is written as one line of compact JSON carrying its
binding and the raw state the bridge reported, which makes it easy to
check a config against the bridge before starting to publish.

Example output::

    {"name":"Hue motion sensor 1","id":"5","type":"ZLLPresence","kind":"Presence","oscAddress":"/hall/presence","state":{"presence":false,"lastupdated":"2024-01-01T10:00:00"}}
"""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from ..sensors import BridgeSensor
from ..transform import SensorTransformer


class SensorListRenderer:
    """Emits one JSON object per resolved sensor.

    Parameters
    ----------
    output:
        File-like object to write to (defaults to ``sys.stdout``).
    compact:
        If ``True`` (default), emit one line per sensor with no extra
        whitespace.  If ``False``, pretty-print each sensor.
    """

    def __init__(self, output: TextIO | None = None, compact: bool = True) -> None:
        self.output = output or sys.stdout
        self.compact = compact
        self.lines_written: int = 0

    def render(self, transformer: SensorTransformer, sensor: BridgeSensor) -> None:
        """Write one sensor's binding and raw state."""
        record: dict[str, Any] = {
            "name": transformer.name,
            "id": transformer.sensor_id,
            "type": sensor.type,
            "kind": str(transformer.kind),
            "oscAddress": transformer.osc_address,
            "sendChangesOnly": transformer.config.send_changes_only,
            "state": sensor.state,
        }
        if sensor.modelid is not None:
            record["modelid"] = sensor.modelid

        if self.compact:
            line = json.dumps(record, separators=(",", ":"))
        else:
            line = json.dumps(record, indent=2)

        self.output.write(line + "\n")
        self.output.flush()
        self.lines_written += 1
