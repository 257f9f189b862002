#!/usr/bin/env python3
"""Run the publish pipeline against a simulated bridge.

Builds a :class:`SimulatedBridge` with one sensor of each kind, binds the
sensors from ``examples/config.json``, and sends OSC to the config's
``oscOutAddr`` for 5 seconds, then prints summary statistics.

Usage::

    python -m examples.run_simulation
    # or
    python examples/run_simulation.py
"""

from __future__ import annotations

import logging
import os
import sys

# Ensure the project root is on the import path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from hms2osc.bridge_sim import (
    SimulatedBridge,
    SimulatedLightLevel,
    SimulatedPresence,
    SimulatedTemperature,
)
from hms2osc.catalog import resolve_transformers
from hms2osc.config import load_config, resolve_socket_addr
from hms2osc.engine import PollDispatchLoop
from hms2osc.renderers.osc import OscUdpSender


def main() -> None:
    """Entry point for the simulated-bridge demo."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config_path = os.path.join(PROJECT_ROOT, "examples", "config.json")
    config = load_config(config_path)

    bridge = SimulatedBridge([
        SimulatedLightLevel("Hue ambient light sensor 1", noise=0.5),
        SimulatedPresence("Hue motion sensor 1", noise=0.1),
        SimulatedTemperature("Hue temperature sensor 1", noise=0.3),
    ])
    transformers = resolve_transformers(bridge.get_all_sensors(), config.sensors)

    family, destination = resolve_socket_addr(config.osc_out_addr)
    duration = 5.0
    print(f"Sending to {config.osc_out_addr} for {duration:.0f} seconds...")

    with OscUdpSender(family, destination) as sender:
        loop = PollDispatchLoop(config, transformers, bridge, sender)
        try:
            loop.run(duration_seconds=duration)
        except KeyboardInterrupt:
            pass

    print()
    print("=" * 50)
    print("  SIMULATION COMPLETE")
    print("=" * 50)
    print(f"  Cycles:           {loop.cycle_count}")
    print(f"  Messages sent:    {loop.messages_sent}")
    print(f"  Messages skipped: {loop.messages_skipped}")
    print(f"  Elapsed time:     {loop.elapsed_time:.2f}s")
    print("=" * 50)


if __name__ == "__main__":
    main()
