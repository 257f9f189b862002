"""Poll-dispatch loop: the part that runs for the life of the process.

The :class:`PollDispatchLoop` visits every transformer in order, pulls a
fresh snapshot from the bridge, applies the change filter and sends the
resulting OSC message.  Cycles start on a fixed schedule of
``poll_interval`` seconds; a cycle that overruns pushes the schedule back
instead of triggering a burst of catch-up cycles.

Every error (bridge read, OSC encoding, UDP send) propagates out of the
loop.  There is no retry and no per-sensor isolation.

Usage::

    from hms2osc.engine import PollDispatchLoop

    loop = PollDispatchLoop(config, transformers, bridge, sender)
    loop.run()
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol, Sequence

from .config import Config
from .transform import OscArg, SensorTransformer, SnapshotProvider, should_publish

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sender protocol
# ---------------------------------------------------------------------------

class Sender(Protocol):
    """Structural protocol that any OSC sender must satisfy."""

    def send(self, address: str, args: Sequence[OscArg]) -> None: ...


PublishCallback = Callable[[SensorTransformer], None]


# ---------------------------------------------------------------------------
# Loop
# ---------------------------------------------------------------------------

class PollDispatchLoop:
    """Drives the transformers at a fixed poll interval.

    Parameters
    ----------
    config:
        Loaded :class:`~hms2osc.config.Config`; only ``poll_interval`` is
        read here.
    transformers:
        Resolved transformers, visited in this order every cycle.
    provider:
        Source of sensor snapshots (normally a
        :class:`~hms2osc.bridge.HueBridge`).
    sender:
        Where published messages go (normally an
        :class:`~hms2osc.renderers.osc.OscUdpSender`).
    """

    def __init__(
        self,
        config: Config,
        transformers: list[SensorTransformer],
        provider: SnapshotProvider,
        sender: Sender,
    ) -> None:
        self.config = config
        self.transformers = transformers
        self.provider = provider
        self.sender = sender

        self.poll_interval: float = config.poll_interval

        # Stats
        self.cycle_count: int = 0
        self.messages_sent: int = 0
        self.messages_skipped: int = 0
        self.elapsed_time: float = 0.0

        self._publish_callbacks: list[PublishCallback] = []

    # -- public API -------------------------------------------------------

    def on_publish(self, callback: PublishCallback) -> None:
        """Register a callback invoked after every sent message.

        The callback receives the transformer that was published.
        """
        self._publish_callbacks.append(callback)

    def run(self, duration_seconds: float | None = None) -> None:
        """Poll until killed, or for *duration_seconds* if given."""
        logger.info(
            "polling %d sensor(s) every %gs", len(self.transformers), self.poll_interval
        )
        start = time.monotonic()
        next_tick = start

        try:
            while True:
                now = time.monotonic()
                if duration_seconds is not None and now - start >= duration_seconds:
                    break

                # Sleep until next tick
                sleep_time = next_tick - now
                if sleep_time > 0:
                    time.sleep(sleep_time)

                self.step()

                next_tick += self.poll_interval

                # Behind schedule: start the next cycle right away, once
                if next_tick < time.monotonic():
                    logger.debug("cycle %d overran the poll interval", self.cycle_count)
                    next_tick = time.monotonic()
        finally:
            self.elapsed_time = time.monotonic() - start

    def step(self) -> list[tuple[str, list[OscArg]]]:
        """Run one poll cycle and return the ``(address, args)`` pairs sent."""
        sent: list[tuple[str, list[OscArg]]] = []

        for transformer in self.transformers:
            transformer.update(self.provider)
            if not should_publish(transformer):
                self.messages_skipped += 1
                continue

            args = list(transformer.args)
            self.sender.send(transformer.osc_address, args)
            self.messages_sent += 1
            sent.append((transformer.osc_address, args))

            for cb in self._publish_callbacks:
                cb(transformer)

        self.cycle_count += 1
        return sent
