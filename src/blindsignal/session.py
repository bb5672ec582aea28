"""PingSession -- the per-match context object.

Created once when a match starts and closed when it ends.  It owns the
channel and wires the local player's emitter and perception filter to it;
nothing is looked up globally, so several sessions (tests, split-screen)
can live in one process without sharing a notification point.

Data flow:
  input -> PingEmitter --publish--> channel --fan-out--> PerceptionFilter
        -> on_ping(x, y, intensity, source_id)
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from blindsignal.comms.channel import PingChannel, create_channel
from blindsignal.config import Settings
from blindsignal.perception import PerceptionFilter, PingCallback
from blindsignal.player.attributes import PlayerAttributes
from blindsignal.player.emitter import PingEmitter
from blindsignal.player.player import LocalPlayer

logger = logging.getLogger("blindsignal.session")


def _discard(x: float, y: float, intensity: float, source_id: str) -> None:
    pass


class PingSession:
    """Channel + local player + emitter + perception filter for one match."""

    def __init__(
        self,
        settings: Settings | None = None,
        on_ping: PingCallback | None = None,
        channel: PingChannel | None = None,
        player: LocalPlayer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or Settings()
        self.channel = channel or create_channel(self.settings)
        self.player = player or LocalPlayer(
            player_id=self.settings.player_id,
            attributes=PlayerAttributes(),
        )
        self.emitter = PingEmitter.from_settings(
            self.player, self.channel, self.settings, clock=clock
        )
        self.perception = PerceptionFilter(self.player, on_ping or _discard)
        self._started = False
        self._closed = False

    @property
    def mock_mode(self) -> bool:
        return self.settings.mock_mode

    def start(self, listen: bool = False) -> None:
        """Subscribe the filter and start the channel.

        With ``listen=True`` the filter consumes pings on its own thread;
        otherwise the host calls tick() (or perception.poll()) each frame.
        """
        if self._started or self._closed:
            return
        self._started = True
        self.perception.attach(self.channel)
        self.channel.start()
        if listen:
            self.perception.start()
        logger.info(
            "Ping session started (%s mode) for %s",
            "mock" if self.mock_mode else "mqtt",
            self.player.player_id,
        )

    def tick(self, magnitude: float = 0.0) -> int:
        """One host frame: report movement, then judge queued pings."""
        self.emitter.report_movement(magnitude)
        return self.perception.poll()

    def close(self) -> None:
        """End the match. Idempotent; no on_ping call happens after this returns."""
        if self._closed:
            return
        self._closed = True
        self.perception.stop()
        self.channel.close()
        self.perception.detach()
        logger.info("Ping session closed")

    def __enter__(self) -> PingSession:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
