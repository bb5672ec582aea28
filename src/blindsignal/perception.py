"""PerceptionFilter -- fog of war for inbound pings.

A ping is heard only if it landed within the local player's acoustic range:

    hypot(ping.x - player.x, ping.y - player.y) <= player.perception_radius

Exactly on the edge counts as heard.  Heard pings go to the presentation
callback as ``on_ping(x, y, intensity, source_id)``; everything else is
dropped without a trace.  Position and range are read from the player at
the moment each ping is judged, and no ping affects how the next is judged.

Our own pings (the simulator echo, or the broker reflecting our publish)
take the same distance check as anyone else's.

Two ways to drive it:
  - poll() from the host's frame/timer tick
  - start() a listener thread ("ping-perception") that blocks on the
    subscription, the way engine subsystems consume the event bus
"""

from __future__ import annotations

import logging
import math
import threading
from typing import TYPE_CHECKING, Callable

from blindsignal.events import AcousticEvent

if TYPE_CHECKING:
    from blindsignal.comms.channel import PingChannel
    from blindsignal.comms.event_bus import Subscription
    from blindsignal.player.player import LocalPlayer

logger = logging.getLogger("blindsignal.perception")

PingCallback = Callable[[float, float, float, str], object]


def is_audible(
    event: AcousticEvent,
    observer_pos: tuple[float, float],
    observer_radius: float,
) -> bool:
    dx = event.origin[0] - observer_pos[0]
    dy = event.origin[1] - observer_pos[1]
    return math.hypot(dx, dy) <= observer_radius


class PerceptionFilter:
    """Judges each inbound ping against one local player's hearing range."""

    def __init__(self, player: LocalPlayer, on_ping: PingCallback) -> None:
        self._player = player
        self._on_ping = on_ping
        self._sub: Subscription | None = None
        self._channel: PingChannel | None = None
        self._running = False
        self._thread: threading.Thread | None = None

    @property
    def attached(self) -> bool:
        return self._sub is not None and not self._sub.closed

    def handle(self, event: AcousticEvent) -> bool:
        """Judge one ping. Returns True if it was passed to presentation."""
        pos = self._player.position
        radius = self._player.attributes.perception_radius
        if not is_audible(event, pos, radius):
            logger.debug(
                "Ping from %s out of range (%.1f > %.1f). Suppressed.",
                event.source_id,
                math.hypot(event.x - pos[0], event.y - pos[1]),
                radius,
            )
            return False
        self._on_ping(event.x, event.y, event.intensity, event.source_id)
        return True

    # -- Channel wiring -----------------------------------------------------

    def attach(self, channel: PingChannel) -> None:
        if self._sub is not None:
            raise RuntimeError("PerceptionFilter is already attached to a channel")
        self._channel = channel
        self._sub = channel.subscribe()

    def detach(self) -> None:
        self.stop()
        sub, self._sub = self._sub, None
        channel, self._channel = self._channel, None
        if sub is not None and channel is not None:
            channel.unsubscribe(sub)

    def poll(self) -> int:
        """Judge every ping queued since the last poll. Returns how many."""
        if self._sub is None:
            return 0
        return self._sub.drain(self.handle)

    # -- Listener thread ----------------------------------------------------

    def start(self) -> None:
        if self._running:
            return
        if self._sub is None:
            raise RuntimeError("attach() to a channel before start()")
        self._running = True
        self._thread = threading.Thread(
            target=self._listen_loop, name="ping-perception", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._running = False
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def _listen_loop(self) -> None:
        sub = self._sub
        while self._running and sub is not None and not sub.closed:
            sub.drain(self.handle, timeout=0.2)
