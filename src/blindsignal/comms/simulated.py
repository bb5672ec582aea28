"""SimulatedChannel -- local stand-in for the realtime ping topic.

Lets the whole emit -> fan-out -> filter path run on one device with no
broker:

  - publish() loops the ping straight back to local subscribers, attributed
    to a synthetic remote participant, as if another player had made it.
  - A daemon timer thread ("ping-simulator") fabricates a remote ping every
    ``interval`` seconds at a uniform random position inside the square
    [-bounds, bounds] x [-bounds, bounds] with a uniform intensity drawn
    from ``intensity_range``.

The timer runs until close(); nothing else pauses or cancels it.  close()
signals the thread and joins it before returning.
"""

from __future__ import annotations

import logging
import random
import threading

from blindsignal.events import AcousticEvent

from .channel import PingChannel
from .event_bus import DEFAULT_QUEUE_SIZE

logger = logging.getLogger("blindsignal.simulated")

MOCK_REMOTE_ID = "mock-remote-player"

# Map bounds of the test arena (half-extent, world units)
_DEFAULT_BOUNDS = 30.0
_DEFAULT_INTERVAL = 3.0
_DEFAULT_INTENSITY = (1.0, 5.0)


class SimulatedChannel(PingChannel):
    """Loops pings back locally and generates fake remote pings on a timer."""

    def __init__(
        self,
        interval: float = _DEFAULT_INTERVAL,
        bounds: float = _DEFAULT_BOUNDS,
        intensity_range: tuple[float, float] = _DEFAULT_INTENSITY,
        seed: int | None = None,
        remote_id: str = MOCK_REMOTE_ID,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        super().__init__(queue_size=queue_size)
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        lo, hi = intensity_range
        if lo < 0 or lo > hi:
            raise ValueError(f"invalid intensity range {intensity_range}")
        self._interval = interval
        self._bounds = abs(bounds)
        self._intensity_range = (lo, hi)
        self._remote_id = remote_id
        self._rng = random.Random(seed)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None or self._closed:
            return
        logger.info("Mock ping channel active (every %.1fs)", self._interval)
        self._thread = threading.Thread(
            target=self._timer_loop, name="ping-simulator", daemon=True
        )
        self._thread.start()

    def publish(self, event: AcousticEvent) -> None:
        logger.debug(
            "Sending ping pos=(%.1f, %.1f) V_n=%.2f player=%s",
            event.x, event.y, event.intensity, event.source_id,
        )
        self._deliver(event.with_source(self._echo_id(event.source_id)))

    def fabricate(self) -> AcousticEvent:
        """Build one synthetic remote ping."""
        b = self._bounds
        lo, hi = self._intensity_range
        return AcousticEvent(
            origin=(self._rng.uniform(-b, b), self._rng.uniform(-b, b)),
            intensity=self._rng.uniform(lo, hi),
            source_id=self._remote_id,
        )

    def _echo_id(self, publisher_id: str) -> str:
        # The echo must never look like it came from the publisher itself
        if publisher_id == self._remote_id:
            return f"{self._remote_id}-echo"
        return self._remote_id

    def _timer_loop(self) -> None:
        while not self._stop.wait(self._interval):
            self._deliver(self.fabricate())

    def _shutdown(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
