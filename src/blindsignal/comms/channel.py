"""PingChannel -- the broadcast contract shared by every backend.

A channel sends the local player's pings to all participants and fans the
pings it receives out to local subscribers through its own PingBus.

Backends:
  - SimulatedChannel (comms.simulated): loops publishes back locally and
    fabricates remote pings on a timer.  Single-device testing.
  - MQTTChannel (comms.mqtt_channel): a real broker topic shared by every
    participant in the session.

The backend is picked once, at startup, by ``create_channel``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .event_bus import DEFAULT_QUEUE_SIZE, PingBus, Subscription

if TYPE_CHECKING:
    from blindsignal.config import Settings
    from blindsignal.events import AcousticEvent

logger = logging.getLogger("blindsignal.channel")


class PingChannel(ABC):
    """Base class for ping transports.

    Subclasses implement:
      - start()   -- begin receiving (connect, start timers)
      - publish() -- send a local ping to all participants
      - _shutdown() -- release transport resources; called once by close()
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._bus = PingBus(queue_size=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def start(self) -> None:
        """Begin delivering inbound pings to subscribers."""

    @abstractmethod
    def publish(self, event: AcousticEvent) -> None:
        """Broadcast a local ping."""

    @abstractmethod
    def _shutdown(self) -> None:
        """Stop timers / release the transport. Must not deliver afterwards."""

    def subscribe(self) -> Subscription:
        return self._bus.subscribe()

    def unsubscribe(self, sub: Subscription) -> None:
        self._bus.unsubscribe(sub)

    def _deliver(self, event: AcousticEvent) -> None:
        """Fan an inbound ping out to every local subscriber."""
        if self._closed:
            return
        logger.debug(
            "Inbound ping pos=(%.1f, %.1f) V_n=%.2f from %s",
            event.x, event.y, event.intensity, event.source_id,
        )
        self._bus.publish(event)

    def close(self) -> None:
        """Tear the channel down. Idempotent.

        Once this returns no subscriber will observe another ping, whatever
        timers or transport callbacks were pending.
        """
        if self._closed:
            return
        self._closed = True
        self._shutdown()
        self._bus.close()
        logger.info("%s closed", type(self).__name__)

    def __enter__(self) -> PingChannel:
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def create_channel(settings: Settings) -> PingChannel:
    """Build the backend selected by ``settings.mock_mode``."""
    if settings.mock_mode:
        from .simulated import SimulatedChannel

        return SimulatedChannel(
            interval=settings.mock_ping_interval,
            bounds=settings.mock_bounds,
            intensity_range=(settings.mock_intensity_min, settings.mock_intensity_max),
            seed=settings.mock_seed,
            queue_size=settings.subscriber_queue_size,
        )

    from .mqtt_channel import MQTTChannel

    return MQTTChannel(
        session_id=settings.mqtt_session_id,
        broker_host=settings.mqtt_host,
        broker_port=settings.mqtt_port,
        topic=settings.mqtt_topic,
        username=settings.mqtt_username,
        password=settings.mqtt_password,
        queue_size=settings.subscriber_queue_size,
    )
