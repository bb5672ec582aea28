"""PingEmitter -- turns local actions into outbound pings.

Noise Value (V_n) mapping for movement, by input magnitude:
    magnitude <= 0.2  -> idle/crouch  V_n = 1
    magnitude <= 0.6  -> walk         V_n = 3
    magnitude  > 0.6  -> sprint       V_n = 5

A weapon discharge ("muzzle flash") is always V_n = 15.

Every emitted V_n is multiplied by the player's dampening factor before it
leaves the device.

Rate limits:
  - Movement pings go out only while magnitude > movement_threshold, and at
    most once per movement_interval.  Below the threshold the player is
    silent, so the idle tier never produces a movement ping.
  - Discharges have a cooldown.  A request inside it is refused (returns
    False, nothing is sent); it is not queued for later.
"""

from __future__ import annotations

import logging
import time
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Sequence

from blindsignal.events import AcousticEvent

from .player import LocalPlayer, ground_position

if TYPE_CHECKING:
    from blindsignal.comms.channel import PingChannel
    from blindsignal.config import Settings

logger = logging.getLogger("blindsignal.emitter")

CROUCH_THRESHOLD = 0.2
WALK_THRESHOLD = 0.6


class NoiseTier(IntEnum):
    IDLE = 1
    WALK = 3
    SPRINT = 5


def classify(magnitude: float) -> NoiseTier:
    """Base noise tier for a normalized input magnitude in [0, 1]."""
    if magnitude <= CROUCH_THRESHOLD:
        return NoiseTier.IDLE
    if magnitude <= WALK_THRESHOLD:
        return NoiseTier.WALK
    return NoiseTier.SPRINT


class PingEmitter:
    """Emission policy for one local player, publishing through one channel."""

    DISCHARGE_NOISE = 15.0

    def __init__(
        self,
        player: LocalPlayer,
        channel: PingChannel,
        movement_interval: float = 0.5,
        movement_threshold: float = 0.05,
        discharge_cooldown: float = 0.5,
        discharge_noise: float = DISCHARGE_NOISE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._player = player
        self._channel = channel
        self.movement_interval = movement_interval
        self.movement_threshold = movement_threshold
        self.discharge_cooldown = discharge_cooldown
        self.discharge_noise = discharge_noise
        self._clock = clock
        self._last_movement_ping: float | None = None
        self._last_discharge: float | None = None

    @classmethod
    def from_settings(
        cls,
        player: LocalPlayer,
        channel: PingChannel,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ) -> PingEmitter:
        return cls(
            player,
            channel,
            movement_interval=settings.movement_ping_interval,
            movement_threshold=settings.movement_threshold,
            discharge_cooldown=settings.discharge_cooldown,
            discharge_noise=settings.discharge_noise,
            clock=clock,
        )

    @property
    def player(self) -> LocalPlayer:
        return self._player

    def cooldown_remaining(self) -> float:
        if self._last_discharge is None:
            return 0.0
        elapsed = self._clock() - self._last_discharge
        return max(0.0, self.discharge_cooldown - elapsed)

    def report_movement(
        self,
        magnitude: float,
        position: Sequence[float] | None = None,
    ) -> AcousticEvent | None:
        """Called every tick with the current input magnitude.

        Returns the ping that was sent, or None if this tick was silent
        (below the activity threshold or inside the ping interval).
        """
        if magnitude <= self.movement_threshold:
            return None
        now = self._clock()
        if (
            self._last_movement_ping is not None
            and now - self._last_movement_ping < self.movement_interval
        ):
            return None
        self._last_movement_ping = now
        return self._emit(float(classify(magnitude)), position)

    def fire_discharge(self, position: Sequence[float] | None = None) -> bool:
        """Try to fire. True if the muzzle-flash ping went out, False on cooldown."""
        now = self._clock()
        if (
            self._last_discharge is not None
            and now - self._last_discharge < self.discharge_cooldown
        ):
            logger.debug("Discharge refused: on cooldown")
            return False
        self._last_discharge = now
        event = self._emit(self.discharge_noise, position)
        logger.debug(f"Muzzle flash ping sent (V_n={event.intensity:.2f})")
        return True

    def _emit(self, base_noise: float, position: Sequence[float] | None) -> AcousticEvent:
        origin = ground_position(position) if position is not None else self._player.position
        event = AcousticEvent(
            origin=origin,
            intensity=base_noise * self._player.attributes.dampening_factor,
            source_id=self._player.player_id,
        )
        self._channel.publish(event)
        return event
