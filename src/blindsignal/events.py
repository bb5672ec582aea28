"""AcousticEvent -- the immutable ping value passed through the channel.

A ping is a noise-producing action at a 2-D ground-plane position.  It is
created once by the emitter, fanned out to every subscriber, judged once by
each subscriber's PerceptionFilter and then dropped.  There is no clock
field: ordering is whatever order the channel delivered it in.

Wire format (MQTT payload, JSON object):
    {"x": float, "y": float, "intensity": float, "playerId": str}
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


class PayloadError(ValueError):
    """Raised when an inbound payload cannot be turned into an AcousticEvent."""


def _as_real(payload: dict, key: str) -> float:
    value = payload.get(key)
    # bool is an int subclass; "true" is not a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"field {key!r} must be a number, got {value!r}")
    try:
        value = float(value)
    except OverflowError as e:
        raise PayloadError(f"field {key!r} is out of range: {e}") from e
    if not math.isfinite(value):
        raise PayloadError(f"field {key!r} must be finite, got {value!r}")
    return value


@dataclass(frozen=True)
class AcousticEvent:
    """A ping: where it came from, how loud it was, and who made it."""

    origin: tuple[float, float]
    intensity: float
    source_id: str

    def __post_init__(self) -> None:
        if self.intensity < 0:
            raise ValueError(f"intensity must be non-negative, got {self.intensity}")

    @property
    def x(self) -> float:
        return self.origin[0]

    @property
    def y(self) -> float:
        return self.origin[1]

    def with_source(self, source_id: str) -> AcousticEvent:
        """Return a copy attributed to a different participant."""
        return AcousticEvent(origin=self.origin, intensity=self.intensity, source_id=source_id)

    def to_payload(self) -> dict:
        return {
            "x": float(self.origin[0]),
            "y": float(self.origin[1]),
            "intensity": float(self.intensity),
            "playerId": self.source_id,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> AcousticEvent:
        """Build an event from a decoded wire payload.

        Raises:
            PayloadError: if the payload is not a dict, a field is missing,
                has the wrong type, or the intensity is negative.
        """
        if not isinstance(payload, dict):
            raise PayloadError(f"payload must be an object, got {type(payload).__name__}")
        x = _as_real(payload, "x")
        y = _as_real(payload, "y")
        intensity = _as_real(payload, "intensity")
        if intensity < 0:
            raise PayloadError(f"intensity must be non-negative, got {intensity}")
        player_id = payload.get("playerId")
        if not isinstance(player_id, str) or not player_id:
            raise PayloadError(f"field 'playerId' must be a non-empty string, got {player_id!r}")
        return cls(origin=(x, y), intensity=intensity, source_id=player_id)
