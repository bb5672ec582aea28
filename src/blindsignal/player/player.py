"""LocalPlayer -- identity, ground position and stats of the player on this device."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .attributes import PlayerAttributes


def ground_position(position: Sequence[float]) -> tuple[float, float]:
    """Project a world position onto the 2-D ground plane.

    ``(x, y)`` is already on the plane.  ``(x, y, z)`` is a 3-D world
    position with y up, so the ground coordinates are ``(x, z)``.
    """
    if len(position) == 2:
        return (float(position[0]), float(position[1]))
    if len(position) == 3:
        return (float(position[0]), float(position[2]))
    raise ValueError(f"position must have 2 or 3 components, got {len(position)}")


@dataclass
class LocalPlayer:
    """The observer/emitter on this device.

    ``position`` is read fresh by the perception filter on every inbound
    ping, so whatever moves the player just assigns to it.
    """

    player_id: str = "local-player"
    position: tuple[float, float] = (0.0, 0.0)
    attributes: PlayerAttributes = field(default_factory=PlayerAttributes)

    def move_to(self, position: Sequence[float]) -> None:
        self.position = ground_position(position)
