"""Rank-driven player stats.

Two integer ranks grow through play and feed diminishing-returns curves:

  Dampening (emission):  D(r) = 1 - 0.8 * (1 - e^(-0.3 r))
      r = 0 -> 1.0 (no dampening), r -> inf approaches 0.2 (80% max cut)

  Acoustic range (perception):  R(r) = 200 + 150 * (1 - e^(-0.25 r))
      r = 0 -> 200 world units, r -> inf approaches 350

The curve functions are pure.  PlayerAttributes only stores the ranks and
reads the curves on every access, so there is no cached value to go stale.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger("blindsignal.player")

DAMPENING_FLOOR = 0.2
DAMPENING_DECAY = 0.3
BASE_RANGE = 200.0
RANGE_BONUS = 150.0
RANGE_DECAY = 0.25

# e^(-k r) is exactly 0.0 in float long before this; also keeps huge ints
# from overflowing the float conversion.
_SATURATED_RANK = 10_000

# Float rounding would land exactly on the asymptote at large ranks.
_DAMPENING_MIN = math.nextafter(DAMPENING_FLOOR, 1.0)
_RANGE_MAX = math.nextafter(BASE_RANGE + RANGE_BONUS, 0.0)


def _decay(rank: int, k: float) -> float:
    rank = max(0, rank)
    if rank >= _SATURATED_RANK:
        return 0.0
    return math.exp(-k * rank)


def dampening_factor(rank: int) -> float:
    """Multiplier applied to emitted noise. 1.0 at rank 0, always > 0.2."""
    value = 1.0 - (1.0 - DAMPENING_FLOOR) * (1.0 - _decay(rank, DAMPENING_DECAY))
    return max(value, _DAMPENING_MIN)


def perception_radius(rank: int) -> float:
    """Hearing range in world units. 200.0 at rank 0, always < 350."""
    value = BASE_RANGE + RANGE_BONUS * (1.0 - _decay(rank, RANGE_DECAY))
    return min(value, _RANGE_MAX)


class PlayerAttributes:
    """Holds a player's two ranks and exposes the stats derived from them."""

    def __init__(self, dampening_rank: int = 0, range_rank: int = 0) -> None:
        self._dampening_rank = max(0, int(dampening_rank))
        self._range_rank = max(0, int(range_rank))

    @property
    def dampening_rank(self) -> int:
        return self._dampening_rank

    @property
    def range_rank(self) -> int:
        return self._range_rank

    @property
    def dampening_factor(self) -> float:
        return dampening_factor(self._dampening_rank)

    @property
    def perception_radius(self) -> float:
        return perception_radius(self._range_rank)

    def set_dampening_rank(self, rank: int) -> None:
        self._dampening_rank = max(0, int(rank))
        logger.debug(self.describe())

    def set_range_rank(self, rank: int) -> None:
        self._range_rank = max(0, int(rank))
        logger.debug(self.describe())

    def describe(self) -> str:
        return (
            f"DampeningFactor={self.dampening_factor:.3f} (rank {self._dampening_rank}) | "
            f"AcousticRange={self.perception_radius:.1f} units (rank {self._range_rank})"
        )

    def __repr__(self) -> str:
        return (
            f"PlayerAttributes(dampening_rank={self._dampening_rank}, "
            f"range_rank={self._range_rank})"
        )
