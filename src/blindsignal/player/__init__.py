"""Local player -- rank-driven stats and the emission policy."""
from .attributes import PlayerAttributes, dampening_factor, perception_radius
from .emitter import NoiseTier, PingEmitter, classify
from .player import LocalPlayer, ground_position

__all__ = [
    "LocalPlayer",
    "NoiseTier",
    "PingEmitter",
    "PlayerAttributes",
    "classify",
    "dampening_factor",
    "ground_position",
    "perception_radius",
]
