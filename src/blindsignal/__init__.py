"""blindsignal -- acoustic ping distribution with per-player perception."""
from .events import AcousticEvent, PayloadError
from .perception import PerceptionFilter, is_audible
from .session import PingSession

__all__ = [
    "AcousticEvent",
    "PayloadError",
    "PerceptionFilter",
    "PingSession",
    "is_audible",
]

__version__ = "0.1.0"
