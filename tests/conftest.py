"""Shared fixtures for ping core tests."""

from __future__ import annotations

import pytest

from blindsignal.config import Settings
from blindsignal.player.player import LocalPlayer


class FakeClock:
    """Manually advanced monotonic clock for rate-limit tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingChannel:
    """Channel stand-in that records what the emitter publishes."""

    def __init__(self) -> None:
        self.published = []

    def publish(self, event) -> None:
        self.published.append(event)


class PingRecorder:
    """Presentation callback that records every heard ping."""

    def __init__(self) -> None:
        self.pings: list[tuple[float, float, float, str]] = []

    def __call__(self, x: float, y: float, intensity: float, source_id: str) -> None:
        self.pings.append((x, y, intensity, source_id))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def recorder() -> PingRecorder:
    return PingRecorder()


@pytest.fixture
def player() -> LocalPlayer:
    return LocalPlayer(player_id="p1")


@pytest.fixture
def mock_settings() -> Settings:
    # Long timer so fabricated pings never interfere with echo assertions
    return Settings(_env_file=None, mock_mode=True, mock_ping_interval=60.0, mock_seed=7)
