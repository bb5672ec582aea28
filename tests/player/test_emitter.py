"""Unit tests for PingEmitter -- noise tiers, dampening, and rate limits.

Rate limits are exercised with a manually advanced clock.  Tick sizes are
binary fractions (0.125 s) so elapsed-time comparisons are exact.
"""
from __future__ import annotations

import pytest

from blindsignal.config import Settings
from blindsignal.player.attributes import dampening_factor
from blindsignal.player.emitter import NoiseTier, PingEmitter, classify
from blindsignal.player.player import LocalPlayer, ground_position


def _emitter(player, channel, clock, **kwargs) -> PingEmitter:
    return PingEmitter(player, channel, clock=clock, **kwargs)


@pytest.mark.unit
class TestClassify:

    @pytest.mark.parametrize("magnitude,tier", [
        (0.0, NoiseTier.IDLE),
        (0.2, NoiseTier.IDLE),
        (0.2001, NoiseTier.WALK),
        (0.6, NoiseTier.WALK),
        (0.6001, NoiseTier.SPRINT),
        (1.0, NoiseTier.SPRINT),
    ])
    def test_boundaries(self, magnitude, tier):
        assert classify(magnitude) is tier

    def test_tier_values(self):
        assert int(NoiseTier.IDLE) == 1
        assert int(NoiseTier.WALK) == 3
        assert int(NoiseTier.SPRINT) == 5


@pytest.mark.unit
class TestGroundPosition:

    def test_2d_passthrough(self):
        assert ground_position((3, -4)) == (3.0, -4.0)

    def test_3d_drops_height(self):
        assert ground_position((3.0, 9.0, -4.0)) == (3.0, -4.0)

    def test_bad_length(self):
        with pytest.raises(ValueError):
            ground_position((1.0,))


@pytest.mark.unit
class TestMovementPings:

    def test_walk_ping_contents(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock)
        event = em.report_movement(0.5, (10.0, 2.0, -5.0))
        assert event is not None
        assert event.origin == (10.0, -5.0)
        assert event.intensity == pytest.approx(3.0)
        assert event.source_id == "p1"
        assert recording_channel.published == [event]

    def test_defaults_to_player_position(self, recording_channel, clock):
        player = LocalPlayer(player_id="p2", position=(7.0, 8.0))
        em = _emitter(player, recording_channel, clock)
        event = em.report_movement(0.9)
        assert event.origin == (7.0, 8.0)
        assert event.intensity == pytest.approx(5.0)

    def test_dampening_applied(self, player, recording_channel, clock):
        player.attributes.set_dampening_rank(5)
        em = _emitter(player, recording_channel, clock)
        event = em.report_movement(0.9, (0.0, 0.0))
        assert event.intensity == pytest.approx(5.0 * dampening_factor(5))

    def test_sustained_walk_rate_limited(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, movement_interval=0.5)
        dt = 0.125
        for i in range(20):  # 2.5 s
            clock.now = i * dt
            em.report_movement(0.5, (0.0, 0.0))
        assert len(recording_channel.published) == 5

    def test_below_threshold_is_silent(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock)
        for i in range(400):  # 50 s
            clock.now = i * 0.125
            assert em.report_movement(0.03, (0.0, 0.0)) is None
        assert recording_channel.published == []

    def test_exactly_at_threshold_is_silent(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, movement_threshold=0.05)
        assert em.report_movement(0.05, (0.0, 0.0)) is None

    def test_idle_tier_above_threshold_emits(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock)
        event = em.report_movement(0.1, (0.0, 0.0))
        assert event.intensity == pytest.approx(1.0)

    def test_custom_threshold(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, movement_threshold=0.3)
        assert em.report_movement(0.25, (0.0, 0.0)) is None
        assert em.report_movement(0.35, (0.0, 0.0)) is not None


@pytest.mark.unit
class TestDischarge:

    def test_base_intensity_bypasses_classifier(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock)
        assert em.fire_discharge((1.0, 1.0)) is True
        assert recording_channel.published[0].intensity == pytest.approx(15.0)

    def test_dampened_at_rank_five(self, player, recording_channel, clock):
        player.attributes.set_dampening_rank(5)
        em = _emitter(player, recording_channel, clock)
        em.fire_discharge((0.0, 0.0))
        assert recording_channel.published[0].intensity == pytest.approx(5.68, abs=0.01)

    def test_inside_cooldown_rejected(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, discharge_cooldown=0.5)
        first = em.fire_discharge((0.0, 0.0))
        clock.advance(0.25)
        second = em.fire_discharge((0.0, 0.0))
        assert (first, second) == (True, False)
        assert len(recording_channel.published) == 1

    def test_after_cooldown_accepted(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, discharge_cooldown=0.5)
        first = em.fire_discharge((0.0, 0.0))
        clock.advance(0.5)
        second = em.fire_discharge((0.0, 0.0))
        assert (first, second) == (True, True)

    def test_rejected_request_not_queued(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, discharge_cooldown=0.5)
        em.fire_discharge((0.0, 0.0))
        clock.advance(0.125)
        em.fire_discharge((0.0, 0.0))
        clock.advance(10.0)
        assert len(recording_channel.published) == 1

    def test_rejection_does_not_extend_cooldown(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, discharge_cooldown=0.5)
        em.fire_discharge((0.0, 0.0))
        clock.advance(0.375)
        assert em.fire_discharge((0.0, 0.0)) is False
        clock.advance(0.125)
        assert em.fire_discharge((0.0, 0.0)) is True

    def test_cooldown_remaining(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock, discharge_cooldown=0.5)
        assert em.cooldown_remaining() == 0.0
        em.fire_discharge((0.0, 0.0))
        clock.advance(0.125)
        assert em.cooldown_remaining() == pytest.approx(0.375)

    def test_discharge_independent_of_movement_limit(self, player, recording_channel, clock):
        em = _emitter(player, recording_channel, clock)
        em.report_movement(0.9, (0.0, 0.0))
        assert em.fire_discharge((0.0, 0.0)) is True
        assert len(recording_channel.published) == 2


@pytest.mark.unit
class TestFromSettings:

    def test_reads_settings(self, player, recording_channel, clock):
        cfg = Settings(
            _env_file=None,
            movement_ping_interval=1.0,
            movement_threshold=0.1,
            discharge_cooldown=2.0,
            discharge_noise=20.0,
        )
        em = PingEmitter.from_settings(player, recording_channel, cfg, clock=clock)
        assert em.movement_interval == 1.0
        assert em.movement_threshold == 0.1
        assert em.discharge_cooldown == 2.0
        em.fire_discharge((0.0, 0.0))
        assert recording_channel.published[0].intensity == pytest.approx(20.0)
