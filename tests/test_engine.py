"""Test the play director end to end."""

import dataclasses
import json
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from routethat_engine.core.models import (
    BallPhase, OutcomeType, RouteSpec, SimConfig, TimingConfig
)
from routethat_engine.core.plays import builtin_route_spec
from routethat_engine.sim.ball import InFlight, Terminal
from routethat_engine.sim.engine import PlayDirector
from routethat_engine.sim.trace import record_play, serialize_trace


def create_director(play="Verts", seed=42, speed_multiplier=1.0, config=None):
    return PlayDirector.from_route_spec(
        builtin_route_spec(play), seed=seed, speed_multiplier=speed_multiplier, config=config
    )


def create_line_only_spec():
    """Formation with a line and a quarterback but nobody to throw to."""
    return RouteSpec.model_validate({
        "LT": {"start": [200, 540]},
        "LG": {"start": [240, 540]},
        "C": {"start": [280, 540]},
        "RG": {"start": [320, 540]},
        "RT": {"start": [360, 540]},
        "QB": {"start": [280, 580]},
    })


def test_initial_snapshot():
    director = create_director()
    snap = director.snapshot

    assert snap.elapsed_ms == 0.0
    assert snap.ball.phase == BallPhase.PRE_THROW
    assert snap.ball.status == "PENDING"
    assert snap.ball.position == director.setup.qb_start
    assert snap.outcome is None
    assert snap.position_of("WR1") == (400.0, 540.0)
    assert len(snap.players) == 22


def test_tick_advances_clock():
    director = create_director(speed_multiplier=2.0)
    snap = director.tick()
    assert snap.elapsed_ms == pytest.approx(2 * director.config.timing.base_tick_ms)
    assert director.tick_ms == pytest.approx(33.34)


@pytest.mark.parametrize("multiplier", [0.0, -1.0, float("nan"), float("inf")])
def test_rejects_bad_speed_multiplier(multiplier):
    with pytest.raises(ValueError):
        create_director(speed_multiplier=multiplier)


@pytest.mark.parametrize("seed", range(8))
def test_play_always_finishes(seed):
    director = create_director(seed=seed)
    final = director.run()

    assert director.is_finished
    assert final.outcome is not None
    assert final.ball.phase == BallPhase.TERMINAL
    assert final.ball.status == final.outcome.label


def test_no_receivers_is_incomplete_no_target():
    director = PlayDirector.from_route_spec(create_line_only_spec(), seed=1)
    final = director.run()

    assert final.outcome.type == OutcomeType.INCOMPLETE_NO_TARGET
    assert final.elapsed_ms >= director.config.timing.decision_delay_ms
    assert final.elapsed_ms < director.config.timing.sack_time_ms


def test_sack_when_decision_comes_too_late():
    config = SimConfig(timing=TimingConfig(decision_delay_ms=9000.0))
    director = create_director(config=config)
    final = director.run()

    assert final.outcome.type == OutcomeType.SACK
    assert final.yards_gained == 0
    assert final.target is None


def test_throw_happens_at_decision_time():
    director = create_director()
    thrown = next(s for s in director.iter_ticks() if s.ball.phase == BallPhase.IN_FLIGHT)

    assert thrown.elapsed_ms >= director.config.timing.decision_delay_ms
    assert thrown.elapsed_ms < director.config.timing.decision_delay_ms + director.tick_ms
    assert thrown.target is not None
    assert thrown.ball.status == "THROWN"


def test_terminal_snapshot_is_frozen():
    director = create_director()
    final = director.run()

    assert director.tick() is final
    assert director.tick().elapsed_ms == final.elapsed_ms
    assert list(director.iter_ticks()) == []


def test_same_seed_same_play():
    a = create_director(seed=11).run()
    b = create_director(seed=11).run()
    assert a == b


def test_half_speed_matches_double_ticks():
    """Halving the multiplier and doubling the ticks lands on the same frame."""
    full = create_director(seed=5, speed_multiplier=1.0)
    half = create_director(seed=5, speed_multiplier=0.5)

    for _ in range(120):
        a = full.tick()
        half.tick()
        b = half.tick()

        assert a.elapsed_ms == pytest.approx(b.elapsed_ms)
        for pa, pb in zip(a.players, b.players):
            assert pa.name == pb.name
            assert pa.position == pytest.approx(pb.position, abs=0.5)


def test_missing_target_skips_tick():
    """A pass to a player not on the field keeps the ball where it was."""
    director = create_director()
    director.ball_state = InFlight(
        target="WR9",
        origin=director.setup.qb_start,
        target_point=(300.0, 300.0),
        throw_time=0.0
    )
    before = director.snapshot
    snap = director.tick()

    assert snap.elapsed_ms > before.elapsed_ms
    assert snap.ball.position == before.ball.position
    assert snap.ball.phase == BallPhase.IN_FLIGHT
    assert director.ball_state.target == "WR9"


def test_missing_target_keeps_flight_progress():
    director = create_director()
    director.ball_state = InFlight(
        target="WR1",
        origin=director.setup.qb_start,
        target_point=(300.0, 300.0),
        throw_time=0.0
    )
    live = director.tick()
    assert live.ball.flight_progress is not None
    assert live.ball.flight_progress > 0.0

    director.ball_state = dataclasses.replace(director.ball_state, target="WR9")
    snap = director.tick()

    assert snap.ball.position == live.ball.position
    assert snap.ball.flight_progress == live.ball.flight_progress


def test_yards_track_carrier():
    """Completed plays report yards from the center's spot."""
    for seed in range(20):
        director = create_director(seed=seed)
        final = director.run()
        if final.outcome.possession is None:
            continue

        los = director.setup.line_of_scrimmage_y
        assert isinstance(final.yards_gained, int)
        assert abs(final.yards_gained) <= (director.config.field.height + los) / director.config.field.px_per_yard


def test_snapshot_serializes():
    director = create_director()
    final = director.run()
    data = final.to_dict()

    json.dumps(data)
    assert data["outcome"]["type"] == final.outcome.type.value
    assert data["ball"]["phase"] == "TERMINAL"
    assert len(data["players"]) == 22


def test_record_play_trace():
    trace = record_play(builtin_route_spec("Verts"), seed=3)

    assert trace.frames[0].elapsed_ms == 0.0
    times = [f.elapsed_ms for f in trace.frames]
    assert times == sorted(times)
    assert len(set(times)) == len(times)
    assert trace.outcome is not None
    assert all(f.outcome is None for f in trace.frames[:-1])

    summary = serialize_trace(trace)
    assert summary["coverage"] == trace.coverage.value
    assert summary["num_frames"] == len(trace.frames)
    assert "frames" not in summary

    full = serialize_trace(trace, include_frames=True)
    assert len(full["frames"]) == len(trace.frames)


def test_state_is_terminal_after_run():
    director = create_director(seed=9)
    director.run()
    assert isinstance(director.ball_state, Terminal)
    assert director.outcome == director.ball_state.outcome


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
