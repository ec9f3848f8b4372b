"""Test the ball state machine."""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from routethat_engine.core.models import DEFAULT_CONFIG, OutcomeType, PlayerType, Possession, Side
from routethat_engine.sim.ball import (
    InFlight, Outcome, Possessed, PreThrow, Terminal, advance_ball,
    flight_position, status_label
)
from routethat_engine.sim.motion import CompiledPlayer

QB_START = (300.0, 570.0)
THROW_TIME = 3000.0
FLIGHT = DEFAULT_CONFIG.timing.flight_time_ms


def create_roster(*players):
    return {p.name: p for p in players}


def create_receiver(name="WR1", spot=(300.0, 300.0)):
    return CompiledPlayer(name=name, side=Side.OFFENSE, player_type=PlayerType.RECEIVER, start=spot)


def create_defender(name="D1", spot=(300.0, 300.0), player_type=PlayerType.CB):
    return CompiledPlayer(name=name, side=Side.DEFENSE, player_type=player_type, start=spot)


def create_pass(target="WR1", target_point=(300.0, 300.0), deflected=False):
    return InFlight(
        target=target,
        origin=QB_START,
        target_point=target_point,
        throw_time=THROW_TIME,
        deflected=deflected
    )


# ============================================================================
# PreThrow
# ============================================================================

def test_holds_before_decision_time():
    players = create_roster(create_receiver())
    step = advance_ball(PreThrow(), players, 1000.0, QB_START)
    assert isinstance(step.state, PreThrow)
    assert step.position == QB_START


def test_throws_at_decision_time():
    players = create_roster(create_receiver())
    step = advance_ball(PreThrow(), players, THROW_TIME, QB_START)
    assert isinstance(step.state, InFlight)
    assert step.state.target == "WR1"
    assert step.state.origin == QB_START
    assert step.flight_progress == 0.0


def test_no_receivers_is_incomplete_not_sack():
    players = create_roster(CompiledPlayer("QB", Side.OFFENSE, PlayerType.QB, QB_START))
    step = advance_ball(PreThrow(), players, THROW_TIME, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.INCOMPLETE_NO_TARGET))


def test_sack_when_no_throw_in_time():
    players = create_roster(create_receiver())
    step = advance_ball(PreThrow(), players, DEFAULT_CONFIG.timing.sack_time_ms, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.SACK))


# ============================================================================
# InFlight
# ============================================================================

def test_flight_arc():
    state = create_pass()
    assert flight_position(state, 0.0, DEFAULT_CONFIG) == pytest.approx(QB_START)
    assert flight_position(state, 1.0, DEFAULT_CONFIG) == pytest.approx((300.0, 300.0))

    x, y = flight_position(state, 0.5, DEFAULT_CONFIG)
    assert x == pytest.approx(300.0)
    assert y == pytest.approx(435.0 - DEFAULT_CONFIG.timing.arc_height)


def test_pass_still_in_the_air():
    players = create_roster(create_receiver())
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT / 2, QB_START)
    assert isinstance(step.state, InFlight)
    assert step.flight_progress == pytest.approx(0.5)


def test_defender_at_target_intercepts():
    """A defender sitting on the target point picks off the arriving ball."""
    players = create_roster(create_receiver(), create_defender(spot=(300.0, 300.0)))
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT, QB_START)

    assert isinstance(step.state, Possessed)
    assert step.state.is_interception
    assert step.state.carrier == "D1"
    assert step.state.catch_time == THROW_TIME + FLIGHT


def test_no_interception_early_in_flight():
    """Under 70% progress a defender on the ball only deflects it."""
    players = create_roster(create_receiver(), create_defender(spot=(300.0, 405.0)))
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT / 2, QB_START)

    assert isinstance(step.state, InFlight)
    assert step.state.deflected


def test_deflection_is_sticky():
    """A pass tipped earlier falls incomplete even to an open receiver."""
    players = create_roster(create_receiver(), create_defender(spot=(300.0, 405.0)))
    step = advance_ball(create_pass(deflected=True), players, THROW_TIME + FLIGHT, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.INCOMPLETE))


def test_linemen_never_intercept():
    players = create_roster(
        create_receiver(),
        create_defender("DT1", (300.0, 300.0), PlayerType.DL)
    )
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT, QB_START)
    assert isinstance(step.state, Possessed)
    assert not step.state.is_interception


def test_completion_to_receiver_on_target():
    players = create_roster(create_receiver(spot=(305.0, 300.0)))
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT, QB_START)

    assert step.state == Possessed(carrier="WR1", is_interception=False, catch_time=THROW_TIME + FLIGHT)
    assert step.carrier_position == (305.0, 300.0)
    assert step.flight_progress == 1.0


def test_incomplete_when_receiver_misses_spot():
    players = create_roster(create_receiver(spot=(400.0, 300.0)))
    step = advance_ball(create_pass(), players, THROW_TIME + FLIGHT, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.INCOMPLETE))


def test_missing_target_leaves_state_unchanged():
    state = create_pass(target="WR9")
    step = advance_ball(state, create_roster(create_receiver()), THROW_TIME + 100.0, QB_START)
    assert step.state is state
    assert step.position is None


# ============================================================================
# Possessed
# ============================================================================

def test_carrier_tackled():
    carrier = create_receiver(spot=(300.0, 300.0))
    players = create_roster(carrier, create_defender(spot=(300.0, 310.0)))
    state = Possessed(carrier="WR1", is_interception=False, catch_time=4000.0)

    step = advance_ball(state, players, 4016.0, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.TACKLED, Possession.COMPLETE))


def test_carrier_runs_downfield():
    players = create_roster(create_receiver(spot=(300.0, 300.0)))
    state = Possessed(carrier="WR1", is_interception=False, catch_time=4000.0)

    step = advance_ball(state, players, 5000.0, QB_START)
    assert step.state is state
    assert step.carrier_position == pytest.approx((300.0, 300.0 - DEFAULT_CONFIG.speed.standard * 1000.0))


def test_carrier_scores():
    players = create_roster(create_receiver(spot=(300.0, 52.0)))
    state = Possessed(carrier="WR1", is_interception=False, catch_time=4000.0)

    step = advance_ball(state, players, 4100.0, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.TOUCHDOWN, Possession.COMPLETE))


def test_carrier_out_of_bounds():
    players = create_roster(create_receiver(spot=(0.0, 300.0)))
    state = Possessed(carrier="WR1", is_interception=False, catch_time=4000.0)

    step = advance_ball(state, players, 4100.0, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.OUT_OF_BOUNDS, Possession.COMPLETE))


def test_tackle_checked_before_out_of_bounds():
    players = create_roster(create_receiver(spot=(0.0, 300.0)), create_defender(spot=(5.0, 300.0)))
    state = Possessed(carrier="WR1", is_interception=False, catch_time=4000.0)

    step = advance_ball(state, players, 4016.0, QB_START)
    assert step.state.outcome.type == OutcomeType.TACKLED


def test_interception_returned_for_touchdown():
    """An interceptor scores by crossing the same goal line the offense attacks."""
    players = create_roster(
        create_defender(spot=(300.0, 52.0)),
        CompiledPlayer("LT", Side.OFFENSE, PlayerType.OL, (300.0, 50.0))
    )
    state = Possessed(carrier="D1", is_interception=True, catch_time=4000.0)

    step = advance_ball(state, players, 4200.0, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.TOUCHDOWN, Possession.INTERCEPTION))


def test_interceptor_tackled_by_offense():
    players = create_roster(create_defender(spot=(300.0, 300.0)), create_receiver(spot=(300.0, 306.0)))
    state = Possessed(carrier="D1", is_interception=True, catch_time=4000.0)

    step = advance_ball(state, players, 4016.0, QB_START)
    assert step.state == Terminal(Outcome(OutcomeType.TACKLED, Possession.INTERCEPTION))


def test_missing_carrier_leaves_state_unchanged():
    state = Possessed(carrier="WR9", is_interception=False, catch_time=4000.0)
    step = advance_ball(state, create_roster(create_receiver()), 4100.0, QB_START)
    assert step.state is state
    assert step.position is None


# ============================================================================
# Terminal and labels
# ============================================================================

def test_terminal_is_frozen():
    state = Terminal(Outcome(OutcomeType.SACK))
    step = advance_ball(state, create_roster(create_receiver()), 99999.0, QB_START)
    assert step.state is state


def test_unknown_state_rejected():
    with pytest.raises(TypeError):
        advance_ball("THROWN", {}, 100.0, QB_START)


@pytest.mark.parametrize("state,label", [
    (PreThrow(), "PENDING"),
    (create_pass(), "THROWN"),
    (Possessed("WR1", False, 4000.0), "COMPLETE"),
    (Possessed("D1", True, 4000.0), "INTERCEPTION"),
    (Terminal(Outcome(OutcomeType.INCOMPLETE_NO_TARGET)), "INCOMPLETE - NO TARGET"),
    (Terminal(Outcome(OutcomeType.TACKLED, Possession.COMPLETE)), "COMPLETE - TACKLED"),
    (Terminal(Outcome(OutcomeType.OUT_OF_BOUNDS, Possession.INTERCEPTION)), "INTERCEPTION - OUT OF BOUNDS"),
    (Terminal(Outcome(OutcomeType.SACK)), "SACK"),
])
def test_status_labels(state, label):
    assert status_label(state) == label


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
