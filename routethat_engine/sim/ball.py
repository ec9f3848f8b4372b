"""Ball state machine: PreThrow -> InFlight -> Possessed -> Terminal."""

import logging
import numpy as np
from dataclasses import dataclass
from typing import ClassVar, Mapping, Optional, Tuple, Union

from ..core.models import (
    DEFAULT_CONFIG, BallPhase, OutcomeType, Possession, Side, SimConfig
)
from .field import FieldCoordinates, dist_to_segment, distance
from .motion import CompiledPlayer, resolve_position
from .openness import choose_target

logger = logging.getLogger("routethat_engine.ball")


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a play."""
    type: OutcomeType
    possession: Optional[Possession] = None

    @property
    def label(self) -> str:
        """Scoreboard text, e.g. 'COMPLETE - TACKLED'."""
        if self.type == OutcomeType.INCOMPLETE_NO_TARGET:
            return "INCOMPLETE - NO TARGET"
        if self.type in (OutcomeType.TACKLED, OutcomeType.OUT_OF_BOUNDS) and self.possession:
            suffix = "TACKLED" if self.type == OutcomeType.TACKLED else "OUT OF BOUNDS"
            return f"{self.possession.value} - {suffix}"
        return self.type.value


@dataclass(frozen=True)
class PreThrow:
    phase: ClassVar[BallPhase] = BallPhase.PRE_THROW


@dataclass(frozen=True)
class InFlight:
    target: str
    origin: Tuple[float, float]
    target_point: Tuple[float, float]
    throw_time: float
    deflected: bool = False
    phase: ClassVar[BallPhase] = BallPhase.IN_FLIGHT


@dataclass(frozen=True)
class Possessed:
    carrier: str
    is_interception: bool
    catch_time: float
    phase: ClassVar[BallPhase] = BallPhase.POSSESSED

    @property
    def possession(self) -> Possession:
        return Possession.INTERCEPTION if self.is_interception else Possession.COMPLETE


@dataclass(frozen=True)
class Terminal:
    outcome: Outcome
    phase: ClassVar[BallPhase] = BallPhase.TERMINAL


BallState = Union[PreThrow, InFlight, Possessed, Terminal]


@dataclass(frozen=True)
class BallStep:
    """Result of advancing the ball by one tick.

    position is None when the tick could not place the ball (the caller keeps
    the previous position).
    """
    state: BallState
    position: Optional[Tuple[float, float]] = None
    flight_progress: Optional[float] = None
    carrier_position: Optional[Tuple[float, float]] = None


def status_label(state: BallState) -> str:
    """Scoreboard text for any ball state."""
    if isinstance(state, Terminal):
        return state.outcome.label
    if isinstance(state, Possessed):
        return state.possession.value
    if isinstance(state, InFlight):
        return "THROWN"
    return "PENDING"


def flight_position(
    state: InFlight,
    progress: float,
    config: SimConfig
) -> Tuple[float, float]:
    """Linear in x, linear minus a sine arc in y."""
    sx, sy = state.origin
    tx, ty = state.target_point
    x = sx + (tx - sx) * progress
    y = sy + (ty - sy) * progress - config.timing.arc_height * np.sin(np.pi * progress)
    return float(x), float(y)


def _step_pre_throw(
    players: Mapping[str, CompiledPlayer],
    elapsed: float,
    qb_start: Tuple[float, float],
    config: SimConfig
) -> BallStep:
    if elapsed >= config.timing.sack_time_ms:
        logger.debug(f"No throw by {elapsed:.0f}ms: sack")
        return BallStep(Terminal(Outcome(OutcomeType.SACK)), qb_start)

    if elapsed < config.timing.decision_delay_ms:
        return BallStep(PreThrow(), qb_start)

    decision = choose_target(list(players.values()), elapsed, config)
    if decision is None:
        logger.debug("No eligible receivers at decision time")
        return BallStep(Terminal(Outcome(OutcomeType.INCOMPLETE_NO_TARGET)), qb_start)

    logger.debug(f"Throw to {decision.target} at {elapsed:.0f}ms (score {decision.score:.1f})")
    thrown = InFlight(
        target=decision.target,
        origin=qb_start,
        target_point=decision.target_point,
        throw_time=elapsed
    )
    return BallStep(thrown, qb_start, flight_progress=0.0)


def _step_in_flight(
    state: InFlight,
    players: Mapping[str, CompiledPlayer],
    elapsed: float,
    config: SimConfig
) -> BallStep:
    receiver = players.get(state.target)
    if receiver is None:
        logger.warning(f"Pass target {state.target} missing from roster; skipping tick")
        return BallStep(state)

    radii = config.radii
    progress = min((elapsed - state.throw_time) / config.timing.flight_time_ms, 1.0)
    progress = max(progress, 0.0)
    ball = flight_position(state, progress, config)

    deflected = state.deflected
    for defender in players.values():
        if defender.side != Side.DEFENSE or defender.is_lineman:
            continue

        spot = resolve_position(defender, elapsed, config=config)
        to_ball = distance(ball, spot)

        if to_ball <= radii.interception and progress >= radii.interception_min_progress:
            logger.debug(f"{defender.name} intercepts at {progress:.2f} progress")
            return BallStep(
                Possessed(carrier=defender.name, is_interception=True, catch_time=elapsed),
                ball,
                flight_progress=progress,
                carrier_position=spot
            )

        to_path = dist_to_segment(spot, state.origin, state.target_point)
        if to_path <= radii.deflection and to_ball <= radii.catch:
            deflected = True
            break

    if progress < 1.0:
        return BallStep(
            InFlight(state.target, state.origin, state.target_point, state.throw_time, deflected),
            ball,
            flight_progress=progress
        )

    receiver_spot = resolve_position(receiver, elapsed, config=config)
    if deflected or distance(receiver_spot, state.target_point) > radii.catch:
        return BallStep(Terminal(Outcome(OutcomeType.INCOMPLETE)), ball, flight_progress=1.0)

    return BallStep(
        Possessed(carrier=receiver.name, is_interception=False, catch_time=elapsed),
        ball,
        flight_progress=1.0,
        carrier_position=receiver_spot
    )


def _step_possessed(
    state: Possessed,
    players: Mapping[str, CompiledPlayer],
    elapsed: float,
    config: SimConfig
) -> BallStep:
    carrier = players.get(state.carrier)
    if carrier is None:
        logger.warning(f"Ball carrier {state.carrier} missing from roster; skipping tick")
        return BallStep(state)

    field = FieldCoordinates(config.field)
    spot = resolve_position(carrier, elapsed, state.catch_time, None, config)
    cx, cy = spot

    if carrier.side == Side.OFFENSE:
        tacklers = [p for p in players.values() if p.side == Side.DEFENSE]
    else:
        tacklers = [p for p in players.values() if p.side == Side.OFFENSE and not p.is_lineman]

    tackled = any(
        distance(spot, resolve_position(p, elapsed, state.catch_time, spot, config)) <= config.radii.tackle
        for p in tacklers
        if p.name != carrier.name
    )

    if tackled:
        return BallStep(Terminal(Outcome(OutcomeType.TACKLED, state.possession)), spot, carrier_position=spot)

    if field.is_out_of_bounds(cx, cy):
        return BallStep(Terminal(Outcome(OutcomeType.OUT_OF_BOUNDS, state.possession)), spot, carrier_position=spot)

    if field.is_in_scoring_endzone(cy):
        return BallStep(Terminal(Outcome(OutcomeType.TOUCHDOWN, state.possession)), spot, carrier_position=spot)

    return BallStep(state, spot, carrier_position=spot)


def advance_ball(
    state: BallState,
    players: Mapping[str, CompiledPlayer],
    elapsed: float,
    qb_start: Tuple[float, float],
    config: Optional[SimConfig] = None
) -> BallStep:
    """
    Advance the ball one tick.

    Args:
        state: Current ball state
        players: Live roster keyed by name
        elapsed: Simulated time after this tick (ms)
        qb_start: Release point of the pass
        config: Simulation configuration

    Returns:
        BallStep with the next state; Terminal states never change
    """
    cfg = config or DEFAULT_CONFIG

    if isinstance(state, Terminal):
        return BallStep(state)
    if isinstance(state, PreThrow):
        return _step_pre_throw(players, elapsed, qb_start, cfg)
    if isinstance(state, InFlight):
        return _step_in_flight(state, players, elapsed, cfg)
    if isinstance(state, Possessed):
        return _step_possessed(state, players, elapsed, cfg)

    raise TypeError(f"Unknown ball state: {state!r}")
