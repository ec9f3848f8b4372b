"""Play director: owns the clock and the ball state for one play."""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..core.models import DEFAULT_CONFIG, BallPhase, RouteSpec, Side, SimConfig
from .ball import (
    BallState, InFlight, Outcome, Possessed, PreThrow, Terminal,
    advance_ball, status_label
)
from .field import FieldCoordinates
from .motion import CompiledPlayer, resolve_position
from .roster import PlaySetup, build_play

logger = logging.getLogger("routethat_engine.engine")


@dataclass(frozen=True)
class PlayerSnapshot:
    name: str
    side: Side
    position: Tuple[float, float]


@dataclass(frozen=True)
class BallSnapshot:
    position: Tuple[float, float]
    phase: BallPhase
    status: str
    flight_progress: Optional[float] = None


@dataclass(frozen=True)
class TickSnapshot:
    """Everything a renderer needs for one frame."""
    elapsed_ms: float
    players: Tuple[PlayerSnapshot, ...]
    ball: BallSnapshot
    yards_gained: int = 0
    outcome: Optional[Outcome] = None
    target: Optional[str] = None

    def position_of(self, name: str) -> Optional[Tuple[float, float]]:
        for player in self.players:
            if player.name == name:
                return player.position
        return None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "elapsed_ms": self.elapsed_ms,
            "players": [
                {"name": p.name, "side": p.side.value, "position": list(p.position)}
                for p in self.players
            ],
            "ball": {
                "position": list(self.ball.position),
                "phase": self.ball.phase.value,
                "status": self.ball.status,
                "flight_progress": self.ball.flight_progress,
            },
            "outcome": None if self.outcome is None else {
                "type": self.outcome.type.value,
                "possession": self.outcome.possession.value if self.outcome.possession else None,
                "label": self.outcome.label,
            },
            "yards_gained": self.yards_gained,
            "target": self.target,
        }


class PlayDirector:
    """
    Tick-driven simulation of one play.

    Each call to tick() advances the clock by base tick x speed multiplier,
    steps the ball state machine and replaces the current snapshot. The
    director can be paused simply by not calling tick(); a Terminal ball
    freezes the snapshot.
    """

    def __init__(
        self,
        setup: PlaySetup,
        speed_multiplier: float = 1.0,
        config: Optional[SimConfig] = None
    ):
        if speed_multiplier <= 0 or not np.isfinite(speed_multiplier):
            raise ValueError(f"speed_multiplier must be positive, got {speed_multiplier}")

        self.setup = setup
        self.config = config or DEFAULT_CONFIG
        self.speed_multiplier = speed_multiplier
        self.field = FieldCoordinates(self.config.field)

        self._players: Dict[str, CompiledPlayer] = {p.name: p for p in setup.players}
        self.ball_state: BallState = PreThrow()
        self.snapshot = TickSnapshot(
            elapsed_ms=0.0,
            players=self._resolve_players(0.0, None, None),
            ball=BallSnapshot(setup.qb_start, BallPhase.PRE_THROW, status_label(self.ball_state))
        )

    @classmethod
    def from_route_spec(
        cls,
        route_spec: RouteSpec,
        seed: Optional[int] = None,
        speed_multiplier: float = 1.0,
        config: Optional[SimConfig] = None,
        rng: Optional[np.random.Generator] = None
    ) -> "PlayDirector":
        """Generate a defense for the routes and build a director."""
        cfg = config or DEFAULT_CONFIG
        rng = rng or np.random.Generator(np.random.PCG64(seed))
        setup = build_play(route_spec, rng, cfg)
        return cls(setup, speed_multiplier, cfg)

    @property
    def tick_ms(self) -> float:
        return self.config.timing.base_tick_ms * self.speed_multiplier

    @property
    def elapsed_ms(self) -> float:
        return self.snapshot.elapsed_ms

    @property
    def is_finished(self) -> bool:
        return isinstance(self.ball_state, Terminal)

    @property
    def outcome(self) -> Optional[Outcome]:
        return self.snapshot.outcome

    @property
    def players(self) -> Dict[str, CompiledPlayer]:
        return dict(self._players)

    def _resolve_players(
        self,
        elapsed: float,
        possession: Optional[Possessed],
        carrier_position: Optional[Tuple[float, float]]
    ) -> Tuple[PlayerSnapshot, ...]:
        snapshots = []
        for player in self._players.values():
            if possession is None:
                pos = resolve_position(player, elapsed, config=self.config)
            elif player.name == possession.carrier and carrier_position is not None:
                pos = carrier_position
            else:
                target = None if player.name == possession.carrier else carrier_position
                pos = resolve_position(player, elapsed, possession.catch_time, target, self.config)
            snapshots.append(PlayerSnapshot(player.name, player.side, pos))
        return tuple(snapshots)

    def tick(self) -> TickSnapshot:
        """Advance one tick and return the new snapshot."""
        if self.is_finished:
            return self.snapshot

        previous = self.snapshot
        elapsed = previous.elapsed_ms + self.tick_ms
        step = advance_ball(self.ball_state, self._players, elapsed, self.setup.qb_start, self.config)
        state = step.state

        possession = None
        if isinstance(state, Possessed):
            possession = state
        elif isinstance(self.ball_state, Possessed):
            possession = self.ball_state

        players = self._resolve_players(elapsed, possession, step.carrier_position)

        yards = previous.yards_gained
        if possession is not None and step.carrier_position is not None:
            yards = self.field.yards_from(self.setup.line_of_scrimmage_y, step.carrier_position[1])

        target = previous.target
        if isinstance(state, InFlight):
            target = state.target

        outcome = state.outcome if isinstance(state, Terminal) else None
        # A skipped tick keeps the previous ball spot and progress
        skipped = step.position is None
        ball = BallSnapshot(
            position=previous.ball.position if skipped else step.position,
            phase=state.phase,
            status=status_label(state),
            flight_progress=previous.ball.flight_progress if skipped else step.flight_progress
        )

        # Replace the snapshot in one assignment
        self.snapshot = TickSnapshot(
            elapsed_ms=elapsed,
            players=players,
            ball=ball,
            yards_gained=yards,
            outcome=outcome,
            target=target
        )

        if state.phase != self.ball_state.phase:
            logger.debug(f"{elapsed:.0f}ms: {self.ball_state.phase.value} -> {state.phase.value}")
        self.ball_state = state

        if outcome is not None:
            logger.info(f"Play over at {elapsed:.0f}ms: {outcome.label}, {yards} yards")

        return self.snapshot

    def iter_ticks(self, max_ticks: int = 100_000) -> Iterator[TickSnapshot]:
        """Yield snapshots until the play ends or max_ticks is reached."""
        for _ in range(max_ticks):
            if self.is_finished:
                return
            yield self.tick()

    def run(self, max_ticks: int = 100_000) -> TickSnapshot:
        """Run to a terminal outcome and return the final snapshot."""
        for _ in self.iter_ticks(max_ticks):
            pass
        if not self.is_finished:
            logger.warning(f"Play still running after {max_ticks} ticks at {self.elapsed_ms:.0f}ms")
        return self.snapshot

    def record(self, max_ticks: int = 100_000) -> List[TickSnapshot]:
        """Run to completion, keeping every snapshot (initial frame included)."""
        frames = [self.snapshot]
        frames.extend(self.iter_ticks(max_ticks))
        return frames
