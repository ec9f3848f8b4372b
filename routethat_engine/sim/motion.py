"""Route compilation and player motion."""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.models import (
    DEFAULT_CONFIG, STATIONARY_TYPES, DefensiveRole, PlayerType, Side,
    SimConfig, Waypoint
)
from .field import FieldCoordinates

# Shortest segment the compiler emits for degenerate waypoint pairs
MIN_SEGMENT_MS = 1.0


@dataclass(frozen=True)
class MotionSegment:
    """Constant-velocity interval; the last segment of a route is unbounded."""
    start_time: float
    end_time: float
    vx: float = 0.0
    vy: float = 0.0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.end_time)


HOLD_FOREVER = (MotionSegment(0.0, math.inf),)


@dataclass(frozen=True)
class CompiledPlayer:
    """A player with its motion table for one play instance."""
    name: str
    side: Side
    player_type: PlayerType
    start: Tuple[float, float]
    segments: Tuple[MotionSegment, ...] = HOLD_FOREVER
    assignment: Optional[str] = None
    defensive_role: Optional[DefensiveRole] = None

    @property
    def is_stationary(self) -> bool:
        return self.player_type in STATIONARY_TYPES

    @property
    def is_lineman(self) -> bool:
        return self.player_type in (PlayerType.OL, PlayerType.DL)


def compile_route(
    start: Tuple[float, float],
    waypoints: Sequence[Waypoint],
    player_type: PlayerType
) -> Tuple[MotionSegment, ...]:
    """
    Compile a start point and timed waypoints into motion segments.

    Args:
        start: (x, y) at snap
        waypoints: Ordered waypoints with absolute arrival times
        player_type: Stationary types ignore their waypoints

    Returns:
        Segments partitioning [0, inf)

    A zero-distance waypoint becomes a zero-velocity hold lasting until its
    arrival time (at least MIN_SEGMENT_MS). A waypoint whose arrival time is
    not after the previous one is reached in MIN_SEGMENT_MS.
    """
    if player_type in STATIONARY_TYPES or not waypoints:
        return HOLD_FOREVER

    segments = []
    prev_x, prev_y = start
    cursor = 0.0

    for wp in waypoints:
        dx = wp.x - prev_x
        dy = wp.y - prev_y
        span = wp.time_ms - cursor
        end_time = wp.time_ms if span >= MIN_SEGMENT_MS else cursor + MIN_SEGMENT_MS

        if dx == 0 and dy == 0:
            segments.append(MotionSegment(cursor, end_time))
        else:
            duration = end_time - cursor
            segments.append(MotionSegment(cursor, end_time, dx / duration, dy / duration))
            prev_x, prev_y = wp.x, wp.y

        cursor = end_time

    # Hold the final spot once the route ends
    segments.append(MotionSegment(cursor, math.inf))
    return tuple(segments)


def route_end_time(segments: Sequence[MotionSegment]) -> float:
    """Time at which the last bounded segment finishes."""
    return segments[-1].start_time if segments else 0.0


def _scripted_position(player: CompiledPlayer, elapsed: float) -> Tuple[float, float]:
    """Start plus displacement accumulated along the segments up to elapsed."""
    x, y = player.start
    if elapsed <= 0:
        return x, y

    for seg in player.segments:
        if elapsed < seg.start_time:
            break
        if elapsed <= seg.end_time:
            dt = elapsed - seg.start_time
            x += seg.vx * dt
            y += seg.vy * dt
            break
        x += seg.vx * seg.duration
        y += seg.vy * seg.duration

    return x, y


def _unit_toward(
    origin: Tuple[float, float],
    target: Tuple[float, float]
) -> Tuple[float, float, float]:
    """Unit vector and distance from origin to target; zero vector if coincident."""
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    dist = float(np.sqrt(dx * dx + dy * dy))
    if dist == 0 or not np.isfinite(dist):
        return 0.0, 0.0, 0.0
    return dx / dist, dy / dist, dist


def resolve_position(
    player: CompiledPlayer,
    elapsed: float,
    possession_start: float = 0.0,
    target: Optional[Tuple[float, float]] = None,
    config: Optional[SimConfig] = None
) -> Tuple[float, float]:
    """
    Resolve a player's field position.

    Args:
        player: Compiled player
        elapsed: Time since snap (ms)
        possession_start: Time the ball was caught or intercepted, 0 if not yet
        target: Live carrier position for defensive pursuit
        config: Simulation configuration

    Returns:
        Clamped (x, y)

    Regimes:
        - stationary types hold their start
        - before any possession, players follow their compiled route
        - after a possession, defenders chase the target in a straight line
          at pursuit speed, offensive players advance straight downfield
    """
    cfg = config or DEFAULT_CONFIG
    field = FieldCoordinates(cfg.field)

    if player.is_stationary:
        return field.clamp(*player.start)

    if possession_start <= 0:
        return field.clamp(*_scripted_position(player, elapsed))

    run_time = max(0.0, elapsed - possession_start)
    origin = resolve_position(player, possession_start, 0.0, None, cfg)

    if player.side == Side.DEFENSE:
        if target is None:
            # Interception return heads past the scoring goal line
            target = (cfg.field.width / 2.0, cfg.field.top_endzone_line - 20.0)
        ux, uy, dist = _unit_toward(origin, target)
        travel = min(cfg.speed.pursuit * run_time, dist)
        return field.clamp(origin[0] + ux * travel, origin[1] + uy * travel)

    return field.clamp(origin[0], origin[1] - cfg.speed.standard * run_time)
