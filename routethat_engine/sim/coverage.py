"""Defensive coverage movement compilation."""

import logging
import dataclasses
import numpy as np
from typing import List, Optional, Sequence, Tuple

from ..core.models import (
    DEFAULT_CONFIG, SECONDARY_NAMES, CoverageScheme, DefensiveRole,
    PlayerType, RouteSpec, Side, SimConfig, Waypoint, offense_type_for
)
from .defense import DefenseSetup, DefensiveAssignment
from .motion import (
    HOLD_FOREVER, CompiledPlayer, MotionSegment, compile_route, resolve_position
)

logger = logging.getLogger("routethat_engine.coverage")


def pace_waypoints(
    start: Tuple[float, float],
    points: Sequence[Tuple[float, float]],
    speed: float
) -> List[Waypoint]:
    """Attach arrival times to a path run at constant speed from the snap."""
    waypoints = []
    prev_x, prev_y = start
    clock = 0.0
    for x, y in points:
        dist = float(np.sqrt((x - prev_x) ** 2 + (y - prev_y) ** 2))
        clock += dist / speed
        waypoints.append(Waypoint(x=x, y=y, time_ms=clock))
        prev_x, prev_y = x, y
    return waypoints


def _compile_line(defender: CompiledPlayer, config: SimConfig) -> Tuple[MotionSegment, ...]:
    """Linemen step just past the LOS; their type keeps them stationary."""
    x, y = defender.start
    target = (x, config.field.defensive_line_y - config.defense.line_rush_depth)
    return compile_route(
        defender.start,
        pace_waypoints(defender.start, [target], config.speed.standard),
        PlayerType.DL
    )


def _compile_man(
    defender: CompiledPlayer,
    target_name: str,
    route_spec: RouteSpec,
    config: SimConfig
) -> Tuple[MotionSegment, ...]:
    """Trail the assigned receiver at one fixed offset for the whole route."""
    receiver_route = route_spec.get(target_name)
    if receiver_route is None:
        logger.warning(f"{defender.name} assigned to {target_name}, which has no route")
        return HOLD_FOREVER

    receiver = CompiledPlayer(
        name=target_name,
        side=Side.OFFENSE,
        player_type=offense_type_for(target_name),
        start=receiver_route.start.as_tuple(),
        segments=compile_route(
            receiver_route.start.as_tuple(),
            receiver_route.waypoints,
            offense_type_for(target_name)
        )
    )

    # The defender lined up at its trail offset
    offset_x = defender.start[0] - receiver.start[0]
    offset_y = defender.start[1] - receiver.start[1]

    timing = config.timing
    sample_times = sorted({0.0, timing.get_off_ms, *(wp.time_ms for wp in receiver_route.waypoints)})
    sample_times = [t for t in sample_times if 0.0 <= t <= timing.play_ceiling_ms]

    waypoints = []
    for t in sample_times:
        rx, ry = resolve_position(receiver, t, config=config)
        waypoints.append(Waypoint(x=rx + offset_x, y=ry + offset_y, time_ms=t))

    if not waypoints:
        return HOLD_FOREVER
    waypoints.append(waypoints[-1].model_copy())

    return compile_route(defender.start, waypoints, defender.player_type)


def _compile_zone(
    defender: CompiledPlayer,
    role: DefensiveRole,
    config: SimConfig
) -> Tuple[MotionSegment, ...]:
    """Drop to a zone landmark, patrol side to side, return to the landmark."""
    f = config.field
    d = config.defense

    if role == DefensiveRole.DEEP:
        drop_x = defender.start[0]
        drop_y = f.top_endzone_line + d.deep_drop_past_goal
        patrol = d.deep_patrol
    else:
        index = SECONDARY_NAMES.index(defender.name) if defender.name in SECONDARY_NAMES else 0
        if index % 3 == 0:
            drop_x = f.width / 4
        elif index % 3 == 1:
            drop_x = f.width * 3 / 4
        else:
            drop_x = f.width / 2
        drop_y = f.defensive_line_y - d.intermediate_drop_yards * f.px_per_yard
        patrol = d.underneath_patrol

    left = max(d.patrol_inset, drop_x - patrol)
    right = min(f.width - d.patrol_inset, drop_x + patrol)
    path = [(drop_x, drop_y), (left, drop_y), (right, drop_y), (drop_x, drop_y)]

    return compile_route(
        defender.start,
        pace_waypoints(defender.start, path, config.speed.standard),
        defender.player_type
    )


def compile_coverage(
    defender: CompiledPlayer,
    assignment: DefensiveAssignment,
    route_spec: RouteSpec,
    config: Optional[SimConfig] = None
) -> Tuple[MotionSegment, ...]:
    """
    Compile a defender's movement for the coverage call.

    Args:
        defender: Defender from the generated roster
        assignment: Coverage call
        route_spec: Offensive routes (man coverage shadows them)
        config: Simulation configuration

    Returns:
        Motion segments in the same shape as compile_route output
    """
    cfg = config or DEFAULT_CONFIG
    role = assignment.role_of(defender.name)

    if defender.player_type == PlayerType.DL or role == DefensiveRole.LINE:
        return _compile_line(defender, cfg)

    if assignment.scheme == CoverageScheme.MAN:
        target_name = assignment.target_of(defender.name)
        if target_name is not None:
            return _compile_man(defender, target_name, route_spec, cfg)

    elif assignment.scheme in (CoverageScheme.COVER2, CoverageScheme.COVER3) and role is not None:
        return _compile_zone(defender, role, cfg)

    # Unassigned defenders hold their spot
    return HOLD_FOREVER


def compile_defense(
    defense: DefenseSetup,
    route_spec: RouteSpec,
    config: Optional[SimConfig] = None
) -> List[CompiledPlayer]:
    """Compile movement for every defender in the setup."""
    return [
        dataclasses.replace(
            defender,
            segments=compile_coverage(defender, defense.assignment, route_spec, config)
        )
        for defender in defense.players
    ]
