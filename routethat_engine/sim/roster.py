"""Play setup: compile the offense and defense for one play instance."""

import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.models import (
    ALL_OFFENSE_PLAYERS, DEFAULT_CONFIG, RouteSpec, Side, SimConfig,
    offense_type_for
)
from .coverage import compile_defense
from .defense import DefenseSetup, DefensiveAssignment, generate_defense
from .motion import CompiledPlayer, compile_route

logger = logging.getLogger("routethat_engine.roster")


def compile_offense(route_spec: RouteSpec) -> List[CompiledPlayer]:
    """Compile every known offensive role present in the route spec."""
    offense = []
    for name in ALL_OFFENSE_PLAYERS:
        route = route_spec.get(name)
        if route is None:
            continue

        player_type = offense_type_for(name)
        start = route.start.as_tuple()
        offense.append(CompiledPlayer(
            name=name,
            side=Side.OFFENSE,
            player_type=player_type,
            start=start,
            segments=compile_route(start, route.waypoints, player_type)
        ))

    ignored = [name for name in route_spec if name not in ALL_OFFENSE_PLAYERS]
    if ignored:
        logger.debug(f"Ignoring unknown offensive roles: {ignored}")

    return offense


@dataclass(frozen=True)
class PlaySetup:
    """Everything the director needs to run one play."""
    route_spec: RouteSpec
    offense: Tuple[CompiledPlayer, ...]
    defense: Tuple[CompiledPlayer, ...]
    assignment: DefensiveAssignment
    line_of_scrimmage_y: float
    qb_start: Tuple[float, float]

    @property
    def players(self) -> Tuple[CompiledPlayer, ...]:
        return self.offense + self.defense


def build_play(
    route_spec: RouteSpec,
    rng: Optional[np.random.Generator] = None,
    config: Optional[SimConfig] = None,
    defense: Optional[DefenseSetup] = None
) -> PlaySetup:
    """
    Compile a full play.

    Args:
        route_spec: Offensive routes
        rng: Random source for defense generation
        config: Simulation configuration
        defense: Reuse an existing defensive setup instead of generating one

    Returns:
        PlaySetup
    """
    cfg = config or DEFAULT_CONFIG
    rng = rng or np.random.default_rng()

    if defense is None:
        defense = generate_defense(route_spec, rng, cfg)

    offense = compile_offense(route_spec)
    compiled_defense = compile_defense(defense, route_spec, cfg)

    # Yardage is measured from the center's spot
    center = route_spec.get("C")
    los_y = center.start.y if center is not None else cfg.field.line_of_scrimmage_y

    qb = route_spec.get("QB")
    qb_start = qb.start.as_tuple() if qb is not None else (cfg.field.width / 2.0, los_y)

    return PlaySetup(
        route_spec=route_spec,
        offense=tuple(offense),
        defense=tuple(compiled_defense),
        assignment=defense.assignment,
        line_of_scrimmage_y=los_y,
        qb_start=qb_start
    )
