"""Randomized defensive formation generation."""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.models import (
    DEFAULT_CONFIG, DEFENSIVE_LINE_NAMES, RECEIVER_PRIORITY, SECONDARY_NAMES,
    SECONDARY_TYPES, CoverageScheme, DefensiveRole, PlayerType, RouteSpec,
    Side, SimConfig
)
from .motion import CompiledPlayer

logger = logging.getLogger("routethat_engine.defense")

COVERAGE_SCHEMES = [CoverageScheme.MAN, CoverageScheme.COVER2, CoverageScheme.COVER3]


@dataclass(frozen=True)
class DefensiveAssignment:
    """Coverage call for one play; fixed once generated."""
    scheme: CoverageScheme
    roles: Dict[str, DefensiveRole] = field(default_factory=dict)
    man_targets: Dict[str, str] = field(default_factory=dict)

    def role_of(self, defender_name: str) -> Optional[DefensiveRole]:
        return self.roles.get(defender_name)

    def target_of(self, defender_name: str) -> Optional[str]:
        return self.man_targets.get(defender_name)


@dataclass(frozen=True)
class DefenseSetup:
    """Defensive roster (uncompiled) plus its assignment."""
    players: Tuple[CompiledPlayer, ...]
    assignment: DefensiveAssignment


def _deep_defenders(scheme: CoverageScheme, config: SimConfig) -> List[str]:
    if scheme == CoverageScheme.COVER2:
        return list(config.defense.cover2_deep)
    if scheme == CoverageScheme.COVER3:
        return list(config.defense.cover3_deep)
    return []


def _trail_spot(
    receiver_start: Tuple[float, float],
    rng: np.random.Generator,
    config: SimConfig
) -> Tuple[float, float]:
    """Line up at the man-coverage trail offset, inside and deeper than the receiver."""
    d = config.defense
    rx, ry = receiver_start
    magnitude = rng.uniform(d.man_offset_min, d.man_offset_max)
    angle = rng.uniform(0.0, np.pi / 2)
    inside = 1.0 if rx < config.field.width / 2 else -1.0
    return (
        float(rx + inside * magnitude * np.cos(angle)),
        float(ry - magnitude * np.sin(angle))
    )


def generate_defense(
    route_spec: RouteSpec,
    rng: Optional[np.random.Generator] = None,
    config: Optional[SimConfig] = None,
    scheme: Optional[CoverageScheme] = None
) -> DefenseSetup:
    """
    Generate a defensive roster and coverage call for a formation.

    Args:
        route_spec: Offensive routes (only start spots are used)
        rng: Random source
        config: Simulation configuration
        scheme: Force a coverage scheme instead of drawing one

    Returns:
        DefenseSetup

    Line: a row centered on the center's x just across the LOS.
    Secondary: types drawn uniformly, seeded at tiered depths. Under man
    coverage defenders are paired with receivers in slot order and line up
    at their trail offset (5-15 units, inside and deeper); under zone their
    x is random.
    """
    cfg = config or DEFAULT_CONFIG
    d = cfg.defense
    f = cfg.field
    rng = rng or np.random.default_rng()

    drawn = COVERAGE_SCHEMES[int(rng.integers(len(COVERAGE_SCHEMES)))]
    scheme = scheme or drawn

    receivers = [
        (name, route_spec[name].start.as_tuple())
        for name in RECEIVER_PRIORITY
        if name in route_spec
    ]
    center = route_spec.get("C")
    center_x = center.start.x if center is not None else d.default_center_x
    line_y = f.defensive_line_y

    players: List[CompiledPlayer] = []
    roles: Dict[str, DefensiveRole] = {}

    # 1. Defensive line
    spacing = d.line_spread / max(1, d.line_count - 1)
    for i in range(d.line_count):
        x = center_x + (i - (d.line_count - 1) / 2.0) * spacing
        name = DEFENSIVE_LINE_NAMES[i]
        players.append(CompiledPlayer(
            name=name,
            side=Side.DEFENSE,
            player_type=PlayerType.DL,
            start=(float(round(x)), line_y),
            defensive_role=DefensiveRole.LINE
        ))
        roles[name] = DefensiveRole.LINE

    # 2. Secondary
    secondary_names = SECONDARY_NAMES[:d.secondary_count]
    types = [SECONDARY_TYPES[int(rng.integers(len(SECONDARY_TYPES)))] for _ in secondary_names]

    man_targets: Dict[str, str] = {}
    if scheme == CoverageScheme.MAN:
        for name, (receiver_name, _) in zip(secondary_names, receivers):
            man_targets[name] = receiver_name
    receiver_starts = dict(receivers)

    deep = set(_deep_defenders(scheme, cfg))
    depths = [line_y - yards * f.px_per_yard for yards in d.secondary_depths_yards]

    for i, name in enumerate(secondary_names):
        y = depths[i % len(depths)]
        x = float(round(rng.random() * (f.width - 2 * d.sideline_inset) + d.sideline_inset))

        target = man_targets.get(name)
        if target is not None:
            x, y = _trail_spot(receiver_starts[target], rng, cfg)

        role = DefensiveRole.DEEP if name in deep else DefensiveRole.UNDERNEATH
        roles[name] = role
        players.append(CompiledPlayer(
            name=name,
            side=Side.DEFENSE,
            player_type=types[i],
            start=(x, y),
            assignment=target,
            defensive_role=role
        ))

    logger.info(
        f"Generated {scheme.value} defense: {d.line_count} linemen, "
        f"{len(secondary_names)} secondary, {len(man_targets)} man assignments"
    )

    return DefenseSetup(
        players=tuple(players),
        assignment=DefensiveAssignment(scheme=scheme, roles=roles, man_targets=man_targets)
    )
