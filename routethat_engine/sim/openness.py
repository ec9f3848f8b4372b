"""Receiver openness scoring and the quarterback's target choice."""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.models import (
    DEFAULT_CONFIG, ELIGIBLE_TYPES, RECEIVER_PRIORITY, Side, SimConfig
)
from .field import FieldCoordinates, distance
from .motion import CompiledPlayer, resolve_position

logger = logging.getLogger("routethat_engine.openness")


@dataclass(frozen=True)
class ThrowDecision:
    """Chosen target and where the ball is aimed."""
    target: str
    score: float
    target_point: Tuple[float, float]


def openness_score(
    receiver: CompiledPlayer,
    defenders: Sequence[CompiledPlayer],
    throw_time: float,
    config: Optional[SimConfig] = None
) -> float:
    """
    Score how open a receiver will be when the ball arrives.

    Args:
        receiver: Candidate receiver
        defenders: Full defensive roster (linemen are ignored)
        throw_time: Time the ball would be released (ms)
        config: Simulation configuration

    Returns:
        Higher is more open
    """
    cfg = config or DEFAULT_CONFIG
    weights = cfg.openness
    catch_time = throw_time + cfg.timing.flight_time_ms
    catch_point = resolve_position(receiver, catch_time, config=cfg)

    coverage = [d for d in defenders if not d.is_lineman]
    if not coverage:
        return weights.no_defender_score

    separations = np.array([
        distance(catch_point, resolve_position(d, catch_time, config=cfg))
        for d in coverage
    ])
    min_sep = float(separations.min())
    avg_sep = float(separations.mean())

    penalty = 0.0
    if min_sep < weights.tight_threshold:
        penalty = (weights.tight_threshold - min_sep) * weights.tight_penalty_per_unit

    score = min_sep * weights.min_weight + avg_sep * weights.avg_weight - penalty

    field = FieldCoordinates(cfg.field)
    if field.is_in_scoring_endzone(catch_point[1]) and min_sep < weights.endzone_crowd_threshold:
        score -= weights.endzone_penalty

    return score


def priority_bonus(name: str, config: Optional[SimConfig] = None) -> float:
    """Linear bonus from WR1 (max) down to RB (zero); unknown names get none."""
    cfg = config or DEFAULT_CONFIG
    if name not in RECEIVER_PRIORITY:
        return 0.0
    max_bonus = cfg.openness.max_priority_bonus
    step = max_bonus / max(1, len(RECEIVER_PRIORITY) - 1)
    return max_bonus - RECEIVER_PRIORITY.index(name) * step


def eligible_receivers(players: Sequence[CompiledPlayer]) -> list:
    return [
        p for p in players
        if p.side == Side.OFFENSE and p.player_type in ELIGIBLE_TYPES
    ]


def choose_target(
    players: Sequence[CompiledPlayer],
    decision_time: float,
    config: Optional[SimConfig] = None
) -> Optional[ThrowDecision]:
    """
    Pick the receiver with the best openness + priority score.

    Returns None when no eligible receiver exists. Ties keep the receiver
    evaluated first.
    """
    cfg = config or DEFAULT_CONFIG
    receivers = eligible_receivers(players)
    if not receivers:
        return None

    defenders = [p for p in players if p.side == Side.DEFENSE]

    best_target = None
    best_score = -np.inf
    for receiver in receivers:
        score = openness_score(receiver, defenders, decision_time, cfg) + priority_bonus(receiver.name, cfg)
        logger.debug(f"{receiver.name} scored {score:.1f} at {decision_time:.0f}ms")
        if score > best_score:
            best_score = score
            best_target = receiver

    if best_target is None:
        return None

    target_point = resolve_position(
        best_target, decision_time + cfg.timing.flight_time_ms, config=cfg
    )
    return ThrowDecision(target=best_target.name, score=float(best_score), target_point=target_point)
