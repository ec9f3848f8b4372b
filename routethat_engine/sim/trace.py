"""Trace collection and serialization."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from ..core.models import CoverageScheme, RouteSpec, SimConfig
from .ball import Outcome
from .engine import PlayDirector, TickSnapshot


@dataclass
class PlayTrace:
    """Complete trace of a simulation run."""
    coverage: CoverageScheme
    man_targets: Dict[str, str]
    frames: List[TickSnapshot] = field(default_factory=list)

    @property
    def final(self) -> Optional[TickSnapshot]:
        return self.frames[-1] if self.frames else None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self.final.outcome if self.final else None

    @property
    def yards_gained(self) -> int:
        return self.final.yards_gained if self.final else 0

    @property
    def target(self) -> Optional[str]:
        return self.final.target if self.final else None


def record_play(
    route_spec: RouteSpec,
    seed: Optional[int] = None,
    speed_multiplier: float = 1.0,
    config: Optional[SimConfig] = None,
    rng: Optional[np.random.Generator] = None
) -> PlayTrace:
    """Simulate a play against a fresh defense and keep every frame."""
    director = PlayDirector.from_route_spec(
        route_spec, seed=seed, speed_multiplier=speed_multiplier, config=config, rng=rng
    )
    return PlayTrace(
        coverage=director.setup.assignment.scheme,
        man_targets=dict(director.setup.assignment.man_targets),
        frames=director.record()
    )


def serialize_trace(trace: PlayTrace, include_frames: bool = False) -> dict:
    """Serialize trace to JSON-friendly dict."""
    final = trace.final
    data = {
        "coverage": trace.coverage.value,
        "man_targets": dict(trace.man_targets),
        "outcome": final.to_dict()["outcome"] if final else None,
        "yards_gained": trace.yards_gained,
        "target": trace.target,
        "elapsed_ms": final.elapsed_ms if final else 0.0,
        "num_frames": len(trace.frames),
    }
    if include_frames:
        data["frames"] = [frame.to_dict() for frame in trace.frames]
    return data
