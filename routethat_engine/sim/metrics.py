"""Metrics aggregation across repeated simulations of a play."""

import logging
import numpy as np
from typing import List, Dict, Optional
from dataclasses import dataclass, field
from collections import defaultdict

from ..core.models import CoverageScheme, OutcomeType, Possession, RouteSpec, SimConfig
from .engine import PlayDirector
from .trace import PlayTrace

logger = logging.getLogger("routethat_engine.metrics")


@dataclass
class AggregateMetrics:
    """Aggregate metrics across multiple play simulations."""

    num_plays: int = 0

    # Outcome counts
    outcome_counts: Dict[OutcomeType, int] = field(default_factory=lambda: defaultdict(int))
    completions: int = 0
    interceptions: int = 0
    touchdowns: int = 0

    # Yards
    yards_list: List[int] = field(default_factory=list)

    # Target distribution
    target_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def add_trace(self, trace: PlayTrace):
        """Add a finished play to metrics."""
        outcome = trace.outcome
        if outcome is None:
            logger.warning("Skipping trace without an outcome")
            return

        self.num_plays += 1
        self.outcome_counts[outcome.type] += 1

        if outcome.possession == Possession.COMPLETE:
            self.completions += 1
            if outcome.type == OutcomeType.TOUCHDOWN:
                self.touchdowns += 1
        elif outcome.possession == Possession.INTERCEPTION:
            self.interceptions += 1

        self.yards_list.append(trace.yards_gained)

        if trace.target:
            self.target_counts[trace.target] += 1

    def _rate(self, count: int) -> float:
        if self.num_plays == 0:
            return 0.0
        return count / self.num_plays

    @property
    def completion_rate(self) -> float:
        """Completion percentage."""
        return self._rate(self.completions)

    @property
    def interception_rate(self) -> float:
        """Interception percentage."""
        return self._rate(self.interceptions)

    @property
    def sack_rate(self) -> float:
        """Sack percentage."""
        return self._rate(self.outcome_counts[OutcomeType.SACK])

    @property
    def touchdown_rate(self) -> float:
        """Offensive touchdown percentage."""
        return self._rate(self.touchdowns)

    @property
    def yards_mean(self) -> float:
        """Mean yards per play."""
        if not self.yards_list:
            return 0.0
        return float(np.mean(self.yards_list))

    @property
    def yards_p50(self) -> float:
        """Median yards per play."""
        if not self.yards_list:
            return 0.0
        return float(np.median(self.yards_list))

    @property
    def yards_p90(self) -> float:
        """90th percentile yards."""
        if not self.yards_list:
            return 0.0
        return float(np.percentile(self.yards_list, 90))

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "num_plays": self.num_plays,
            "completion_rate": self.completion_rate,
            "interception_rate": self.interception_rate,
            "sack_rate": self.sack_rate,
            "touchdown_rate": self.touchdown_rate,
            "yards_mean": self.yards_mean,
            "yards_p50": self.yards_p50,
            "yards_p90": self.yards_p90,
            "outcomes": {
                outcome.value: count for outcome, count in self.outcome_counts.items()
            },
            "target_distribution": dict(self.target_counts),
        }


@dataclass
class SlicedMetrics:
    """Metrics sliced by the coverage the defense called."""

    overall: AggregateMetrics = field(default_factory=AggregateMetrics)
    by_coverage: Dict[CoverageScheme, AggregateMetrics] = field(
        default_factory=lambda: defaultdict(AggregateMetrics)
    )

    def add_trace(self, trace: PlayTrace):
        """Add trace to overall and coverage-specific metrics."""
        self.overall.add_trace(trace)
        self.by_coverage[trace.coverage].add_trace(trace)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "overall": self.overall.to_dict(),
            "by_coverage": {
                scheme.value: metrics.to_dict()
                for scheme, metrics in self.by_coverage.items()
            }
        }


def simulate_many(
    route_spec: RouteSpec,
    num_runs: int,
    seed: Optional[int] = None,
    config: Optional[SimConfig] = None
) -> SlicedMetrics:
    """
    Run a play num_runs times, each against a freshly generated defense.

    A single seeded generator drives every run, so the whole batch is
    reproducible for a given seed.
    """
    if num_runs < 1:
        raise ValueError(f"num_runs must be at least 1, got {num_runs}")

    rng = np.random.Generator(np.random.PCG64(seed))
    metrics = SlicedMetrics()
    for _ in range(num_runs):
        director = PlayDirector.from_route_spec(route_spec, config=config, rng=rng)
        final = director.run()
        metrics.add_trace(PlayTrace(
            coverage=director.setup.assignment.scheme,
            man_targets=dict(director.setup.assignment.man_targets),
            frames=[final]
        ))

    logger.info(
        f"Simulated {num_runs} runs: completion {metrics.overall.completion_rate:.0%}, "
        f"mean {metrics.overall.yards_mean:.1f} yards"
    )
    return metrics
