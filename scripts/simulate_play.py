#!/usr/bin/env python3
"""
Simulate a passing play.

Runs a built-in play (or a route spec JSON file) against a freshly generated
defense and prints the outcome. With --runs, simulates the play repeatedly
and prints aggregate metrics instead.
"""

import sys
import json
import argparse
from pathlib import Path
import logging

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from routethat_engine.core.models import RouteSpec
from routethat_engine.core.plays import BUILTIN_PLAYS, builtin_route_spec
from routethat_engine.core.validation import find_degenerate_waypoints, validate_route_spec
from routethat_engine.sim.metrics import simulate_many
from routethat_engine.sim.trace import record_play

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("simulate_play")


def load_route_spec(play_name: str, route_file: str = None) -> RouteSpec:
    """Built-in play by name, or a route spec read from a JSON file."""
    if route_file:
        with open(route_file) as f:
            route_spec = RouteSpec.model_validate(json.load(f))
    else:
        route_spec = builtin_route_spec(play_name)

    validate_route_spec(route_spec)
    for issue in find_degenerate_waypoints(route_spec):
        logger.warning(f"{issue.role} waypoint {issue.index}: {issue.reason}")
    return route_spec


def print_ticks(trace):
    """Print ball state and carrier info for every frame."""
    for frame in trace.frames:
        ball = frame.ball
        progress = f" {ball.flight_progress:.2f}" if ball.flight_progress is not None else ""
        print(
            f"  {frame.elapsed_ms:8.1f} ms  {ball.phase.value:<10} {ball.status:<28}"
            f"ball=({ball.position[0]:.1f}, {ball.position[1]:.1f}){progress}"
            f"  yards={frame.yards_gained}"
        )


def simulate(route_spec: RouteSpec, seed: int, speed: float, show_ticks: bool):
    """Run one play and print the result."""
    trace = record_play(route_spec, seed=seed, speed_multiplier=speed)

    print(f"Coverage: {trace.coverage.value}")
    if trace.man_targets:
        pairs = ", ".join(f"{d}->{r}" for d, r in sorted(trace.man_targets.items()))
        print(f"  Man matchups: {pairs}")

    if show_ticks:
        print(f"\nFrames ({len(trace.frames)}):")
        print_ticks(trace)

    print(f"\nTarget:  {trace.target or '-'}")
    print(f"Outcome: {trace.outcome.label if trace.outcome else 'UNFINISHED'}")
    print(f"Yards:   {trace.yards_gained}")
    print(f"Time:    {trace.final.elapsed_ms:.0f} ms")


def simulate_batch(route_spec: RouteSpec, runs: int, seed: int):
    """Run the play repeatedly and print aggregate metrics."""
    metrics = simulate_many(route_spec, runs, seed=seed)
    overall = metrics.overall

    print(f"\nRuns: {overall.num_plays}")
    print(f"  Completion:   {overall.completion_rate:.1%}")
    print(f"  Interception: {overall.interception_rate:.1%}")
    print(f"  Sack:         {overall.sack_rate:.1%}")
    print(f"  Touchdown:    {overall.touchdown_rate:.1%}")
    print(f"  Yards mean/p50/p90: {overall.yards_mean:.1f} / {overall.yards_p50:.1f} / {overall.yards_p90:.1f}")

    print("\nBy coverage:")
    for scheme, sliced in sorted(metrics.by_coverage.items(), key=lambda kv: kv[0].value):
        print(
            f"  {scheme.value:<7} n={sliced.num_plays:<5} "
            f"comp={sliced.completion_rate:.1%} int={sliced.interception_rate:.1%} "
            f"yds={sliced.yards_mean:.1f}"
        )

    if overall.target_counts:
        print("\nTargets:")
        for name, count in sorted(overall.target_counts.items(), key=lambda kv: -kv[1]):
            print(f"  {name:<4} {count}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate a passing play")
    parser.add_argument("--play", default="Verts", choices=sorted(BUILTIN_PLAYS),
                        help="Built-in play to run (default: Verts)")
    parser.add_argument("--route-file", default=None,
                        help="Route spec JSON file to run instead of a built-in play")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (default: 1.0)")
    parser.add_argument("--ticks", action="store_true", help="Print every frame")
    parser.add_argument("--runs", type=int, default=None,
                        help="Simulate this many runs and print aggregate metrics")

    args = parser.parse_args()

    route_spec = load_route_spec(args.play, args.route_file)
    if args.runs:
        simulate_batch(route_spec, args.runs, args.seed)
    else:
        simulate(route_spec, args.seed, args.speed, args.ticks)
