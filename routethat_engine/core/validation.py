"""Validation functions for route data."""

from typing import List, NamedTuple
from .models import ALL_OFFENSE_PLAYERS, STATIONARY_TYPES, RouteSpec, offense_type_for


class ValidationError(Exception):
    """Custom validation error."""
    pass


class DegenerateWaypoint(NamedTuple):
    role: str
    index: int
    reason: str


def find_degenerate_waypoints(route_spec: RouteSpec) -> List[DegenerateWaypoint]:
    """
    List waypoints the route compiler will have to patch:
    - zero distance from the previous point
    - arrival time not after the previous waypoint

    Unknown and stationary roles are skipped since the engine ignores
    their waypoints.
    """
    found = []
    for role in route_spec:
        if role not in ALL_OFFENSE_PLAYERS or offense_type_for(role) in STATIONARY_TYPES:
            continue

        route = route_spec[role]
        prev_x, prev_y = route.start.as_tuple()
        prev_time = 0.0
        for i, wp in enumerate(route.waypoints):
            if wp.x == prev_x and wp.y == prev_y:
                found.append(DegenerateWaypoint(role, i, "zero distance"))
            elif wp.time_ms <= prev_time:
                found.append(DegenerateWaypoint(role, i, "non-increasing time"))
            prev_x, prev_y, prev_time = wp.x, wp.y, wp.time_ms
    return found


def validate_route_spec(route_spec: RouteSpec) -> None:
    """
    Validate route spec invariants:
    - At least one known offensive role

    Missing roles and degenerate waypoints are tolerated; the engine drops
    or patches them.
    """
    if len(route_spec) == 0:
        raise ValidationError("Route spec has no roles")

    known = [role for role in route_spec if role in ALL_OFFENSE_PLAYERS]
    if not known:
        raise ValidationError(
            f"Route spec has no known offensive roles (expected some of {ALL_OFFENSE_PLAYERS}), "
            f"got {route_spec.roles()}"
        )
