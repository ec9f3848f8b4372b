"""Field coordinate system and utilities."""

import numpy as np
from typing import Tuple
from ..core.models import FieldConfig


class FieldCoordinates:
    """
    Coordinate system utilities.
    Origin at the top-left corner of the field.
    x+ toward the right sideline
    y- toward the goal line the offense attacks (downfield)
    """

    def __init__(self, config: FieldConfig):
        self.config = config
        self.left = 0.0
        self.right = config.width
        self.front = config.front_boundary
        self.back = config.back_boundary

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        """Clip position to field + boundary-margin limits."""
        x = float(np.clip(x, self.left, self.right))
        y = float(np.clip(y, self.front, self.back))
        return x, y

    def is_out_of_bounds(self, x: float, y: float) -> bool:
        """A clamped position resting on a limit counts as out."""
        return (x <= self.left or x >= self.right or
                y <= self.front or y >= self.back)

    def is_in_scoring_endzone(self, y: float) -> bool:
        """Check if y has crossed the scoring goal line (either carrier)."""
        return y <= self.config.top_endzone_line

    def yards_from(self, line_y: float, y: float) -> int:
        """Whole yards gained moving from line_y to y."""
        return int(round((line_y - y) / self.config.px_per_yard))


def distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    """Euclidean distance between two (x, y) points."""
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    return float(np.sqrt(dx * dx + dy * dy))


def dist_to_segment(
    p: Tuple[float, float],
    a: Tuple[float, float],
    b: Tuple[float, float]
) -> float:
    """Distance from p to the closest point on segment a-b."""
    x, y = p
    x1, y1 = a
    x2, y2 = b
    cx = x2 - x1
    cy = y2 - y1
    len_sq = cx * cx + cy * cy

    # Degenerate segment: distance to the single point
    if len_sq == 0:
        return distance(p, a)

    param = ((x - x1) * cx + (y - y1) * cy) / len_sq
    param = float(np.clip(param, 0.0, 1.0))
    return distance(p, (x1 + param * cx, y1 + param * cy))
