"""Canonical data models for RouteThat Engine."""

import math
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
from pydantic import BaseModel, Field, RootModel, field_validator, model_validator


# ============================================================================
# Enums
# ============================================================================

class Side(str, Enum):
    OFFENSE = "OFFENSE"
    DEFENSE = "DEFENSE"


class PlayerType(str, Enum):
    # Offense
    OL = "OL"
    QB = "QB"
    RB = "RB"
    TE = "TE"
    RECEIVER = "RECEIVER"

    # Defense
    DL = "DL"
    LB = "LB"
    CB = "CB"
    S = "S"


class CoverageScheme(str, Enum):
    MAN = "MAN"
    COVER2 = "COVER2"
    COVER3 = "COVER3"


class DefensiveRole(str, Enum):
    DEEP = "DEEP"
    UNDERNEATH = "UNDERNEATH"
    LINE = "LINE"


class BallPhase(str, Enum):
    PRE_THROW = "PRE_THROW"
    IN_FLIGHT = "IN_FLIGHT"
    POSSESSED = "POSSESSED"
    TERMINAL = "TERMINAL"


class OutcomeType(str, Enum):
    SACK = "SACK"
    INCOMPLETE_NO_TARGET = "INCOMPLETE_NO_TARGET"
    INCOMPLETE = "INCOMPLETE"
    TOUCHDOWN = "TOUCHDOWN"
    TACKLED = "TACKLED"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"


class Possession(str, Enum):
    """Who holds the ball after it arrives."""
    COMPLETE = "COMPLETE"
    INTERCEPTION = "INTERCEPTION"


# Types that never leave their initial spot
STATIONARY_TYPES = frozenset({PlayerType.OL, PlayerType.QB, PlayerType.DL})

# Types the quarterback may target
ELIGIBLE_TYPES = frozenset({PlayerType.RECEIVER, PlayerType.TE, PlayerType.RB})


# ============================================================================
# Role names
# ============================================================================

LINE_PLAYERS = ["LT", "LG", "C", "RG", "RT"]
EDITABLE_PLAYERS = ["QB", "RB", "TE", "WR1", "WR2", "WR3"]
ALL_OFFENSE_PLAYERS = LINE_PLAYERS + EDITABLE_PLAYERS

# Slot order for man assignments and the QB priority bonus
RECEIVER_PRIORITY = ["WR1", "WR2", "WR3", "TE", "RB"]

DEFENSIVE_LINE_NAMES = ["DE1", "DT1", "DT2", "DE2"]
SECONDARY_NAMES = ["D1", "D2", "D3", "D4", "D5", "D6", "D7"]
SECONDARY_TYPES = [PlayerType.LB, PlayerType.CB, PlayerType.S]


# ============================================================================
# Configuration
# ============================================================================

class FieldConfig(BaseModel):
    """Field dimensions in field-plane units (pixels)."""
    width: float = Field(default=600.0, gt=0.0)
    height: float = Field(default=800.0, gt=0.0)
    endzone_height: float = Field(default=50.0, ge=0.0)
    px_per_yard: float = Field(default=7.0, gt=0.0)
    boundary_margin_yards: float = Field(default=5.0, ge=0.0)
    line_of_scrimmage_y: float = 540.0

    @property
    def top_endzone_line(self) -> float:
        """Goal line the offense attacks (smaller y is downfield)."""
        return self.endzone_height

    @property
    def front_boundary(self) -> float:
        return self.endzone_height - self.boundary_margin_yards * self.px_per_yard

    @property
    def back_boundary(self) -> float:
        return self.height + self.boundary_margin_yards * self.px_per_yard

    @property
    def defensive_line_y(self) -> float:
        """Row the defensive line sets up on, just across the LOS."""
        return self.line_of_scrimmage_y - 2 * self.px_per_yard


class TimingConfig(BaseModel):
    """Simulated-time constants (ms)."""
    base_tick_ms: float = Field(default=16.67, gt=0.0)
    decision_delay_ms: float = Field(default=3000.0, ge=0.0)
    sack_time_ms: float = Field(default=8000.0, gt=0.0)
    flight_time_ms: float = Field(default=1200.0, gt=0.0)
    play_ceiling_ms: float = Field(default=15000.0, gt=0.0)
    get_off_ms: float = Field(default=500.0, ge=0.0)
    arc_height: float = Field(default=30.0, ge=0.0)


class RadiusConfig(BaseModel):
    """Contact thresholds (field units)."""
    catch: float = Field(default=15.0, ge=0.0)
    interception: float = Field(default=10.0, ge=0.0)
    deflection: float = Field(default=5.0, ge=0.0)
    tackle: float = Field(default=15.0, ge=0.0)
    interception_min_progress: float = Field(default=0.7, ge=0.0, le=1.0)


class SpeedConfig(BaseModel):
    """Movement speeds (field units per ms)."""
    standard: float = Field(default=0.055, gt=0.0)
    pursuit_factor: float = Field(default=1.15, gt=0.0)

    @property
    def pursuit(self) -> float:
        return self.standard * self.pursuit_factor


class DefenseConfig(BaseModel):
    """Defensive formation generation parameters."""
    line_count: int = Field(default=4, ge=0, le=4)
    secondary_count: int = Field(default=7, ge=0, le=7)
    line_spread: float = Field(default=200.0, ge=0.0)
    default_center_x: float = 280.0
    secondary_depths_yards: List[float] = Field(default_factory=lambda: [5.0, 10.0, 20.0], min_length=1)
    sideline_inset: float = Field(default=30.0, ge=0.0)
    man_offset_min: float = Field(default=5.0, ge=0.0)
    man_offset_max: float = Field(default=15.0, ge=0.0)
    line_rush_depth: float = 10.0
    deep_drop_past_goal: float = 10.0
    intermediate_drop_yards: float = 20.0
    deep_patrol: float = 80.0
    underneath_patrol: float = 40.0
    patrol_inset: float = 20.0
    cover2_deep: List[str] = Field(default_factory=lambda: ["D1", "D2"])
    cover3_deep: List[str] = Field(default_factory=lambda: ["D1", "D2", "D3"])

    @model_validator(mode='after')
    def validate_offsets(self):
        """Ensure the man-coverage offset range is ordered."""
        if self.man_offset_max < self.man_offset_min:
            raise ValueError("man_offset_max must be >= man_offset_min")
        return self


class OpennessConfig(BaseModel):
    """Receiver openness heuristic weights."""
    min_weight: float = 3.0
    avg_weight: float = 1.0
    tight_threshold: float = 15.0
    tight_penalty_per_unit: float = 50.0
    endzone_crowd_threshold: float = 30.0
    endzone_penalty: float = 50.0
    no_defender_score: float = 1000.0
    max_priority_bonus: float = 200.0


class SimConfig(BaseModel):
    """Complete simulation configuration."""
    field: FieldConfig = Field(default_factory=FieldConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    radii: RadiusConfig = Field(default_factory=RadiusConfig)
    speed: SpeedConfig = Field(default_factory=SpeedConfig)
    defense: DefenseConfig = Field(default_factory=DefenseConfig)
    openness: OpennessConfig = Field(default_factory=OpennessConfig)


DEFAULT_CONFIG = SimConfig()


# ============================================================================
# Routes
# ============================================================================

def _check_finite(*values: float) -> None:
    for v in values:
        if not math.isfinite(v):
            raise ValueError(f"Coordinate must be finite, got {v}")


class Point2D(BaseModel):
    """Field-plane coordinate."""
    x: float
    y: float

    @model_validator(mode='before')
    @classmethod
    def accept_pair(cls, data):
        """Accept the `[x, y]` wire form."""
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError(f"Point needs exactly 2 components, got {len(data)}")
            return {"x": data[0], "y": data[1]}
        return data

    @model_validator(mode='after')
    def validate_finite(self):
        _check_finite(self.x, self.y)
        return self

    def as_tuple(self) -> Tuple[float, float]:
        return self.x, self.y


class Waypoint(BaseModel):
    """Route waypoint with absolute arrival time."""
    x: float
    y: float
    time_ms: float = Field(ge=0.0)

    @model_validator(mode='before')
    @classmethod
    def accept_triple(cls, data):
        """Accept the `[x, y, time_ms]` wire form."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError(f"Waypoint needs [x, y, time_ms], got {len(data)} components")
            return {"x": data[0], "y": data[1], "time_ms": data[2]}
        return data

    @model_validator(mode='after')
    def validate_finite(self):
        _check_finite(self.x, self.y, self.time_ms)
        return self

    @property
    def point(self) -> Tuple[float, float]:
        return self.x, self.y


class PlayerRoute(BaseModel):
    """Start spot and ordered waypoints for one role."""
    start: Point2D
    waypoints: List[Waypoint] = Field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        return self.waypoints[-1].time_ms if self.waypoints else 0.0

    def to_wire(self) -> Dict:
        return {
            "start": [self.start.x, self.start.y],
            "waypoints": [[wp.x, wp.y, wp.time_ms] for wp in self.waypoints],
        }


class RouteSpec(RootModel[Dict[str, PlayerRoute]]):
    """Mapping of role name -> PlayerRoute."""

    def __getitem__(self, role: str) -> PlayerRoute:
        return self.root[role]

    def __contains__(self, role: str) -> bool:
        return role in self.root

    def __iter__(self) -> Iterator[str]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def get(self, role: str) -> Optional[PlayerRoute]:
        return self.root.get(role)

    def roles(self) -> List[str]:
        return list(self.root.keys())

    def to_wire(self) -> Dict[str, Dict]:
        """Serialize to the `{role: {start: [x, y], waypoints: [[x, y, t]]}}` form."""
        return {role: route.to_wire() for role, route in self.root.items()}


class SavedPlay(BaseModel):
    """Named RouteSpec snapshot."""
    name: str = Field(min_length=1, max_length=128)
    route_spec: RouteSpec

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Play name cannot be blank")
        return v


def offense_type_for(name: str) -> PlayerType:
    """Player type implied by an offensive role name."""
    if name == "QB":
        return PlayerType.QB
    if name == "RB":
        return PlayerType.RB
    if name == "TE":
        return PlayerType.TE
    if name in LINE_PLAYERS:
        return PlayerType.OL
    return PlayerType.RECEIVER
