"""API request/response schemas."""

from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, model_validator

from ..core.models import RouteSpec


# ============================================================================
# Health
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = True
    version: str = "0.1.0"


# ============================================================================
# Playbook
# ============================================================================

class SavePlayRequest(BaseModel):
    """Create or replace a play by name."""
    route_spec: RouteSpec


class PlayResponse(BaseModel):
    """A saved play in wire form."""
    name: str
    route_spec: Dict[str, Any]


# ============================================================================
# Simulation
# ============================================================================

class PlaySource(BaseModel):
    """Either a saved play name or an inline route spec, not both."""
    play_name: Optional[str] = None
    route_spec: Optional[RouteSpec] = None

    @model_validator(mode="after")
    def exactly_one_source(self):
        if (self.play_name is None) == (self.route_spec is None):
            raise ValueError("Provide exactly one of play_name or route_spec")
        return self


class SimulateRequest(PlaySource):
    """Simulate one play."""
    seed: Optional[int] = None
    speed_multiplier: float = Field(default=1.0, gt=0.0, le=16.0)
    include_ticks: bool = False


class SimulateResponse(BaseModel):
    """Simulate play response."""
    run_id: str
    coverage: str
    man_targets: Dict[str, str] = Field(default_factory=dict)
    outcome: Optional[Dict[str, Any]] = None
    yards_gained: int = 0
    target: Optional[str] = None
    elapsed_ms: float = 0.0
    ticks: Optional[List[Dict[str, Any]]] = None


class BatchRequest(PlaySource):
    """Simulate one play many times against fresh defenses."""
    num_runs: int = Field(default=100, ge=1, le=10000)
    seed: Optional[int] = None


class BatchResponse(BaseModel):
    """Batch simulation response."""
    run_id: str
    num_runs: int
    metrics: Dict[str, Any]
