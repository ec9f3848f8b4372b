"""API route handlers."""

import logging
import traceback
import uuid
from typing import List
from fastapi import APIRouter, HTTPException, status

from . import schemas
from ..core.models import RouteSpec
from ..core.playbook import playbook
from ..core.validation import ValidationError, find_degenerate_waypoints, validate_route_spec
from ..sim.metrics import simulate_many
from ..sim.trace import record_play, serialize_trace

logger = logging.getLogger("routethat_engine.api")

router = APIRouter()


def _run_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


# ============================================================================
# Health
# ============================================================================

@router.get("/health", response_model=schemas.HealthResponse)
async def health_check():
    """Health check endpoint."""
    return schemas.HealthResponse(ok=True, version="0.1.0")


# ============================================================================
# Playbook CRUD
# ============================================================================

def _play_to_response(play) -> schemas.PlayResponse:
    return schemas.PlayResponse(name=play.name, route_spec=play.route_spec.to_wire())


@router.get("/plays", response_model=List[schemas.PlayResponse])
async def list_plays():
    """List all saved plays."""
    return [_play_to_response(play) for play in playbook.load()]


@router.get("/plays/{name}", response_model=schemas.PlayResponse)
async def get_play(name: str):
    """Get a specific play."""
    try:
        return _play_to_response(playbook.get(name))
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Play {name} not found"
        )


@router.put("/plays/{name}", response_model=schemas.PlayResponse)
async def save_play(name: str, request: schemas.SavePlayRequest):
    """Create or replace a play."""
    try:
        play = playbook.save(name, request.route_spec)
    except (ValidationError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return _play_to_response(play)


@router.delete("/plays/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_play(name: str):
    """Delete a play."""
    if not playbook.delete(name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Play {name} not found"
        )


# ============================================================================
# Simulation
# ============================================================================

def _resolve_route_spec(request: schemas.PlaySource) -> RouteSpec:
    """Look up or validate the play a request refers to."""
    if request.play_name is not None:
        try:
            return playbook.get(request.play_name).route_spec
        except KeyError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Play {request.play_name} not found"
            )

    try:
        validate_route_spec(request.route_spec)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    for issue in find_degenerate_waypoints(request.route_spec):
        logger.warning(f"{issue.role} waypoint {issue.index}: {issue.reason}")
    return request.route_spec


@router.post("/simulate", response_model=schemas.SimulateResponse)
async def simulate(request: schemas.SimulateRequest):
    """Run one play to completion."""
    route_spec = _resolve_route_spec(request)

    try:
        trace = record_play(
            route_spec,
            seed=request.seed,
            speed_multiplier=request.speed_multiplier
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        # Log full traceback server-side
        logger.error(f"Simulation error: {traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Simulation failed: {str(e)}"
        )

    data = serialize_trace(trace, include_frames=request.include_ticks)
    return schemas.SimulateResponse(
        run_id=_run_id("run"),
        coverage=data["coverage"],
        man_targets=data["man_targets"],
        outcome=data["outcome"],
        yards_gained=data["yards_gained"],
        target=data["target"],
        elapsed_ms=data["elapsed_ms"],
        ticks=data.get("frames")
    )


@router.post("/simulate/batch", response_model=schemas.BatchResponse)
async def simulate_batch(request: schemas.BatchRequest):
    """Run one play many times and aggregate outcomes."""
    route_spec = _resolve_route_spec(request)

    try:
        metrics = simulate_many(route_spec, request.num_runs, seed=request.seed)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Batch simulation error: {traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Batch simulation failed: {str(e)}"
        )

    return schemas.BatchResponse(
        run_id=_run_id("batch"),
        num_runs=request.num_runs,
        metrics=metrics.to_dict()
    )
