"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import router
from ..core.playbook import PlayStore, playbook
from ..core.plays import BUILTIN_PLAYS, builtin_route_spec

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("routethat_engine")

# Create FastAPI app
app = FastAPI(
    title="RouteThat Engine",
    description="Passing-play simulation engine: routes, coverage and ball flight",
    version="0.1.0"
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router)


def load_builtin_plays(store: PlayStore = playbook) -> int:
    """Save the built-in plays that the store does not already hold."""
    existing = {play.name for play in store.load()}
    loaded = 0
    for name in BUILTIN_PLAYS:
        if name in existing:
            continue
        store.save(name, builtin_route_spec(name))
        loaded += 1

    logger.info(f"Built-in plays loaded: {loaded} new, {store.count()} total")
    return loaded


@app.on_event("startup")
async def startup_event():
    """Startup tasks."""
    logger.info("RouteThat Engine starting up...")
    load_builtin_plays()
    logger.info("API documentation available at http://localhost:8000/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown tasks."""
    logger.info("RouteThat Engine shutting down...")
