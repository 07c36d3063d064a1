"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app import __version__
from app.api import health, network, scenarios, sessions
from app.config import settings
from app.database import init_db
from src.network_model import ModelStore
from src.scenario_store import EditorSession

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(
    title="Hydraulic Scenario Editor",
    description="Versioned model store for hydraulic network scenarios",
    version=__version__,
    lifespan=lifespan,
)

app.state.editor_session = EditorSession(
    ModelStore(),
    map_sync_threshold=settings.map_sync_threshold,
)

app.include_router(health.router, tags=["health"])
app.include_router(scenarios.router, prefix="/scenarios", tags=["scenarios"])
app.include_router(network.router, prefix="/network", tags=["network"])
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
