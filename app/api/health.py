"""
Health check endpoints.

Readiness covers the saved-session database and the live editor session:
a session flagged by a failed branch switch must be reloaded before it
accepts edits again.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app import __version__
from app.database import get_db

router = APIRouter()


class LivenessResponse(BaseModel):
    """Liveness response."""

    status: Literal["ok"]
    version: str


class ReadinessResponse(BaseModel):
    """Readiness of the editor: storage plus the live session."""

    status: Literal["ok", "degraded"]
    version: str
    database: Literal["connected", "disconnected"]
    session: Literal["ok", "reload_required"] = Field(
        description="'reload_required' after a failed branch switch"
    )
    active_branch_id: str


@router.get("/health", response_model=LivenessResponse)
async def health_check() -> LivenessResponse:
    """Liveness only; touches neither storage nor the session."""
    return LivenessResponse(status="ok", version=__version__)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> ReadinessResponse:
    """Report saved-session storage and editor session state."""
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except Exception:
        database = "disconnected"

    editor = request.app.state.editor_session
    session = "reload_required" if editor.corrupted else "ok"
    healthy = database == "connected" and session == "ok"

    return ReadinessResponse(
        status="ok" if healthy else "degraded",
        version=__version__,
        database=database,
        session=session,
        active_branch_id=editor.worktree.active_branch_id,
    )
