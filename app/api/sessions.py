"""
Saved session endpoints.

Persist the editor session's worktree layout to the database and load it
back, reproducing every branch's undo/redo position.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app import storage
from app.api.errors import ERROR_RESPONSES, internal_error
from app.config import settings
from app.database import get_db
from app.dependencies import get_session, set_session
from src.scenario_store import (
    BranchSummary,
    EditorSession,
    ScenarioStoreError,
    dump_layout,
    load_session,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class SaveSessionRequest(BaseModel):
    """Request body for saving the current session."""

    name: str = Field(..., min_length=1, max_length=255, description="Save name")


class SavedSessionResponse(BaseModel):
    """Metadata of a saved session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    active_branch_id: str
    branch_count: int
    created_at: datetime


class SavedLayoutResponse(SavedSessionResponse):
    """Saved session including its full layout."""

    layout: dict[str, Any]


def _not_found(saved_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "session_not_found", "message": f"Saved session {saved_id} not found"},
    )


@router.post(
    "",
    response_model=SavedSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_session(
    request: SaveSessionRequest,
    session: EditorSession = Depends(get_session),
    db: AsyncSession = Depends(get_db),
) -> SavedSessionResponse:
    """Save the current worktree layout."""
    layout = dump_layout(session)
    row = await storage.save_layout(db, request.name, layout)
    logger.info("Saved session | id=%s name=%s branches=%s", row.id, row.name, row.branch_count)
    return SavedSessionResponse.model_validate(row)


@router.get("", response_model=list[SavedSessionResponse])
async def list_sessions(db: AsyncSession = Depends(get_db)) -> list[SavedSessionResponse]:
    """List saved sessions, newest first."""
    rows = await storage.list_saved_layouts(db)
    return [SavedSessionResponse.model_validate(row) for row in rows]


@router.get("/{saved_id}", response_model=SavedLayoutResponse, responses=ERROR_RESPONSES)
async def get_saved_session(saved_id: str, db: AsyncSession = Depends(get_db)) -> SavedLayoutResponse:
    """Return a saved session with its layout."""
    row = await storage.get_saved_layout(db, saved_id)
    if row is None:
        raise _not_found(saved_id)
    return SavedLayoutResponse.model_validate(row)


@router.post("/{saved_id}/load", response_model=list[BranchSummary], responses=ERROR_RESPONSES)
async def load_saved_session(
    saved_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> list[BranchSummary]:
    """Replace the editor session with a saved one."""
    row = await storage.get_saved_layout(db, saved_id)
    if row is None:
        raise _not_found(saved_id)

    try:
        session = load_session(row.layout, map_sync_threshold=settings.map_sync_threshold)
    except ScenarioStoreError:
        raise internal_error("load_session")

    set_session(request, session)
    logger.info("Loaded session | id=%s active=%s", saved_id, session.worktree.active_branch_id)
    return session.list_branches()
