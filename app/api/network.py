"""
Network editing endpoints.

Edits, history control, import and the cached simulation of the active
branch. Only the live model store is read here, never another branch.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.api.errors import ERROR_RESPONSES, internal_error, reload_required, validation_failed
from app.dependencies import get_session
from src.network_model import AssetState, Moment
from src.scenario_store import (
    EditorSession,
    MapSyncPointer,
    SessionCorruptedError,
    SimulationState,
    ValidationError,
    ValidationIssue,
    validate_moment,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request/Response Models ---

class NetworkStateResponse(BaseModel):
    """Materialized assets of the active branch."""

    model_config = ConfigDict(protected_namespaces=())

    branch_id: str
    model_version: str
    asset_count: int
    assets: list[AssetState]
    map_sync: MapSyncPointer


class HistoryResponse(BaseModel):
    """History position of the active branch after an operation."""

    model_config = ConfigDict(
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "applied": True,
                "branch_id": "main",
                "model_version": "3f2c9a0d6b0e4d0c8a9e7f5b1c2d3e4f",
                "pointer": 1,
                "can_undo": True,
                "can_redo": False,
                "map_sync": {"pointer": -1, "version": 1}
            }
        }
    )

    applied: bool = Field(description="Whether the operation changed anything")
    branch_id: str
    model_version: str
    pointer: int
    can_undo: bool
    can_redo: bool
    map_sync: MapSyncPointer


class ValidateMomentResponse(BaseModel):
    """Dry-run result for a moment."""

    valid: bool
    issues: list[ValidationIssue]


class ImportRequest(BaseModel):
    """Request body for importing a network."""

    name: str = Field(..., min_length=1, max_length=255, description="Source file name")
    assets: list[AssetState] = Field(default_factory=list, description="Every imported element")


class SimulationResponse(BaseModel):
    """Cached simulation of the active branch."""

    simulation: SimulationState
    is_stale: bool = Field(description="Results were computed on another model version")


def _history(session: EditorSession, applied: bool) -> HistoryResponse:
    log = session.moment_log
    return HistoryResponse(
        applied=applied,
        branch_id=session.worktree.active_branch_id,
        model_version=session.store.get_model_version(),
        pointer=log.pointer,
        can_undo=log.next_undo() is not None,
        can_redo=log.next_redo() is not None,
        map_sync=session.map_sync,
    )


# --- Endpoints ---

@router.get("/assets", response_model=NetworkStateResponse)
async def get_assets(session: EditorSession = Depends(get_session)) -> NetworkStateResponse:
    """Return every element of the live document."""
    assets = list(session.store)
    return NetworkStateResponse(
        branch_id=session.worktree.active_branch_id,
        model_version=session.store.get_model_version(),
        asset_count=len(assets),
        assets=assets,
        map_sync=session.map_sync,
    )


@router.post("/moments/validate", response_model=ValidateMomentResponse)
async def validate(
    moment: Moment,
    session: EditorSession = Depends(get_session),
) -> ValidateMomentResponse:
    """Dry-run a moment against the live document without recording it."""
    issues = validate_moment(moment, session.store)
    return ValidateMomentResponse(valid=not issues, issues=issues)


@router.post("/moments", response_model=HistoryResponse, responses=ERROR_RESPONSES)
async def transact(
    moment: Moment,
    session: EditorSession = Depends(get_session),
) -> HistoryResponse:
    """Apply and record an edit on the active branch."""
    logger.info(
        "Transacting moment | note=%s puts=%s deletes=%s",
        moment.note,
        len(moment.put_assets),
        len(moment.delete_assets),
    )
    try:
        session.transact(moment)
    except ValidationError as e:
        logger.error("Validation error: %s", str(e))
        raise validation_failed(e)
    except SessionCorruptedError as e:
        raise reload_required(e)
    return _history(session, applied=True)


@router.post("/undo", response_model=HistoryResponse, responses=ERROR_RESPONSES)
async def undo(session: EditorSession = Depends(get_session)) -> HistoryResponse:
    """Undo the latest edit of the active branch."""
    try:
        applied = session.undo()
    except SessionCorruptedError as e:
        raise reload_required(e)
    except Exception:
        raise internal_error("undo")
    return _history(session, applied=applied)


@router.post("/redo", response_model=HistoryResponse, responses=ERROR_RESPONSES)
async def redo(session: EditorSession = Depends(get_session)) -> HistoryResponse:
    """Redo the next undone edit of the active branch."""
    try:
        applied = session.redo()
    except SessionCorruptedError as e:
        raise reload_required(e)
    except Exception:
        raise internal_error("redo")
    return _history(session, applied=applied)


@router.post("/import", response_model=HistoryResponse, responses=ERROR_RESPONSES)
async def import_network(
    request: ImportRequest,
    session: EditorSession = Depends(get_session),
) -> HistoryResponse:
    """Replace the document with an imported network; resets every scenario."""
    try:
        session.import_network(request.assets, request.name)
    except ValidationError as e:
        logger.error("Validation error: %s", str(e))
        raise validation_failed(e)
    return _history(session, applied=True)


@router.get("/simulation", response_model=SimulationResponse)
async def get_simulation(session: EditorSession = Depends(get_session)) -> SimulationResponse:
    """Return the active branch's cached simulation."""
    return SimulationResponse(simulation=session.simulation, is_stale=session.simulation_is_stale)


@router.put("/simulation", response_model=SimulationResponse)
async def put_simulation(
    simulation: SimulationState,
    session: EditorSession = Depends(get_session),
) -> SimulationResponse:
    """Cache a solver result for the active branch."""
    session.record_simulation(simulation)
    return SimulationResponse(simulation=session.simulation, is_stale=session.simulation_is_stale)
