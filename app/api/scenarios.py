"""
Scenario switcher endpoints.

Create, switch, rename and delete branches of the editor session.
Switch failures are fatal for the session and reported generically.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.errors import (
    ERROR_RESPONSES,
    branch_conflict,
    branch_not_found,
    internal_error,
    reload_required,
)
from app.dependencies import get_session
from src.scenario_store import (
    BranchNameError,
    BranchNotFoundError,
    BranchSummary,
    EditorSession,
    SessionCorruptedError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class CreateScenarioRequest(BaseModel):
    """Request body for scenario creation."""

    name: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Scenario name (defaults to 'Scenario N')"
    )


class RenameScenarioRequest(BaseModel):
    """Request body for renaming a scenario."""

    name: str = Field(..., min_length=1, max_length=255, description="New name")


def _summary(session: EditorSession, branch_id: str) -> BranchSummary:
    for summary in session.list_branches():
        if summary.id == branch_id:
            return summary
    raise branch_not_found(BranchNotFoundError(branch_id))


@router.get("", response_model=list[BranchSummary])
async def list_scenarios(session: EditorSession = Depends(get_session)) -> list[BranchSummary]:
    """List branches with their delta counts, main first."""
    return session.list_branches()


@router.post(
    "",
    response_model=BranchSummary,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_scenario(
    request: CreateScenarioRequest,
    session: EditorSession = Depends(get_session),
) -> BranchSummary:
    """Create a scenario from the base snapshot and make it active."""
    try:
        branch = session.create_scenario(request.name)
    except BranchNameError as e:
        raise branch_conflict(e)
    except SessionCorruptedError as e:
        raise reload_required(e)
    except Exception:
        raise internal_error("create_scenario")
    return _summary(session, branch.id)


@router.post("/{branch_id}/switch", response_model=BranchSummary, responses=ERROR_RESPONSES)
async def switch_scenario(
    branch_id: str,
    session: EditorSession = Depends(get_session),
) -> BranchSummary:
    """Switch the live document to another branch."""
    try:
        session.switch_branch(branch_id)
    except BranchNotFoundError as e:
        raise branch_not_found(e)
    except SessionCorruptedError as e:
        raise reload_required(e)
    except Exception:
        raise internal_error("switch_branch")
    return _summary(session, branch_id)


@router.patch("/{branch_id}", response_model=BranchSummary, responses=ERROR_RESPONSES)
async def rename_scenario(
    branch_id: str,
    request: RenameScenarioRequest,
    session: EditorSession = Depends(get_session),
) -> BranchSummary:
    """Rename a scenario."""
    try:
        session.rename_branch(branch_id, request.name)
    except BranchNotFoundError as e:
        raise branch_not_found(e)
    except BranchNameError as e:
        raise branch_conflict(e)
    except SessionCorruptedError as e:
        raise reload_required(e)
    return _summary(session, branch_id)


@router.delete(
    "/{branch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
)
async def delete_scenario(
    branch_id: str,
    session: EditorSession = Depends(get_session),
) -> Response:
    """Delete a scenario; deleting the active one switches to main first."""
    try:
        session.delete_branch(branch_id)
    except BranchNotFoundError as e:
        raise branch_not_found(e)
    except BranchNameError as e:
        raise branch_conflict(e)
    except SessionCorruptedError as e:
        raise reload_required(e)
    except Exception:
        raise internal_error("delete_branch")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
