"""
Pydantic models for branch metadata, history entries and display.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from src.network_model import AssetId, Moment


MAIN_BRANCH_ID = "main"
MAIN_BRANCH_NAME = "main"


class ValidationIssue(BaseModel):
    """Validation issue details."""

    asset_id: Optional[AssetId] = Field(default=None, description="Offending asset (if any)")
    message: str = Field(description="Error message")


class LogEntry(BaseModel):
    """
    One recorded step of a Moment Log.

    ``reverse`` is the exact inverse of ``forward`` against the state it was
    applied to. Snapshot seeds carry no reverse and cannot be undone.
    """

    forward: Moment
    reverse: Optional[Moment] = None
    state_id: str = Field(description="Model version tag after this step")
    is_snapshot: bool = False


class SimulationStatus(str, Enum):
    """Solver run status."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILURE = "failure"


class SimulationState(BaseModel):
    """Cached solver result, keyed by the model version it was computed on."""

    model_config = ConfigDict(protected_namespaces=())

    status: SimulationStatus = SimulationStatus.IDLE
    model_version: Optional[str] = Field(
        default=None,
        description="Model version tag the results belong to"
    )
    summary: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque solver output"
    )


class Branch(BaseModel):
    """
    A named, independently undo-able timeline.

    Holds Version ids only; the Worktree owns the Versions. Each branch has
    a single Version: ``draft_version_id`` is a marker that names that same
    Version while it carries edits, not a second Version layered on top.
    """

    id: str
    name: str
    number: int = Field(default=0, description="Scenario ordinal (0 for main)")
    head_revision_id: str = Field(description="Version id of the committed head")
    draft_version_id: Optional[str] = Field(
        default=None,
        description="Set to the head version id while it has edits beyond its origin"
    )

    @property
    def is_main(self) -> bool:
        return self.id == MAIN_BRANCH_ID

    @property
    def has_draft(self) -> bool:
        return self.draft_version_id is not None


class DeltaCounts(BaseModel):
    """Applied delta statistics for display."""

    deltas: int = 0
    puts: int = 0
    deletes: int = 0


class BranchSummary(BaseModel):
    """Branch metadata as shown by the scenario switcher."""

    id: str
    name: str
    is_main: bool
    is_active: bool
    has_draft: bool
    pointer: int
    counts: DeltaCounts


class MapSyncPointer(BaseModel):
    """
    Marker telling the map renderer when to resynchronize.

    ``version`` bumps whenever incremental map updates are not enough.
    """

    pointer: int = -1
    version: int = 0
