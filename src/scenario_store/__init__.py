"""
Versioned Model Store

Named, independently undo-able scenario timelines over one shared network
document: a Moment Log per branch, a Worktree of branches and versions, and
a snapshot-and-replay switching protocol.
"""

__version__ = "0.1.0"

from .errors import (
    BranchNameError,
    BranchNotFoundError,
    DriftWarning,
    ReplayError,
    ScenarioStoreError,
    SessionCorruptedError,
    ValidationError,
)
from .models import (
    Branch,
    BranchSummary,
    DeltaCounts,
    LogEntry,
    MAIN_BRANCH_ID,
    MapSyncPointer,
    SimulationState,
    SimulationStatus,
    ValidationIssue,
)
from .moment_log import MomentLog
from .worktree import Version, Worktree
from .session import EditorSession
from .persistence import dump_layout, load_session
from .validation import validate_moment

__all__ = [
    "__version__",
    "BranchNameError",
    "BranchNotFoundError",
    "DriftWarning",
    "ReplayError",
    "ScenarioStoreError",
    "SessionCorruptedError",
    "ValidationError",
    "Branch",
    "BranchSummary",
    "DeltaCounts",
    "LogEntry",
    "MAIN_BRANCH_ID",
    "MapSyncPointer",
    "SimulationState",
    "SimulationStatus",
    "ValidationIssue",
    "MomentLog",
    "Version",
    "Worktree",
    "EditorSession",
    "dump_layout",
    "load_session",
    "validate_moment",
]
