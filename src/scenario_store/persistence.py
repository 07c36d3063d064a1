"""
Persisted worktree layout.

Layout: ``{branches, versions, active_branch_id, base_snapshot, ...}`` with
stable ids, so reloading reproduces every branch's undo/redo position.
"""

import logging
from typing import Any, Optional
from pydantic import BaseModel, Field

from src.network_model import ModelIntegrityError, ModelStore, Snapshot

from .errors import ReplayError, ScenarioStoreError
from .map_sync import MAX_CHANGES_BEFORE_MAP_SYNC
from .models import Branch, MAIN_BRANCH_ID
from .session import EditorSession
from .switching import freeze_active_branch, rebuild_version
from .worktree import Version, Worktree

logger = logging.getLogger(__name__)


class WorktreeLayout(BaseModel):
    """Serializable form of a worktree."""

    branches: list[Branch] = Field(default_factory=list)
    versions: list[Version] = Field(default_factory=list)
    active_branch_id: str = MAIN_BRANCH_ID
    last_active_branch_id: str = MAIN_BRANCH_ID
    base_snapshot: Optional[Snapshot] = None
    highest_scenario_number: int = 0


def dump_layout(session: EditorSession) -> dict[str, Any]:
    """
    Freeze the active branch and serialize the worktree.

    Returns:
        JSON-compatible layout dict
    """
    freeze_active_branch(session)
    worktree = session.worktree
    layout = WorktreeLayout(
        branches=list(worktree.branches.values()),
        versions=list(worktree.versions.values()),
        active_branch_id=worktree.active_branch_id,
        last_active_branch_id=worktree.last_active_branch_id,
        base_snapshot=worktree.base_snapshot,
        highest_scenario_number=worktree.highest_scenario_number,
    )
    return layout.model_dump(mode="json")


def build_worktree(layout: WorktreeLayout) -> Worktree:
    """
    Rebuild the worktree registry from a layout.

    Raises:
        ScenarioStoreError: If the layout is internally inconsistent
    """
    worktree = Worktree(
        branches={branch.id: branch for branch in layout.branches},
        versions={version.id: version for version in layout.versions},
        active_branch_id=layout.active_branch_id,
        last_active_branch_id=layout.last_active_branch_id,
        base_snapshot=layout.base_snapshot,
        highest_scenario_number=layout.highest_scenario_number,
    )

    if MAIN_BRANCH_ID not in worktree.branches:
        raise ScenarioStoreError("Layout has no main branch")
    if layout.active_branch_id not in worktree.branches:
        raise ScenarioStoreError(f"Active branch {layout.active_branch_id} is not in the layout")

    for branch in worktree.branches.values():
        for version_id in (branch.head_revision_id, branch.draft_version_id):
            if version_id is not None and version_id not in worktree.versions:
                raise ScenarioStoreError(
                    f"Branch {branch.id} references missing version {version_id}"
                )

    if worktree.has_scenarios and worktree.base_snapshot is None:
        raise ScenarioStoreError("Layout has scenarios but no base snapshot")

    return worktree


def load_session(
    data: dict[str, Any],
    store: Optional[ModelStore] = None,
    map_sync_threshold: int = MAX_CHANGES_BEFORE_MAP_SYNC,
) -> EditorSession:
    """
    Recreate an editor session from a persisted layout.

    The store is rebuilt from the base snapshot plus the active branch's
    deltas, or from main's full history when no base exists yet.

    Args:
        data: Layout produced by ``dump_layout``
        store: Store to load into (a new one when omitted)
        map_sync_threshold: Renderer resync threshold

    Raises:
        ScenarioStoreError: If the layout is inconsistent
        ReplayError: If the active branch cannot be rebuilt
    """
    worktree = build_worktree(WorktreeLayout.model_validate(data))
    store = store if store is not None else ModelStore()
    version = worktree.active_version

    if worktree.base_snapshot is not None:
        rebuild_version(store, worktree.base_snapshot, version)
    else:
        store.clear()
        for index, moment in enumerate(version.deltas):
            try:
                store.materialize(moment)
            except ModelIntegrityError as e:
                raise ReplayError(version.id, index, e.message) from e

    state_id = version.model_version or version.log.current_state_id
    if state_id is not None:
        store.set_model_version(state_id)

    logger.info(
        "Loaded worktree | branches=%s active=%s assets=%s",
        len(worktree.branches),
        worktree.active_branch_id,
        len(store),
    )
    return EditorSession(store, worktree, map_sync_threshold=map_sync_threshold)
