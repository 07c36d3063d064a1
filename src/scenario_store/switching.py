"""
Branch switching protocol.

Switching from the active branch A to a target branch B is strictly
ordered:

    1. Freeze A: write A's live log (pointer included), version tag and
       simulation cache back onto A's Version.
    2. Restore to base: reset the store to the base snapshot.
    3. Replay B: materialize B's deltas in recorded order.
    4. Finalize B: set B's version tag, rebind the live log to B's log,
       mark B active, then swap the simulation cache.

A switch that raises partway leaves the document undefined; the session
is flagged and must be reloaded.
"""

import logging
from typing import TYPE_CHECKING

from src.network_model import ModelIntegrityError, ModelStore, Snapshot

from .errors import ReplayError, ScenarioStoreError
from .map_sync import compute_sync_pointer
from .models import Branch
from .worktree import Version

if TYPE_CHECKING:
    from .session import EditorSession

logger = logging.getLogger(__name__)


def freeze_active_branch(session: "EditorSession") -> Version:
    """
    Persist the live timeline onto the active branch's Version.

    Returns:
        The updated Version
    """
    worktree = session.worktree
    version = worktree.active_version
    version.log = session.moment_log
    version.model_version = session.store.get_model_version()
    version.simulation = session.simulation
    worktree.mark_draft(worktree.active_branch_id)
    return version


def rebuild_version(store: ModelStore, base_snapshot: Snapshot, version: Version) -> None:
    """
    Restore the store to the base snapshot and replay a version onto it.

    Replay uses the materialize path, so the version tag is not touched.

    Raises:
        ReplayError: If any delta fails to apply
    """
    store.restore_to_base(base_snapshot)

    try:
        moments = version.replay_moments()
    except ValueError as e:
        raise ReplayError(version.id, -1, str(e)) from e

    for index, moment in enumerate(moments):
        try:
            store.materialize(moment)
        except ModelIntegrityError as e:
            raise ReplayError(version.id, index, e.message) from e

    logger.debug(
        "Replayed version | version=%s deltas=%s assets=%s",
        version.id,
        len(moments),
        len(store),
    )


def activate_branch(session: "EditorSession", branch_id: str) -> Branch:
    """
    Make an already materialized branch the live one.

    Must run after replay: the recorded tag overwrites whatever the store
    holds.
    """
    worktree = session.worktree
    version = worktree.version_for(branch_id)

    state_id = version.model_version or version.log.current_state_id
    if state_id is not None:
        session.store.set_model_version(state_id)
    session.moment_log = version.log

    if worktree.active_branch_id != branch_id:
        worktree.last_active_branch_id = worktree.active_branch_id
    worktree.active_branch_id = branch_id

    session.simulation = version.simulation
    session.map_sync = compute_sync_pointer(
        session.map_sync,
        version.log,
        force=True,
        threshold=session.map_sync_threshold,
    )
    return worktree.get_branch(branch_id)


def switch_branch(session: "EditorSession", target_id: str) -> Branch:
    """
    Switch the live document to another branch.

    Args:
        session: The editor session
        target_id: Branch to activate

    Returns:
        The now active branch

    Raises:
        BranchNotFoundError: If the target does not exist (nothing changes)
        ReplayError: If rebuilding the target fails (session is flagged)
    """
    worktree = session.worktree
    target = worktree.get_branch(target_id)
    source_id = worktree.active_branch_id

    if target_id == source_id:
        return target

    if worktree.base_snapshot is None:
        raise ScenarioStoreError("Cannot switch branches without a base snapshot")

    logger.info("Switching branch | from=%s to=%s", source_id, target_id)

    with session.fatal_on_error("switch"):
        freeze_active_branch(session)
        rebuild_version(session.store, worktree.base_snapshot, worktree.version_for(target_id))
        activate_branch(session, target_id)

    logger.info(
        "Switched branch | active=%s pointer=%s version=%s",
        target_id,
        session.moment_log.pointer,
        session.store.get_model_version(),
    )
    return target
