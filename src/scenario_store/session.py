"""
Editor session.

Binds one Worktree to one ModelStore and exposes every operation the editor
performs: edits, undo/redo, import, and the scenario lifecycle. The session
is the explicit (worktree, store) pair; nothing is kept in module globals.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Iterator, Optional

from src.network_model import (
    AssetState,
    ModelIntegrityError,
    ModelStore,
    Moment,
    Snapshot,
    new_state_id,
)

from .errors import (
    BranchNameError,
    DriftWarning,
    SessionCorruptedError,
    ValidationError,
)
from .map_sync import MAX_CHANGES_BEFORE_MAP_SYNC, compute_sync_pointer
from .models import (
    Branch,
    BranchSummary,
    DeltaCounts,
    LogEntry,
    MAIN_BRANCH_ID,
    MapSyncPointer,
    SimulationState,
    ValidationIssue,
)
from .moment_log import MomentLog
from .switching import activate_branch, freeze_active_branch, switch_branch
from .validation import validate_moment, validate_unique_ids
from .worktree import Version, Worktree, new_entity_id

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Single-writer session over a network document.

    Attributes
    ----------
    store : ModelStore
        The live document.
    worktree : Worktree
        Branches, versions and the shared base snapshot.
    moment_log : MomentLog
        History of the active branch (same object as its Version's log).
    simulation : SimulationState
        Cached solver result for the active branch.
    map_sync : MapSyncPointer
        Renderer resync marker.
    corrupted : bool
        Set when a switch failed; mutating operations refuse to run.
    """

    def __init__(
        self,
        store: Optional[ModelStore] = None,
        worktree: Optional[Worktree] = None,
        map_sync_threshold: int = MAX_CHANGES_BEFORE_MAP_SYNC,
    ) -> None:
        self.store = store if store is not None else ModelStore()
        if worktree is None:
            state_id = self.store.get_model_version()
            worktree = Worktree.fresh(MomentLog(base_state_id=state_id), state_id)
        self.worktree = worktree

        version = worktree.active_version
        self.moment_log: MomentLog = version.log
        self.simulation: SimulationState = version.simulation
        self.map_sync_threshold = map_sync_threshold
        self.map_sync = MapSyncPointer(pointer=self.moment_log.pointer)
        self.corrupted = False

    # ------------------------------ Guards ----------------------------------

    def _ensure_usable(self) -> None:
        if self.corrupted:
            raise SessionCorruptedError(
                "A previous branch switch failed; reload the document"
            )

    @contextmanager
    def fatal_on_error(self, operation: str) -> Iterator[None]:
        """Flag the session as corrupted if the wrapped block raises."""
        try:
            yield
        except Exception:
            self.corrupted = True
            logger.exception("Fatal %s failure | branch=%s", operation, self.worktree.active_branch_id)
            raise

    def check_drift(self, context: str) -> bool:
        """
        Compare the store's version tag with the active log's recorded tag.

        Returns:
            True if they differ (a DriftWarning is emitted)
        """
        expected = self.moment_log.current_state_id
        actual = self.store.get_model_version()
        if expected is None or expected == actual:
            return False
        logger.warning(
            "Model version drift | context=%s branch=%s expected=%s actual=%s",
            context,
            self.worktree.active_branch_id,
            expected,
            actual,
        )
        warnings.warn(
            f"Model version {actual} does not match recorded {expected} ({context})",
            DriftWarning,
            stacklevel=3,
        )
        return True

    # ------------------------------ Edits -----------------------------------

    def transact(self, moment: Moment) -> LogEntry:
        """
        Apply a new edit to the active branch and record it.

        Args:
            moment: The edit

        Returns:
            The recorded log entry

        Raises:
            ValidationError: If the moment is malformed or would break the network
        """
        self._ensure_usable()

        issues = validate_moment(moment)
        if issues:
            raise ValidationError(issues)

        self.check_drift("transact")
        is_truncating_history = self.moment_log.next_redo() is not None

        try:
            reverse = self.store.apply_moment(moment)
        except ModelIntegrityError as e:
            raise ValidationError([ValidationIssue(asset_id=e.asset_id, message=e.message)]) from e

        self.worktree.active_version.fold_truncated_history()
        self.moment_log.append(moment, reverse, self.store.get_model_version())
        self.worktree.mark_draft(self.worktree.active_branch_id)
        self._sync_map(force=is_truncating_history)

        logger.debug(
            "Recorded moment | branch=%s note=%s pointer=%s",
            self.worktree.active_branch_id,
            moment.note,
            self.moment_log.pointer,
        )
        return self.moment_log.entries[self.moment_log.pointer]

    def undo(self) -> bool:
        """
        Revert the latest applied edit of the active branch.

        Returns:
            False at the start of history (or at an import snapshot)
        """
        self._ensure_usable()
        entry = self.moment_log.next_undo()
        if entry is None:
            return False

        self.check_drift("undo")
        self.store.materialize(entry.reverse)
        self.moment_log.undo()
        self._after_history_move()
        return True

    def redo(self) -> bool:
        """
        Re-apply the next undone edit of the active branch.

        Returns:
            False when already at the latest edit
        """
        self._ensure_usable()
        entry = self.moment_log.next_redo()
        if entry is None:
            return False

        self.check_drift("redo")
        self.store.materialize(entry.forward)
        self.moment_log.redo()
        self._after_history_move()
        return True

    def import_network(self, assets: list[AssetState], name: str) -> Moment:
        """
        Replace the document with an imported network.

        Resets history and every scenario: the imported moment becomes the
        single snapshot step of a fresh main branch.

        Raises:
            ValidationError: If the imported assets are inconsistent
        """
        moment = Moment(note=f"Import {name}", put_assets=assets)
        issues = validate_unique_ids(moment)
        if issues:
            raise ValidationError(issues)

        state_id = new_state_id()
        try:
            self.store.restore_to_base(Snapshot(state_id=state_id, moment=moment))
        except ModelIntegrityError as e:
            raise ValidationError([ValidationIssue(asset_id=e.asset_id, message=e.message)]) from e
        self.store.set_model_version(state_id)

        log = MomentLog()
        log.set_snapshot(moment, state_id)
        self.worktree = Worktree.fresh(log, state_id)
        self.moment_log = log
        self.simulation = SimulationState()
        self.map_sync = MapSyncPointer(pointer=log.pointer, version=self.map_sync.version + 1)
        self.corrupted = False

        logger.info("Imported network | name=%s assets=%s", name, len(assets))
        return moment

    # ------------------------------ Scenarios -------------------------------

    def create_scenario(self, name: Optional[str] = None) -> Branch:
        """
        Create a scenario seeded from the base snapshot and make it active.

        The base snapshot is captured from main the first time this runs.

        Args:
            name: Branch name (defaults to "Scenario N")

        Raises:
            BranchNameError: If the name is empty, reserved or taken
        """
        self._ensure_usable()
        worktree = self.worktree
        number = worktree.highest_scenario_number + 1
        cleaned = worktree.check_branch_name(name if name is not None else f"Scenario {number}")

        if worktree.base_snapshot is None:
            worktree.base_snapshot = self.store.capture_model_snapshot()
            worktree.active_version.base_pointer = self.moment_log.pointer
            logger.info(
                "Captured base snapshot | state_id=%s assets=%s",
                worktree.base_snapshot.state_id,
                len(worktree.base_snapshot.moment.put_assets),
            )
        snapshot = worktree.base_snapshot

        with self.fatal_on_error("create scenario"):
            freeze_active_branch(self)

            version = Version(
                log=MomentLog(base_state_id=snapshot.state_id),
                model_version=snapshot.state_id,
                base_state_id=snapshot.state_id,
            )
            branch = Branch(
                id=new_entity_id(),
                name=cleaned,
                number=number,
                head_revision_id=version.id,
            )
            worktree.add_branch(branch, version)
            worktree.highest_scenario_number = number

            self.store.restore_to_base(snapshot)
            activate_branch(self, branch.id)

        logger.info("Created scenario | id=%s name=%s", branch.id, branch.name)
        return branch

    def switch_branch(self, branch_id: str) -> Branch:
        self._ensure_usable()
        return switch_branch(self, branch_id)

    def rename_branch(self, branch_id: str, name: str) -> Branch:
        self._ensure_usable()
        branch = self.worktree.rename_branch(branch_id, name)
        logger.info("Renamed branch | id=%s name=%s", branch_id, branch.name)
        return branch

    def delete_branch(self, branch_id: str) -> Branch:
        """
        Delete a scenario. Deleting the active one switches to main first.

        Raises:
            BranchNotFoundError: If no such branch exists
            BranchNameError: For the main branch
        """
        self._ensure_usable()
        branch = self.worktree.get_branch(branch_id)
        if branch.is_main:
            raise BranchNameError("The main branch cannot be deleted")

        if branch_id == self.worktree.active_branch_id:
            self.switch_branch(MAIN_BRANCH_ID)

        removed = self.worktree.remove_branch(branch_id)
        logger.info("Deleted branch | id=%s name=%s", removed.id, removed.name)
        return removed

    # ------------------------------ Queries ---------------------------------

    def delta_counts(self, branch_id: str) -> DeltaCounts:
        return self.worktree.version_for(branch_id).delta_counts()

    def list_branches(self) -> list[BranchSummary]:
        """Branch metadata for the scenario switcher, main first."""
        worktree = self.worktree
        branches = sorted(worktree.branches.values(), key=lambda b: (not b.is_main, b.number))
        summaries: list[BranchSummary] = []
        for branch in branches:
            version = worktree.version_for(branch.id)
            summaries.append(BranchSummary(
                id=branch.id,
                name=branch.name,
                is_main=branch.is_main,
                is_active=branch.id == worktree.active_branch_id,
                has_draft=branch.has_draft,
                pointer=version.log.pointer,
                counts=version.delta_counts(),
            ))
        return summaries

    # ------------------------------ Simulation ------------------------------

    def record_simulation(self, simulation: SimulationState) -> None:
        """Cache a solver result for the active branch."""
        self.simulation = simulation
        logger.debug(
            "Recorded simulation | branch=%s status=%s version=%s",
            self.worktree.active_branch_id,
            simulation.status.value,
            simulation.model_version,
        )

    @property
    def simulation_is_stale(self) -> bool:
        return self.simulation.model_version != self.store.get_model_version()

    # ------------------------------ Internals -------------------------------

    def _after_history_move(self) -> None:
        state_id = self.moment_log.current_state_id
        if state_id is not None:
            self.store.set_model_version(state_id)
        self.worktree.mark_draft(self.worktree.active_branch_id)
        self._sync_map()

    def _sync_map(self, force: bool = False) -> None:
        self.map_sync = compute_sync_pointer(
            self.map_sync,
            self.moment_log,
            force=force,
            threshold=self.map_sync_threshold,
        )
