"""
Branch/Version registry.

The Worktree owns every Version in one mapping; Branches reference Versions
by id. Every Version is interpreted relative to the shared base Snapshot,
never relative to another branch.
"""

import uuid
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from src.network_model import Moment, Snapshot

from .errors import BranchNameError, BranchNotFoundError
from .models import (
    Branch,
    DeltaCounts,
    MAIN_BRANCH_ID,
    MAIN_BRANCH_NAME,
    SimulationState,
)
from .moment_log import MomentLog


def new_entity_id() -> str:
    return uuid.uuid4().hex[:12]


class Version(BaseModel):
    """
    One branch's own delta sequence.

    ``base_pointer`` and ``base_rewind`` locate the version's origin relative
    to the base snapshot. For scenarios the origin is the snapshot itself
    (``base_pointer == -1``, no rewind). Main's log predates the snapshot:
    entries up to ``base_pointer`` are already folded into it, and
    ``base_rewind`` holds reverse moments for history that was undone below
    the divergence point and then overwritten.
    """

    model_config = ConfigDict(protected_namespaces=())

    id: str = Field(default_factory=new_entity_id)
    log: MomentLog = Field(default_factory=MomentLog)
    model_version: Optional[str] = Field(
        default=None,
        description="Recorded model version tag"
    )
    base_state_id: Optional[str] = Field(
        default=None,
        description="State id of the snapshot this version was seeded from"
    )
    base_pointer: int = -1
    base_rewind: list[Moment] = Field(default_factory=list)
    simulation: SimulationState = Field(default_factory=SimulationState)

    @property
    def deltas(self) -> list[Moment]:
        """Applied deltas of this version, in recorded order."""
        return self.log.get_deltas()

    def replay_moments(self) -> list[Moment]:
        """
        Moments that rebuild this version on top of the base snapshot.

        Returns:
            Moments to apply in order after ``restore_to_base``
        """
        moments = list(self.base_rewind)
        pointer = self.log.pointer
        if pointer >= self.base_pointer:
            moments.extend(self.log.get_deltas(self.base_pointer))
        else:
            for index in range(self.base_pointer, pointer, -1):
                reverse = self.log.entries[index].reverse
                if reverse is None:
                    raise ValueError(
                        f"Version {self.id} cannot rewind snapshot entry {index}"
                    )
                moments.append(reverse)
        return moments

    def fold_truncated_history(self) -> None:
        """
        Preserve the path back to the base before an append truncates it.

        Must run before appending to the log when the pointer sits below
        ``base_pointer``.
        """
        pointer = self.log.pointer
        if pointer >= self.base_pointer:
            return
        for index in range(self.base_pointer, pointer, -1):
            reverse = self.log.entries[index].reverse
            if reverse is None:
                raise ValueError(
                    f"Version {self.id} cannot rewind snapshot entry {index}"
                )
            self.base_rewind.append(reverse)
        self.base_pointer = pointer

    def delta_counts(self) -> DeltaCounts:
        """Applied, non-snapshot delta statistics."""
        counts = DeltaCounts()
        applied = self.log.entries[:self.log.pointer + 1]
        for entry in applied:
            if entry.is_snapshot:
                continue
            counts.deltas += 1
            counts.puts += len(entry.forward.put_assets)
            counts.deletes += len(entry.forward.delete_assets)
        return counts

    @property
    def has_edits(self) -> bool:
        """Whether the version carries edits beyond its origin."""
        return bool(self.base_rewind) or self.log.pointer != self.base_pointer


class Worktree(BaseModel):
    """
    Registry of branches, versions and the shared base snapshot.

    Attributes:
        branches: Branch id -> Branch
        versions: Version id -> Version
        active_branch_id: Branch currently live in the model store
        last_active_branch_id: Branch active before the latest switch
        base_snapshot: Common ancestor of every branch (set once)
        highest_scenario_number: Ordinal of the newest scenario
    """

    branches: dict[str, Branch] = Field(default_factory=dict)
    versions: dict[str, Version] = Field(default_factory=dict)
    active_branch_id: str = MAIN_BRANCH_ID
    last_active_branch_id: str = MAIN_BRANCH_ID
    base_snapshot: Optional[Snapshot] = None
    highest_scenario_number: int = 0

    @classmethod
    def fresh(cls, log: MomentLog, model_version: str) -> "Worktree":
        """Create a worktree holding only main, bound to ``log``."""
        version = Version(log=log, model_version=model_version, base_pointer=log.pointer)
        main = Branch(
            id=MAIN_BRANCH_ID,
            name=MAIN_BRANCH_NAME,
            head_revision_id=version.id,
        )
        return cls(
            branches={main.id: main},
            versions={version.id: version},
        )

    # ------------------------------ Lookups ---------------------------------

    def get_branch(self, branch_id: str) -> Branch:
        """
        Raises:
            BranchNotFoundError: If no such branch exists
        """
        branch = self.branches.get(branch_id)
        if branch is None:
            raise BranchNotFoundError(branch_id)
        return branch

    def version_for(self, branch_id: str) -> Version:
        """Return the version carrying the branch's current edits."""
        branch = self.get_branch(branch_id)
        return self.versions[branch.draft_version_id or branch.head_revision_id]

    @property
    def active_branch(self) -> Branch:
        return self.get_branch(self.active_branch_id)

    @property
    def active_version(self) -> Version:
        return self.version_for(self.active_branch_id)

    @property
    def main_branch(self) -> Branch:
        return self.get_branch(MAIN_BRANCH_ID)

    @property
    def has_scenarios(self) -> bool:
        return len(self.branches) > 1

    def branch_by_name(self, name: str) -> Optional[Branch]:
        wanted = name.strip().casefold()
        for branch in self.branches.values():
            if branch.name.casefold() == wanted:
                return branch
        return None

    # ------------------------------ Metadata --------------------------------

    def check_branch_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        """
        Validate and normalize a branch name.

        Returns:
            The trimmed name

        Raises:
            BranchNameError: If empty, reserved or already taken
        """
        cleaned = name.strip()
        if not cleaned:
            raise BranchNameError("Branch name cannot be empty", name)
        if cleaned.casefold() == MAIN_BRANCH_NAME:
            raise BranchNameError(f"'{MAIN_BRANCH_NAME}' is reserved", name)
        existing = self.branch_by_name(cleaned)
        if existing is not None and existing.id != exclude_id:
            raise BranchNameError(f"Branch '{cleaned}' already exists", name)
        return cleaned

    def add_branch(self, branch: Branch, version: Version) -> None:
        self.versions[version.id] = version
        self.branches[branch.id] = branch

    def rename_branch(self, branch_id: str, name: str) -> Branch:
        branch = self.get_branch(branch_id)
        if branch.is_main:
            raise BranchNameError("The main branch cannot be renamed", name)
        branch.name = self.check_branch_name(name, exclude_id=branch_id)
        return branch

    def remove_branch(self, branch_id: str) -> Branch:
        """
        Drop an inactive branch and its versions.

        Raises:
            BranchNameError: For main or the active branch
        """
        branch = self.get_branch(branch_id)
        if branch.is_main:
            raise BranchNameError("The main branch cannot be deleted")
        if branch_id == self.active_branch_id:
            raise BranchNameError("The active branch cannot be deleted")

        del self.branches[branch_id]
        self.versions.pop(branch.head_revision_id, None)
        if branch.draft_version_id:
            self.versions.pop(branch.draft_version_id, None)
        if self.last_active_branch_id == branch_id:
            self.last_active_branch_id = MAIN_BRANCH_ID
        return branch

    def mark_draft(self, branch_id: str) -> None:
        """Point ``draft_version_id`` at the branch's Version while it has edits, else clear it."""
        branch = self.get_branch(branch_id)
        version = self.versions[branch.draft_version_id or branch.head_revision_id]
        branch.draft_version_id = version.id if version.has_edits else None
