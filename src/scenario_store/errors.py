"""
Errors raised by the versioned model store.

Switch, undo and redo failures are never retried: a partially replayed
document is inconsistent by construction.
"""

from typing import Optional

from .models import ValidationIssue


class ScenarioStoreError(Exception):
    """Base class for versioned model store errors."""


class ValidationError(ScenarioStoreError):
    """A moment was rejected before reaching the history."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(issue.message for issue in issues)
        super().__init__(f"Invalid moment: {summary}")


class ReplayError(ScenarioStoreError):
    """Applying a recorded delta failed while rebuilding a branch."""

    def __init__(self, version_id: str, delta_index: int, message: str):
        self.version_id = version_id
        self.delta_index = delta_index
        super().__init__(
            f"Replay of version {version_id} failed at delta {delta_index}: {message}"
        )


class BranchNotFoundError(ScenarioStoreError, KeyError):
    """No branch with the given id."""

    def __init__(self, branch_id: str):
        self.branch_id = branch_id
        super().__init__(f"Branch {branch_id} not found")

    def __str__(self) -> str:
        return self.args[0]


class BranchNameError(ScenarioStoreError):
    """Reserved, empty or duplicate branch name, or a forbidden main-branch change."""

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class SessionCorruptedError(ScenarioStoreError):
    """A previous switch failed; the session must be reloaded."""


class DriftWarning(UserWarning):
    """The model version tag does not match the active branch's recorded tag."""
