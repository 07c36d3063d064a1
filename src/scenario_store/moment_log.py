"""
Append-only history of Moments with an undo/redo pointer.

The log is a pure, dumb history: it never looks at the live document.
Callers apply ``next_undo().reverse`` / ``next_redo().forward`` to the
store and then move the pointer.
"""

import uuid
from typing import Callable, Optional
from pydantic import BaseModel, Field

from src.network_model import Moment

from .models import LogEntry


def _new_log_id() -> str:
    return uuid.uuid4().hex


class MomentLog(BaseModel):
    """
    Ordered history of one timeline.

    Attributes:
        id: Stable identity; changes only on a fresh load/import
        entries: Recorded steps, oldest first
        pointer: Index of the last applied entry (-1 = nothing applied)
        base_state_id: Model version tag when nothing is applied
    """

    id: str = Field(default_factory=_new_log_id)
    entries: list[LogEntry] = Field(default_factory=list)
    pointer: int = -1
    base_state_id: Optional[str] = None

    # ------------------------------ Recording -------------------------------

    def append(
        self,
        forward: Moment,
        reverse: Optional[Moment] = None,
        state_id: Optional[str] = None,
    ) -> None:
        """
        Record a new step, discarding any undone tail.

        Args:
            forward: The applied moment
            reverse: Its inverse (None makes the step non-undoable)
            state_id: Model version tag after the step
        """
        del self.entries[self.pointer + 1:]
        self.entries.append(LogEntry(
            forward=forward,
            reverse=reverse,
            state_id=state_id or self.current_state_id or "",
        ))
        self.pointer = len(self.entries) - 1

    def set_snapshot(self, moment: Moment, state_id: str) -> None:
        """Reset to a single full-state snapshot step (pointer 0)."""
        self.id = _new_log_id()
        self.entries = [LogEntry(forward=moment, state_id=state_id, is_snapshot=True)]
        self.pointer = 0
        self.base_state_id = state_id

    # ------------------------------ Navigation ------------------------------

    def undo(self) -> bool:
        if self.pointer < 0:
            return False
        self.pointer -= 1
        return True

    def redo(self) -> bool:
        if self.pointer >= len(self.entries) - 1:
            return False
        self.pointer += 1
        return True

    def next_undo(self) -> Optional[LogEntry]:
        """Entry an undo would revert, or None if nothing can be undone."""
        if self.pointer < 0:
            return None
        entry = self.entries[self.pointer]
        if entry.reverse is None:
            return None
        return entry

    def next_redo(self) -> Optional[LogEntry]:
        """Entry a redo would re-apply, or None at the latest step."""
        if self.pointer >= len(self.entries) - 1:
            return None
        return self.entries[self.pointer + 1]

    # ------------------------------ Queries ---------------------------------

    @property
    def current_state_id(self) -> Optional[str]:
        """Model version tag of the state at the pointer."""
        if self.pointer < 0:
            return self.base_state_id
        return self.entries[self.pointer].state_id

    @property
    def deltas(self) -> list[Moment]:
        """Every recorded moment, including the undone tail."""
        return [entry.forward for entry in self.entries]

    def last(self) -> Optional[Moment]:
        if self.pointer < 0:
            return None
        return self.entries[self.pointer].forward

    def get_deltas(self, from_pointer: int = -1) -> list[Moment]:
        """Moments strictly after ``from_pointer`` up to the pointer."""
        start = max(from_pointer + 1, 0)
        return [entry.forward for entry in self.entries[start:self.pointer + 1]]

    def fetch_up_to_and_including(self, index: int) -> list[Moment]:
        end = min(index, self.pointer)
        return [entry.forward for entry in self.entries[:end + 1]]

    def fetch_after(self, index: int) -> list[Moment]:
        return self.get_deltas(index)

    def search_last(self, predicate: Callable[[Moment], bool]) -> int:
        """Index of the last applied moment matching ``predicate``, or -1."""
        for index in range(self.pointer, -1, -1):
            if predicate(self.entries[index].forward):
                return index
        return -1

    def copy(self) -> "MomentLog":
        return self.model_copy(update={"entries": list(self.entries)})

    def __len__(self) -> int:
        return len(self.entries)
