"""
Map renderer synchronization marker.

The renderer applies small deltas incrementally; once too many assets
changed since its last sync, or history was rewritten, it must reload
everything from the live store.
"""

from .models import MapSyncPointer
from .moment_log import MomentLog

MAX_CHANGES_BEFORE_MAP_SYNC = 500


def exceeds_max_changes_since_last_sync(
    log: MomentLog,
    last_sync_pointer: int,
    threshold: int = MAX_CHANGES_BEFORE_MAP_SYNC,
) -> bool:
    """Whether more than ``threshold`` assets changed after the last sync."""
    edited = sum(moment.size for moment in log.get_deltas(last_sync_pointer))
    return edited > threshold


def compute_sync_pointer(
    current: MapSyncPointer,
    log: MomentLog,
    force: bool = False,
    threshold: int = MAX_CHANGES_BEFORE_MAP_SYNC,
) -> MapSyncPointer:
    """
    Advance the sync marker when a full map reload is needed.

    Args:
        current: The renderer's last sync marker
        log: The active moment log
        force: Reload regardless of the change count
        threshold: Changed-asset count that triggers a reload

    Returns:
        ``current`` unchanged, or a new marker at the log's pointer
    """
    if force or exceeds_max_changes_since_last_sync(log, current.pointer, threshold):
        return MapSyncPointer(pointer=log.pointer, version=current.version + 1)
    return current
