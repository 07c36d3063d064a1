"""
Hydraulic Network Model Store

Live, transactional document of network elements (junctions, reservoirs,
tanks, pipes, pumps, valves) driven by atomic Moments.
"""

__version__ = "0.1.0"

from .models import (
    AssetId,
    AssetType,
    AssetState,
    Moment,
    Snapshot,
)
from .store import (
    ModelStore,
    ModelIntegrityError,
    new_state_id,
)
from .topology import Topology

__all__ = [
    "__version__",
    "AssetId",
    "AssetType",
    "AssetState",
    "Moment",
    "Snapshot",
    "ModelStore",
    "ModelIntegrityError",
    "new_state_id",
    "Topology",
]
