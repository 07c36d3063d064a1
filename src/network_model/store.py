"""
Live, mutable network document.

The store is the only holder of materialized asset state. It exposes two
write paths:

    - ``materialize(moment)``: apply puts/deletes, leave the version tag alone.
      Used by replay, restore and history navigation.
    - ``apply_moment(moment)``: materialize and mint a fresh version tag.
      Used only for genuine new edits.

Both are transactional: changes are staged on a copy and swapped in only
after referential integrity holds, so a failed moment leaves no trace.
"""

import logging
import uuid
from typing import Iterator, Optional

from .models import AssetId, AssetState, Moment, Snapshot
from .topology import Topology

logger = logging.getLogger(__name__)


class ModelIntegrityError(ValueError):
    """A moment would leave the network referentially inconsistent."""

    def __init__(self, asset_id: AssetId, message: str):
        super().__init__(message)
        self.asset_id = asset_id
        self.message = message


def new_state_id() -> str:
    """Mint an opaque model version tag."""
    return uuid.uuid4().hex


class ModelStore:
    """
    The live network document.

    Attributes
    ----------
    _assets : dict[AssetId, AssetState]
        Materialized elements by id, in insertion order.
    _topology : Topology
        Link/node adjacency for the current assets.
    _version : str
        Opaque drift-detection tag. Not a content hash.
    """

    __slots__ = ("_assets", "_topology", "_version")

    def __init__(self, version: Optional[str] = None) -> None:
        self._assets: dict[AssetId, AssetState] = {}
        self._topology = Topology()
        self._version: str = version or new_state_id()

    # ------------------------------ Read API --------------------------------

    def get_asset(self, asset_id: AssetId) -> Optional[AssetState]:
        return self._assets.get(asset_id)

    def asset_map(self) -> dict[AssetId, AssetState]:
        """Return a shallow copy of the current assets."""
        return dict(self._assets)

    def links_for_node(self, node_id: AssetId) -> frozenset[AssetId]:
        return self._topology.links_for_node(node_id)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[AssetState]:
        return iter(list(self._assets.values()))

    def __len__(self) -> int:
        return len(self._assets)

    # ------------------------------ Versioning ------------------------------

    def get_model_version(self) -> str:
        return self._version

    def set_model_version(self, state_id: str) -> None:
        self._version = state_id

    # ------------------------------ Write API -------------------------------

    def materialize(self, moment: Moment) -> Moment:
        """
        Apply a moment without touching the version tag.

        Deletes are processed first, then puts. Deleting an absent id is a
        no-op.

        Args:
            moment: The delta to apply

        Returns:
            The reverse moment that restores the previous state

        Raises:
            ModelIntegrityError: If a link would reference a missing node,
                or a node still referenced by a link would be deleted
        """
        assets = dict(self._assets)
        topology = self._topology.copy()

        reverse_puts: list[AssetState] = []
        reverse_deletes: list[AssetId] = []
        deleted_nodes: list[AssetId] = []

        for asset_id in moment.delete_assets:
            previous = assets.pop(asset_id, None)
            if previous is None:
                continue
            if previous.is_link:
                topology.remove_link(asset_id)
            else:
                deleted_nodes.append(asset_id)
            reverse_puts.append(previous)

        for asset in moment.put_assets:
            previous = assets.get(asset.id)
            if previous is not None:
                reverse_puts.append(previous)
                if previous.is_link:
                    topology.remove_link(asset.id)
            else:
                reverse_deletes.append(asset.id)

            assets[asset.id] = asset
            if asset.is_link:
                start, end = asset.connections
                topology.add_link(asset.id, start, end)

        self._check_integrity(moment, assets, topology, deleted_nodes)

        self._assets = assets
        self._topology = topology

        return Moment(
            note=f"Reverse {moment.note}" if moment.note else "Reverse",
            put_assets=reverse_puts,
            delete_assets=reverse_deletes,
        )

    def apply_moment(self, moment: Moment, state_id: Optional[str] = None) -> Moment:
        """
        Apply a new edit and advance the version tag.

        Args:
            moment: The delta to apply
            state_id: Tag to adopt; a fresh one is minted when omitted

        Returns:
            The reverse moment
        """
        reverse = self.materialize(moment)
        self._version = state_id or new_state_id()
        logger.debug(
            "Applied moment | note=%s puts=%s deletes=%s version=%s",
            moment.note,
            len(moment.put_assets),
            len(moment.delete_assets),
            self._version,
        )
        return reverse

    def capture_model_snapshot(self) -> Snapshot:
        """Materialize every current element into a Snapshot with a fresh tag."""
        return Snapshot(
            state_id=new_state_id(),
            moment=Moment(note="Snapshot", put_assets=list(self._assets.values())),
        )

    def restore_to_base(self, snapshot: Snapshot) -> None:
        """
        Replace the entire document with exactly the snapshot's elements.

        The version tag is left alone; callers set it explicitly.
        """
        previous_assets, previous_topology = self._assets, self._topology
        self._assets = {}
        self._topology = Topology()
        try:
            self.materialize(snapshot.moment)
        except ModelIntegrityError:
            self._assets, self._topology = previous_assets, previous_topology
            raise

    def clear(self) -> None:
        """Remove every element."""
        self._assets = {}
        self._topology = Topology()

    # ------------------------------ Internals -------------------------------

    @staticmethod
    def _check_integrity(
        moment: Moment,
        assets: dict[AssetId, AssetState],
        topology: Topology,
        deleted_nodes: list[AssetId],
    ) -> None:
        for asset in moment.put_assets:
            if not asset.is_link:
                continue
            for node_id in asset.connections:
                node = assets.get(node_id)
                if node is None:
                    raise ModelIntegrityError(
                        asset.id,
                        f"{asset.type.value} '{asset.id}' references missing node '{node_id}'"
                    )
                if node.is_link:
                    raise ModelIntegrityError(
                        asset.id,
                        f"{asset.type.value} '{asset.id}' connects to link '{node_id}'"
                    )

        # Nodes replaced by a link of the same id count as deleted too
        touched = deleted_nodes + [a.id for a in moment.put_assets if a.is_link]
        for node_id in touched:
            if node_id in assets and assets[node_id].is_node:
                continue
            dangling = topology.links_for_node(node_id)
            if dangling:
                raise ModelIntegrityError(
                    node_id,
                    f"node '{node_id}' is still connected to {sorted(dangling)}"
                )
