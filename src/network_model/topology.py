"""
Link/node adjacency index.

Kept in step with the asset map so the store can answer
"which links touch this node" without scanning every asset.
"""

from .models import AssetId


class Topology:
    """Adjacency between links and the nodes they connect."""

    __slots__ = ("_endpoints", "_node_links")

    def __init__(self) -> None:
        self._endpoints: dict[AssetId, tuple[AssetId, AssetId]] = {}
        self._node_links: dict[AssetId, set[AssetId]] = {}

    def copy(self) -> "Topology":
        clone = Topology()
        clone._endpoints = dict(self._endpoints)
        clone._node_links = {node: set(links) for node, links in self._node_links.items()}
        return clone

    def add_link(self, link_id: AssetId, start: AssetId, end: AssetId) -> None:
        """Register a link, replacing any previous endpoints."""
        self.remove_link(link_id)
        self._endpoints[link_id] = (start, end)
        self._node_links.setdefault(start, set()).add(link_id)
        self._node_links.setdefault(end, set()).add(link_id)

    def remove_link(self, link_id: AssetId) -> None:
        endpoints = self._endpoints.pop(link_id, None)
        if endpoints is None:
            return
        for node_id in endpoints:
            links = self._node_links.get(node_id)
            if links is None:
                continue
            links.discard(link_id)
            if not links:
                del self._node_links[node_id]

    def has_link(self, link_id: AssetId) -> bool:
        return link_id in self._endpoints

    def endpoints(self, link_id: AssetId) -> tuple[AssetId, AssetId]:
        """
        Return the (start, end) nodes of a link.

        Raises:
            KeyError: If the link is not registered
        """
        return self._endpoints[link_id]

    def links_for_node(self, node_id: AssetId) -> frozenset[AssetId]:
        return frozenset(self._node_links.get(node_id, ()))

    def __len__(self) -> int:
        return len(self._endpoints)
