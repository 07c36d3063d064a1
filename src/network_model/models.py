"""
Pydantic models for the hydraulic network document.

Assets are immutable value objects; every change to the document is
expressed as a Moment carrying the full new state of each touched asset.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


AssetId = str


class AssetType(str, Enum):
    """Network element types."""

    # Nodes
    JUNCTION = "junction"
    RESERVOIR = "reservoir"
    TANK = "tank"

    # Links
    PIPE = "pipe"
    PUMP = "pump"
    VALVE = "valve"


LINK_TYPES = frozenset({AssetType.PIPE, AssetType.PUMP, AssetType.VALVE})


class AssetState(BaseModel):
    """
    Full state of a single network element.

    Links (pipes, pumps, valves) connect two distinct nodes through
    ``connections``; nodes carry no connections.

    Examples:
        Junction:
            {"id": "J1", "type": "junction", "properties": {"elevation": 10}}

        Pipe:
            {"id": "P1", "type": "pipe", "connections": ["J1", "J2"],
             "properties": {"status": "open", "diameter": 300}}
    """

    model_config = ConfigDict(frozen=True)

    id: AssetId = Field(
        ...,
        min_length=1,
        description="Stable asset identifier"
    )
    type: AssetType = Field(
        ...,
        description="Element type"
    )
    label: str = Field(
        default="",
        description="User-facing label"
    )
    connections: Optional[tuple[AssetId, AssetId]] = Field(
        default=None,
        description="Start and end node ids (links only)"
    )
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Hydraulic properties (status, diameter, elevation, ...)"
    )

    @model_validator(mode="after")
    def check_connections(self) -> "AssetState":
        """Links need two distinct endpoints, nodes need none."""
        if self.is_link:
            if self.connections is None:
                raise ValueError(f"{self.type.value} '{self.id}' requires connections")
            start, end = self.connections
            if start == end:
                raise ValueError(f"{self.type.value} '{self.id}' cannot connect a node to itself")
        elif self.connections is not None:
            raise ValueError(f"{self.type.value} '{self.id}' cannot have connections")
        return self

    @property
    def is_link(self) -> bool:
        return self.type in LINK_TYPES

    @property
    def is_node(self) -> bool:
        return not self.is_link

    def with_properties(self, **updates: Any) -> "AssetState":
        """Return a copy with ``properties`` updated."""
        return self.model_copy(update={"properties": {**self.properties, **updates}})


class Moment(BaseModel):
    """
    An atomic, transactional delta to the network document.

    ``put_assets`` creates or replaces elements (full state, not a diff);
    ``delete_assets`` removes them. An id must not appear in both lists;
    callers validate this before a Moment reaches the history.
    """

    note: Optional[str] = Field(
        default=None,
        description="Human-readable label (e.g. 'Close pipe', 'Import net.inp')"
    )
    put_assets: list[AssetState] = Field(
        default_factory=list,
        description="Created or updated elements, in order"
    )
    delete_assets: list[AssetId] = Field(
        default_factory=list,
        description="Removed element ids"
    )

    @property
    def is_empty(self) -> bool:
        return not self.put_assets and not self.delete_assets

    @property
    def size(self) -> int:
        """Number of touched elements."""
        return len(self.put_assets) + len(self.delete_assets)


class Snapshot(BaseModel):
    """
    Full-state materialization of the document plus an opaque version tag.

    ``moment.put_assets`` enumerates every element present at capture time.
    """

    model_config = ConfigDict(frozen=True)

    state_id: str = Field(description="Model version tag at capture")
    moment: Moment = Field(description="Every element at capture time")

    @field_validator("moment")
    @classmethod
    def moment_must_be_full_state(cls, v: Moment) -> Moment:
        """A snapshot never deletes."""
        if v.delete_assets:
            raise ValueError("snapshot moment cannot delete assets")
        return v
