"""Pydantic models for the key graph visualizer."""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

NodeId = str
Point = tuple[float, float]


class EdgeKind(str, Enum):
    RESIL = "resil"
    NONRESIL = "nonresil"


# --- Input records (what comes out of the dataset files) ---


class RawEdge(BaseModel):
    """One upgrade relation as published in a *_edges.json file."""
    model_config = ConfigDict(frozen=True)

    source: NodeId = Field(min_length=1)
    target: NodeId = Field(min_length=1)
    labels: tuple[str, ...] = ()

    @field_validator("labels", mode="before")
    @classmethod
    def _stringify_labels(cls, value: Any) -> Any:
        # Run ids are published as bare numbers in some exports
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(v) if isinstance(v, (int, float)) else v for v in value)
        return value


class DatasetIndex(BaseModel):
    """Contents of data/config.json: which region/season/level datasets exist."""
    model_config = ConfigDict(populate_by_name=True)

    regions: list[str] = Field(default_factory=list)
    seasons: dict[str, list[str]] = Field(default_factory=dict)
    key_levels: dict[str, list[int]] = Field(default_factory=dict, alias="keyLevels")

    def levels_for(self, region: str, season: str) -> list[int]:
        return self.key_levels.get(f"{region}-{season}", [])


class DatasetKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: str
    season: str
    level: int

    @property
    def prefix(self) -> str:
        return f"{self.season}-{self.region}-resi{self.level}"

    def __str__(self) -> str:
        return f"{self.region}/{self.season}/+{self.level}"


class Dataset(BaseModel):
    """Everything loaded for one region/season/key level."""
    key: DatasetKey
    timestamps: dict[NodeId, datetime] = Field(default_factory=dict)
    resil_edges: list[RawEdge] = Field(default_factory=list)
    non_resil_edges: list[RawEdge] = Field(default_factory=list)


# --- Graph records (what the builder and layering produce) ---


def read_only(value: Mapping) -> MappingProxyType:
    return MappingProxyType(dict(value))


class GraphEdge(BaseModel):
    """An edge that made it into a graph, tagged with its kind."""
    model_config = ConfigDict(frozen=True)

    source: NodeId
    target: NodeId
    kind: EdgeKind
    labels: tuple[str, ...] = ()


class GraphSelection(BaseModel):
    """Vertex and edge set around a focal node, before layout."""
    model_config = ConfigDict(frozen=True)

    target: NodeId
    nodes: frozenset[NodeId]
    ancestors: frozenset[NodeId]
    descendants: frozenset[NodeId]
    edges: tuple[GraphEdge, ...]


class Layout(BaseModel):
    model_config = ConfigDict(frozen=True)

    positions: Mapping[NodeId, Point]
    layers: tuple[tuple[NodeId, ...], ...]
    layer_of: Mapping[NodeId, int]

    @field_validator("positions", "layer_of")
    @classmethod
    def _freeze(cls, value: Mapping) -> Mapping:
        return read_only(value)


class CycleDetected(BaseModel):
    """Layering result when the edges among the nodes are not acyclic."""
    model_config = ConfigDict(frozen=True)

    nodes: tuple[NodeId, ...]
    edges: tuple[tuple[NodeId, NodeId], ...]
    ordered: tuple[NodeId, ...]  # nodes Kahn's algorithm managed to consume

    @property
    def message(self) -> str:
        return "Graph contains cycles - cannot create hierarchical layout"

    @property
    def blocked(self) -> frozenset[NodeId]:
        """Nodes that sit on, or downstream of, a cycle."""
        return frozenset(self.nodes) - frozenset(self.ordered)


class Graph(BaseModel):
    """A fully laid out graph. Replaced wholesale on every rebuild."""
    model_config = ConfigDict(frozen=True)

    target: NodeId
    nodes: tuple[NodeId, ...]
    edges: tuple[GraphEdge, ...]
    positions: Mapping[NodeId, Point]
    layers: tuple[tuple[NodeId, ...], ...]

    @field_validator("positions")
    @classmethod
    def _freeze(cls, value: Mapping) -> Mapping:
        return read_only(value)

    def position(self, node: NodeId) -> Point:
        return self.positions[node]

    def layer_of(self, node: NodeId) -> int:
        for index, layer in enumerate(self.layers):
            if node in layer:
                return index
        raise KeyError(node)
