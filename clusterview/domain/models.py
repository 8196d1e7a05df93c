"""Pure domain models — zero external dependencies."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


def _uid() -> str:
    return uuid.uuid4().hex[:12]


# ── Threshold ───────────────────────────────────────────────────────────────

MIN_THRESHOLD = 0.0
MAX_THRESHOLD = 0.96


def clamp_threshold(value: float) -> float:
    """Clamp *value* into ``[MIN_THRESHOLD, MAX_THRESHOLD]``."""
    return max(MIN_THRESHOLD, min(MAX_THRESHOLD, float(value)))


def slider_to_threshold(position: float) -> float:
    """Map a slider position in ``[0, 1]`` linearly onto the threshold range."""
    t = MIN_THRESHOLD + float(position) * (MAX_THRESHOLD - MIN_THRESHOLD)
    return clamp_threshold(t)


def granularity_hint(position: float) -> str:
    """Human label for a slider position."""
    if position < 0.05:
        return "coarse"
    if position > 0.95:
        return "atomic"
    return f"fine {round(position * 100)}%"


class ViewMode(str, Enum):
    PIE = "pie"
    BUBBLE = "bubble"
    FORCE = "force"


# ── Graph ───────────────────────────────────────────────────────────────────

@dataclass
class Node:
    """A labeled item. ``group`` is assigned once at ingestion."""

    label: str
    group: str
    id: str = field(default_factory=_uid)


@dataclass
class Edge:
    """An undirected weighted link between two nodes."""

    source: str
    target: str
    weight: float
    id: str | None = None

    @property
    def composite_key(self) -> str:
        return f"{self.source}->{self.target}"

    def matches(self, assoc_id: str) -> bool:
        assoc_id = str(assoc_id)
        if self.id is not None and str(self.id) == assoc_id:
            return True
        return self.composite_key == assoc_id


@dataclass
class GraphState:
    """The node/edge collections a controller owns for one session."""

    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    group_order: list[str] = field(default_factory=list)

    @property
    def node_by_id(self) -> dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def edges_matching(self, assoc_id: str) -> list[Edge]:
        return [e for e in self.edges if e.matches(assoc_id)]


# ── Clusters ────────────────────────────────────────────────────────────────

@dataclass
class Cluster:
    """A connected component of one group at a given threshold."""

    id: str
    group: str
    member_ids: list[str] = field(default_factory=list)
    weight: float = 0.0
    items: list[str] = field(default_factory=list)  # sorted member labels

    @property
    def size(self) -> int:
        return len(self.member_ids)


@dataclass
class ClusterSummary:
    """What a renderer is allowed to see about a cluster."""

    id: str
    weight: float
    items: list[str]
    size: int


@dataclass
class ClusterLink:
    """Total weight of raw edges running between two visible clusters."""

    source: str
    target: str
    weight: float


@dataclass
class RenderFrame:
    """Everything handed to a renderer for one draw."""

    clusters: list[ClusterSummary]
    view: ViewMode
    threshold: float
    links: list[ClusterLink] = field(default_factory=list)

    @property
    def total_weight(self) -> float:
        return sum(c.weight for c in self.clusters)


@dataclass
class EditTarget:
    """An identifier plus its current weight, as offered to an editor."""

    id: str
    weight: float
    kind: str = "edge"  # "edge" or "cluster"
