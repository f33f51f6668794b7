from __future__ import annotations

"""Node and edge records plus the allocator-backed constructors."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Tuple

from .edges import EdgeCollection

if TYPE_CHECKING:
    from ..ids import IdAllocator


@dataclass(slots=True)
class Edge:
    """
    Directed, weighted, labelled arc.

    `source` is the id of the node owning the edge, `target` the id of the
    node it points to. The target need not exist in the same graph.
    """

    id: int
    weight: int
    label: str
    source: int
    target: int

    @property
    def endpoints(self) -> Tuple[int, int]:
        return self.source, self.target

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


@dataclass(slots=True, eq=False)
class Node:
    """Labelled vertex owning its outgoing edges."""

    id: int
    label: str
    edges: EdgeCollection = field(repr=False)

    @property
    def out_degree(self) -> int:
        return len(self.edges)

    def __repr__(self) -> str:
        return f"Node(id={self.id}, label={self.label!r}, out_degree={len(self.edges)})"


def construct_node(allocator: IdAllocator, label: str) -> Node:
    """Mint a standalone node (no edges) with a fresh or recycled id."""
    return Node(
        id=allocator.allocate_node_id(),
        label=str(label),
        edges=EdgeCollection(allocator),
    )


def construct_edge(
    allocator: IdAllocator,
    weight: int,
    label: str,
    endpoints: Tuple[int, int],
) -> Edge:
    """Mint an edge with a fresh or recycled id. Nothing is attached."""
    source, target = endpoints
    return Edge(
        id=allocator.allocate_edge_id(),
        weight=int(weight),
        label=str(label),
        source=int(source),
        target=int(target),
    )
