from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..ids import IdAllocator
from ..log import getLogger
from .edges import EdgeCollection
from .errors import (
    EdgeNotFoundError,
    GraphError,
    InvalidPreconditionError,
    NodeNotFoundError,
    NotFoundError,
)
from .model import Edge, Node, construct_edge, construct_node

logger = getLogger(__name__)

__all__ = [
    "Graph",
    "EdgeCollection",
    "dedupe_labels",
    "GraphError",
    "NotFoundError",
    "NodeNotFoundError",
    "EdgeNotFoundError",
    "InvalidPreconditionError",
]


class Graph:
    """
    Ordered collection of nodes, each owning its outgoing edges.

    Structure:
      - Nodes are kept in insertion order; that order defines the row/column
        order of adjacency matrices and the alignment of product layers.
      - Incoming edges are not indexed. They are found by scanning every
        node's edge collection for a matching target id.
      - All ids come from `allocator`. Graphs that are combined with binary
        operations must share the same allocator.

    Lookups (`find`, `find_by_label`, `find_edge`) return None when nothing
    matches; `require` raises NodeNotFoundError instead.
    """

    __slots__ = ("_allocator", "_nodes")

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def __init__(
        self,
        allocator: Optional[IdAllocator] = None,
        nodes: Iterable[Node] = (),
    ) -> None:
        self._allocator = allocator if allocator is not None else IdAllocator()
        self._nodes: List[Node] = []
        for node in nodes:
            self.insert_back(node)

    @property
    def allocator(self) -> IdAllocator:
        return self._allocator

    def sibling(self) -> Graph:
        """Return an empty graph sharing this graph's allocator."""
        return Graph(self._allocator)

    def create_node(self, label: str, *, front: bool = False) -> Node:
        """Mint a node and insert it at the back (or front) of the graph."""
        node = construct_node(self._allocator, label)
        if front:
            self.insert_front(node)
        else:
            self.insert_back(node)
        return node

    def create_edge(
        self,
        source_id: int,
        target_id: int,
        weight: int = 0,
        label: str = "",
    ) -> Edge:
        """
        Mint an edge source -> target and append it to the source node.

        The source must be in this graph; the target is not checked.
        """
        node = self.require(source_id)
        edge = construct_edge(self._allocator, weight, label, (source_id, target_id))
        node.edges.insert_back(edge)
        return edge

    # ------------------------------------------------------------------ #
    # Node CRUD
    # ------------------------------------------------------------------ #
    def _check_new(self, node: Node) -> None:
        if self.find(node.id) is not None:
            raise InvalidPreconditionError(f"Node id {node.id} already in graph")

    def insert_front(self, node: Node) -> Node:
        self._check_new(node)
        self._nodes.insert(0, node)
        return node

    def insert_back(self, node: Node) -> Node:
        self._check_new(node)
        self._nodes.append(node)
        return node

    def find(self, node_id: int) -> Optional[Node]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def require(self, node_id: int) -> Node:
        node = self.find(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def position(self, node_id: int) -> Optional[int]:
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                return index
        return None

    def find_by_label(self, label: str) -> Optional[int]:
        """Id of the first node carrying `label`, or None."""
        for node in self._nodes:
            if node.label == label:
                return node.id
        return None

    def detach(self, node_id: int) -> Optional[Node]:
        """Remove a node without recycling its id or its edges' ids."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                del self._nodes[index]
                return node
        return None

    def delete(self, node_id: int) -> bool:
        """
        Delete a node, recycling its id and the ids of its outgoing edges.

        Edges elsewhere that point at the node are left alone. Returns False
        when the node is not in this graph.
        """
        node = self.detach(node_id)
        if node is None:
            return False
        node.edges.clear()
        self._allocator.recycle_node_id(node.id)
        return True

    def take_nodes(self) -> List[Node]:
        """Empty the graph and hand its nodes, ids still live, to the caller."""
        nodes, self._nodes = self._nodes, []
        return nodes

    def destroy(self) -> None:
        """Recycle every node id and every owned edge id, then empty the graph."""
        nodes = self.take_nodes()
        edge_total = 0
        for node in nodes:
            edge_total += node.edges.clear()
            self._allocator.recycle_node_id(node.id)
        logger.debug("Destroyed graph: %d nodes, %d edges recycled", len(nodes), edge_total)

    # ------------------------------------------------------------------ #
    # Edge access across nodes
    # ------------------------------------------------------------------ #
    def edges(self) -> Iterator[Edge]:
        for node in list(self._nodes):
            yield from node.edges

    def edge_count(self) -> int:
        return sum(len(node.edges) for node in self._nodes)

    def find_edge(self, edge_id: int) -> Optional[Tuple[Node, Edge]]:
        for node in self._nodes:
            edge = node.edges.find(edge_id)
            if edge is not None:
                return node, edge
        return None

    def add_edges(self, node_id: int, edges: Iterable[Edge]) -> None:
        """Append already-constructed edges to a node."""
        node = self.require(node_id)
        node.edges.extend(edges)

    def delete_edge(self, node_id: int, edge_id: int) -> bool:
        node = self.find(node_id)
        if node is None:
            return False
        return node.edges.delete(edge_id)

    # ------------------------------------------------------------------ #
    # Labels
    # ------------------------------------------------------------------ #
    def relabel_node(self, node_id: int, label: str) -> Node:
        node = self.require(node_id)
        node.label = str(label)
        return node

    def relabel_edge(self, edge_id: int, label: str) -> Edge:
        found = self.find_edge(edge_id)
        if found is None:
            raise EdgeNotFoundError(edge_id)
        _node, edge = found
        edge.label = str(label)
        return edge

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def size(self) -> int:
        return len(self._nodes)

    def node_ids(self) -> List[int]:
        return [node.id for node in self._nodes]

    def labels(self) -> List[str]:
        return [node.label for node in self._nodes]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))

    def __contains__(self, node_id: object) -> bool:
        return any(node.id == node_id for node in self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def __repr__(self) -> str:
        return f"Graph(num_nodes={len(self._nodes)}, num_edges={self.edge_count()})"


def dedupe_labels(graph: Graph, prefix: Optional[str] = None) -> Graph:
    """
    Rename nodes whose label repeats an earlier node's label.

    The first node keeps the label; every later duplicate becomes
    `prefix + str(node.id)`. Ids are unique, so the new labels cannot collide
    with each other, only (rarely) with an existing label, which is checked.
    """
    if prefix is None:
        from ..config import get_settings

        prefix = get_settings().algebra.duplicate_label_prefix

    seen: Dict[str, int] = {}
    for node in graph:
        if node.label in seen:
            candidate = f"{prefix}{node.id}"
            while candidate in seen:
                candidate = f"{candidate}_"
            logger.debug("Relabel node %d: %r -> %r", node.id, node.label, candidate)
            node.label = candidate
        seen[node.label] = node.id
    return graph

