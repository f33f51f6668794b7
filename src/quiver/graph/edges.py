from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional

from ..log import getLogger
from .errors import InvalidPreconditionError

if TYPE_CHECKING:
    from ..ids import IdAllocator
    from .model import Edge

logger = getLogger(__name__)


class EdgeCollection:
    """
    Ordered outgoing edges of a single node.

    The collection owns its edges: deleting or clearing returns their ids to
    the allocator. `remove()` and `detach_all()` hand edges over without
    recycling, for operations that move edges between nodes.
    """

    __slots__ = ("_allocator", "_edges")

    def __init__(self, allocator: IdAllocator, edges: Iterable[Edge] = ()) -> None:
        self._allocator = allocator
        self._edges: List[Edge] = []
        for edge in edges:
            self.insert_back(edge)

    # ------------------------------------------------------------------ #
    # Insertion
    # ------------------------------------------------------------------ #
    def _check_new(self, edge: Edge) -> None:
        if self.find(edge.id) is not None:
            raise InvalidPreconditionError(f"Edge id {edge.id} already in this collection")

    def insert_front(self, edge: Edge) -> Edge:
        self._check_new(edge)
        self._edges.insert(0, edge)
        return edge

    def insert_back(self, edge: Edge) -> Edge:
        self._check_new(edge)
        self._edges.append(edge)
        return edge

    def extend(self, edges: Iterable[Edge]) -> None:
        for edge in edges:
            self.insert_back(edge)

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #
    def find(self, edge_id: int) -> Optional[Edge]:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        return None

    def first_to(self, target_id: int) -> Optional[Edge]:
        """Return the first edge pointing at target_id, if any."""
        for edge in self._edges:
            if edge.target == target_id:
                return edge
        return None

    def self_loop_count(self) -> int:
        return sum(1 for edge in self._edges if edge.source == edge.target)

    # ------------------------------------------------------------------ #
    # Removal
    # ------------------------------------------------------------------ #
    def delete(self, edge_id: int) -> bool:
        """
        Delete an edge and recycle its id.

        No-op (returns False) when the id is not in this collection or is not
        a live identifier of the allocator.
        """
        if not self._allocator.edge_id_in_use(edge_id):
            return False
        edge = self.remove(edge_id)
        if edge is None:
            return False
        self._allocator.recycle_edge_id(edge.id)
        return True

    def remove(self, edge_id: int) -> Optional[Edge]:
        """Detach an edge without recycling its id."""
        for index, edge in enumerate(self._edges):
            if edge.id == edge_id:
                del self._edges[index]
                return edge
        return None

    def detach_all(self) -> List[Edge]:
        """Empty the collection and return its edges, ids still live."""
        edges, self._edges = self._edges, []
        return edges

    def clear(self) -> int:
        """Delete every edge, recycling ids in collection order."""
        edges = self.detach_all()
        for edge in edges:
            self._allocator.recycle_edge_id(edge.id)
        if edges:
            logger.debug("Recycled %d edge ids", len(edges))
        return len(edges)

    # ------------------------------------------------------------------ #
    # Container protocol
    # ------------------------------------------------------------------ #
    def __len__(self) -> int:
        return len(self._edges)

    def __iter__(self) -> Iterator[Edge]:
        return iter(list(self._edges))

    def __contains__(self, edge_id: object) -> bool:
        return any(edge.id == edge_id for edge in self._edges)

    def __getitem__(self, index: int) -> Edge:
        return self._edges[index]

    def __repr__(self) -> str:
        return f"EdgeCollection({[e.id for e in self._edges]})"
