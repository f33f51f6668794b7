from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional, Set

from .config import get_settings
from .log import getLogger

logger = getLogger(__name__)

ERROR_ID = 0


class IdAllocatorError(Exception):
    """Base exception for identifier allocation failures."""
    pass


class DuplicateRecycleError(IdAllocatorError):
    """An identifier was returned to a pool that cannot accept it."""
    pass


class IdExhaustedError(IdAllocatorError):
    """No recycled identifier is available and the counter hit max_id."""
    pass


class _Namespace:
    """
    One identifier space: a monotonically increasing counter plus a FIFO
    pool of freed identifiers.

    `_next` is the next value the counter would mint, so every id in
    [1, _next) has been issued at least once.
    """

    __slots__ = ("name", "max_id", "_next", "_pool", "_pooled")

    def __init__(self, name: str, max_id: int) -> None:
        self.name = name
        self.max_id = max_id
        self._next = 1
        self._pool: Deque[int] = deque()
        self._pooled: Set[int] = set()

    @property
    def high_water(self) -> int:
        return self._next - 1

    def allocate(self) -> int:
        if self._pool:
            ident = self._pool.popleft()
            self._pooled.discard(ident)
            return ident

        if self._next > self.max_id:
            raise IdExhaustedError(
                f"{self.name} identifiers exhausted (max_id={self.max_id})"
            )
        ident = self._next
        self._next += 1
        return ident

    def recycle(self, ident: int) -> None:
        if ident == ERROR_ID:
            raise DuplicateRecycleError(f"Cannot recycle the sentinel {self.name} id 0")
        if ident > self.high_water or ident < 0:
            raise DuplicateRecycleError(
                f"{self.name} id {ident} was never issued (high water {self.high_water})"
            )
        if ident in self._pooled:
            raise DuplicateRecycleError(f"{self.name} id {ident} is already recycled")
        self._pool.append(ident)
        self._pooled.add(ident)

    def in_use(self, ident: int) -> bool:
        return 0 < ident <= self.high_water and ident not in self._pooled

    def pool(self) -> tuple[int, ...]:
        return tuple(self._pool)


@dataclass(frozen=True, slots=True)
class AllocatorSnapshot:
    """Point-in-time view of an allocator, for diagnostics and tests."""

    node_high_water: int
    edge_high_water: int
    node_pool: tuple[int, ...]
    edge_pool: tuple[int, ...]


class IdAllocator:
    """
    Issues and recycles unique integer identifiers for nodes and edges.

    Node and edge ids live in separate namespaces. Each namespace hands out
    the oldest recycled id first and only mints a fresh counter value when
    its pool is empty. Id 0 is never issued.

    An allocator is not thread-safe; graphs that are combined by binary
    operations must share one allocator.
    """

    def __init__(self, max_id: Optional[int] = None) -> None:
        if max_id is None:
            max_id = get_settings().allocator.max_id
        self._nodes = _Namespace("node", max_id)
        self._edges = _Namespace("edge", max_id)

    # ------------------------------------------------------------------ #
    # Nodes
    # ------------------------------------------------------------------ #
    def allocate_node_id(self) -> int:
        return self._nodes.allocate()

    def recycle_node_id(self, ident: int) -> None:
        self._nodes.recycle(ident)

    def node_id_in_use(self, ident: int) -> bool:
        return self._nodes.in_use(ident)

    # ------------------------------------------------------------------ #
    # Edges
    # ------------------------------------------------------------------ #
    def allocate_edge_id(self) -> int:
        return self._edges.allocate()

    def recycle_edge_id(self, ident: int) -> None:
        self._edges.recycle(ident)

    def edge_id_in_use(self, ident: int) -> bool:
        return self._edges.in_use(ident)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def snapshot(self) -> AllocatorSnapshot:
        return AllocatorSnapshot(
            node_high_water=self._nodes.high_water,
            edge_high_water=self._edges.high_water,
            node_pool=self._nodes.pool(),
            edge_pool=self._edges.pool(),
        )

    def __repr__(self) -> str:
        return (
            f"IdAllocator(nodes<={self._nodes.high_water}, "
            f"edges<={self._edges.high_water}, "
            f"recycled={len(self._nodes.pool())}/{len(self._edges.pool())})"
        )
