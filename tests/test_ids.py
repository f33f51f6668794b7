import pytest

from quiver.ids import (
    DuplicateRecycleError,
    IdAllocator,
    IdExhaustedError,
)


def test_fresh_ids_start_at_one_per_namespace() -> None:
    alloc = IdAllocator()

    assert [alloc.allocate_node_id() for _ in range(3)] == [1, 2, 3]
    # Edge ids are an independent counter
    assert alloc.allocate_edge_id() == 1
    assert alloc.allocate_node_id() == 4


def test_recycled_ids_are_reused_first_freed_first() -> None:
    alloc = IdAllocator()
    ids = [alloc.allocate_node_id() for _ in range(5)]
    assert ids == [1, 2, 3, 4, 5]

    alloc.recycle_node_id(4)
    alloc.recycle_node_id(2)
    alloc.recycle_node_id(5)

    assert alloc.allocate_node_id() == 4
    assert alloc.allocate_node_id() == 2
    assert alloc.allocate_node_id() == 5
    # Pool drained: back to the counter
    assert alloc.allocate_node_id() == 6


def test_in_use_reporting() -> None:
    alloc = IdAllocator()
    a = alloc.allocate_edge_id()
    b = alloc.allocate_edge_id()

    assert alloc.edge_id_in_use(a)
    assert alloc.edge_id_in_use(b)
    assert not alloc.edge_id_in_use(0)
    # Above the high-water mark is never in use
    assert not alloc.edge_id_in_use(b + 1)

    alloc.recycle_edge_id(a)
    assert not alloc.edge_id_in_use(a)
    assert alloc.edge_id_in_use(b)

    # Node namespace unaffected
    assert not alloc.node_id_in_use(a)


@pytest.mark.parametrize("bad", [0, 7, -1])
def test_recycle_rejects_ids_never_issued(bad) -> None:
    alloc = IdAllocator()
    alloc.allocate_node_id()

    with pytest.raises(DuplicateRecycleError):
        alloc.recycle_node_id(bad)


def test_double_recycle_is_an_error() -> None:
    alloc = IdAllocator()
    ident = alloc.allocate_edge_id()
    alloc.recycle_edge_id(ident)

    with pytest.raises(DuplicateRecycleError):
        alloc.recycle_edge_id(ident)

    # The pool still holds the id exactly once
    assert alloc.snapshot().edge_pool == (ident,)


def test_exhaustion_and_recycled_ids_beyond_the_ceiling() -> None:
    alloc = IdAllocator(max_id=2)
    assert alloc.allocate_node_id() == 1
    assert alloc.allocate_node_id() == 2

    with pytest.raises(IdExhaustedError):
        alloc.allocate_node_id()

    alloc.recycle_node_id(1)
    assert alloc.allocate_node_id() == 1


def test_snapshot_reports_high_water_and_pools() -> None:
    alloc = IdAllocator()
    for _ in range(3):
        alloc.allocate_node_id()
    alloc.allocate_edge_id()
    alloc.recycle_node_id(2)

    snap = alloc.snapshot()
    assert snap.node_high_water == 3
    assert snap.edge_high_water == 1
    assert snap.node_pool == (2,)
    assert snap.edge_pool == ()
