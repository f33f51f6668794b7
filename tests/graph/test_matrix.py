import numpy as np
import pytest

from quiver.config import AlgebraSettings
from quiver.graph import (
    Graph,
    adjacency_matrix,
    copy_graph,
    degrees,
    multiplicity_matrix,
    sparse_adjacency,
)
from quiver.ids import IdAllocator, IdExhaustedError


def build(edges: list[tuple[str, str]], labels: str = "abcd", alloc=None) -> Graph:
    graph = Graph(alloc or IdAllocator())
    ids = {label: graph.create_node(label).id for label in labels}
    for src, dst in edges:
        graph.create_edge(ids[src], ids[dst], weight=len(src + dst), label=f"{src}{dst}")
    return graph


def test_adjacency_follows_insertion_order() -> None:
    graph = build([("a", "b"), ("b", "c"), ("c", "a"), ("d", "d")])

    expected = np.array(
        [
            [False, True, False, False],
            [False, False, True, False],
            [True, False, False, False],
            [False, False, False, True],
        ]
    )
    np.testing.assert_array_equal(adjacency_matrix(graph), expected)


def test_adjacency_matches_by_id_not_position() -> None:
    graph = Graph(IdAllocator())
    a = graph.create_node("a")
    b = graph.create_node("b", front=True)
    graph.create_edge(a.id, b.id)

    mat = adjacency_matrix(graph)
    # b sits at position 0, a at position 1
    assert mat[1, 0]
    assert mat.sum() == 1


def test_adjacency_ignores_dangling_edges_and_collapses_parallel_ones() -> None:
    graph = build([("a", "b"), ("a", "b")], labels="ab")
    graph.create_edge(graph.find_by_label("a"), 4242)

    mat = adjacency_matrix(graph)
    assert mat.shape == (2, 2)
    assert mat.sum() == 1


def test_empty_graph_matrix() -> None:
    assert adjacency_matrix(Graph()).shape == (0, 0)


def test_sparse_adjacency_agrees_with_dense() -> None:
    graph = build([("a", "b"), ("a", "b"), ("b", "c"), ("c", "c"), ("d", "a")])

    dense = adjacency_matrix(graph)
    sparse = sparse_adjacency(graph)

    assert sparse.nrows == sparse.ncols == 4
    assert sparse.nvals == int(dense.sum())
    rows, cols, _vals = sparse.to_coo()
    assert set(zip(rows.tolist(), cols.tolist())) == {
        (int(i), int(j)) for i, j in np.argwhere(dense)
    }


def test_multiplicity_and_degrees_count_parallel_edges() -> None:
    graph = build([("a", "b"), ("a", "b"), ("b", "c"), ("c", "c")])

    mult = multiplicity_matrix(graph)
    assert mult[0, 1].new().value == 2

    out_deg, in_deg = degrees(graph)
    np.testing.assert_array_equal(out_deg, [2, 1, 1, 0])
    np.testing.assert_array_equal(in_deg, [0, 2, 2, 0])


def test_degrees_of_empty_graph() -> None:
    out_deg, in_deg = degrees(Graph())
    assert out_deg.shape == in_deg.shape == (0,)


def test_copy_replicates_adjacency_with_fresh_ids() -> None:
    graph = build([("a", "b"), ("b", "a"), ("c", "c"), ("d", "b")])

    copy = copy_graph(graph)

    assert copy.allocator is graph.allocator
    assert copy.labels() == graph.labels()
    assert set(copy.node_ids()).isdisjoint(graph.node_ids())
    np.testing.assert_array_equal(adjacency_matrix(copy), adjacency_matrix(graph))

    # Attributes come from the first original edge of each pair
    copied = {(e.label, e.weight) for e in copy.edges()}
    original = {(e.label, e.weight) for e in graph.edges()}
    assert copied == original
    # Every copied edge is owned by its source
    for node in copy:
        assert all(edge.source == node.id for edge in node.edges)


def test_copy_without_attributes_uses_copied_defaults() -> None:
    graph = build([("a", "b")], labels="ab")
    settings = AlgebraSettings(copied_edge_label="cp", copied_edge_weight=9)

    copy = copy_graph(graph, preserve_attributes=False, settings=settings)

    (edge,) = list(copy.edges())
    assert (edge.label, edge.weight) == ("cp", 9)


def test_copy_leaves_source_untouched_and_rolls_back_on_exhaustion() -> None:
    alloc = IdAllocator(max_id=5)
    graph = build([("a", "b"), ("b", "c")], labels="abc", alloc=alloc)
    before = alloc.snapshot()

    with pytest.raises(IdExhaustedError):
        copy_graph(graph)

    assert len(graph) == 3
    assert graph.edge_count() == 2
    # Everything the partial copy minted went back to the pools
    after = alloc.snapshot()
    assert len(after.node_pool) == after.node_high_water - before.node_high_water
    assert len(after.edge_pool) == after.edge_high_water - before.edge_high_water
