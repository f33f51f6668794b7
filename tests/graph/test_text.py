import pytest

from quiver.config import TextFormatSettings
from quiver.graph import Graph, GraphFormatError, dumps, load_graph, loads, save_graph
from quiver.ids import IdAllocator


def describe(graph: Graph) -> list[tuple[str, list[tuple[str, str, int]]]]:
    """Id-free view of a graph: labels, edge targets by label, edge attributes."""
    labels = {node.id: node.label for node in graph}
    return [
        (node.label, [(labels.get(e.target, "?"), e.label, e.weight) for e in node.edges])
        for node in graph
    ]


def test_loads_two_node_example() -> None:
    graph = loads("A (1) -> B(edge1, 3)\nB (0) -> \n")

    assert graph.labels() == ["A", "B"]
    assert describe(graph) == [("A", [("B", "edge1", 3)]), ("B", [])]


def test_dumps_format() -> None:
    graph = Graph(IdAllocator())
    a = graph.create_node("A")
    b = graph.create_node("B")
    graph.create_edge(a.id, b.id, weight=3, label="edge1")
    graph.create_edge(a.id, a.id, weight=-7, label="back again")

    assert dumps(graph) == "A (2) -> B(edge1, 3), A(back again, -7),\nB (0)\n"


def test_dumps_empty_graph() -> None:
    assert dumps(Graph(IdAllocator())) == ""
    assert len(loads("")) == 0


def test_round_trip_preserves_structure() -> None:
    text = (
        "hub (3) -> left(l, 1), right(r, 2), hub(self, 0),\n"
        "left (1) -> right(across, 10),\n"
        "right (0)\n"
    )
    graph = loads(text)
    again = loads(dumps(graph))

    assert describe(again) == describe(graph)
    assert dumps(again) == text


def test_forward_references_and_optional_count() -> None:
    graph = loads("A -> B(x, 1), C(y, 2)\nB\nC -> A(z, 3)\n")

    assert describe(graph) == [
        ("A", [("B", "x", 1), ("C", "y", 2)]),
        ("B", []),
        ("C", [("A", "z", 3)]),
    ]


@pytest.mark.parametrize("weight", [0, 7, 42, -1, -1234, 2**40])
def test_weights_are_full_integers(weight) -> None:
    graph = loads(f"n (1) -> n(loop, {weight}),\n")
    (edge,) = list(graph.edges())
    assert edge.weight == weight


def test_blank_lines_and_whitespace_are_ignored() -> None:
    graph = loads("\n   A (1) ->   B( spaced ,  5 )  \n\n  B (0)  \n\n")
    assert describe(graph) == [("A", [("B", "spaced", 5)]), ("B", [])]


def test_duplicate_labels_resolve_to_first_node() -> None:
    graph = loads("x (1) -> x(first, 1)\nx (0)\n")

    first, second = list(graph)
    (edge,) = list(first.edges)
    assert edge.target == first.id
    assert len(second.edges) == 0


@pytest.mark.parametrize(
    "text, line_no",
    [
        ("A (2) -> A(x, 1)\n", 1),  # declared count does not match
        ("A (1) -> B(x)\nB\n", 1),  # weight missing
        ("A\n\nB (1) -> A(x, one)\n", 3),  # weight not an integer
        ("A (1) -> Z(x, 1)\n", 1),  # unknown destination
        ("(1) -> A(x, 1)\n", 1),  # no label
        ("A\nB (1) => A(x, 1)\n", 2),  # wrong separator
    ],
)
def test_malformed_input(text, line_no) -> None:
    with pytest.raises(GraphFormatError) as exc_info:
        loads(text)
    assert exc_info.value.line_no == line_no
    assert str(exc_info.value).startswith(f"line {line_no}:")


def test_failed_parse_allocates_nothing() -> None:
    alloc = IdAllocator()
    with pytest.raises(GraphFormatError):
        loads("A (1) -> B(x, 1)\nB (0)\nC (1) -> missing(y, 2)\n", alloc)

    snap = alloc.snapshot()
    assert (snap.node_high_water, snap.edge_high_water) == (0, 0)


def test_dumps_skips_edges_leaving_the_graph() -> None:
    graph = Graph(IdAllocator())
    a = graph.create_node("a")
    graph.create_edge(a.id, 99, label="dangling")
    graph.create_edge(a.id, a.id, label="loop")

    assert dumps(graph) == "a (1) -> a(loop, 0),\n"


@pytest.mark.parametrize("label", ["two words", "paren(", "comma,", ""])
def test_dumps_rejects_unwritable_node_labels(label) -> None:
    graph = Graph(IdAllocator())
    graph.create_node(label)
    with pytest.raises(GraphFormatError):
        dumps(graph)


@pytest.mark.parametrize("label", ["x, y", "paren)", " leading", "trailing ", "\ttab"])
def test_dumps_rejects_unwritable_edge_labels(label) -> None:
    graph = Graph(IdAllocator())
    a = graph.create_node("a")
    graph.create_edge(a.id, a.id, label=label)
    with pytest.raises(GraphFormatError):
        dumps(graph)


def test_custom_separator() -> None:
    settings = TextFormatSettings(separator="=>")
    graph = loads("A (1) => B(x, 1),\nB (0)\n", settings=settings)

    assert describe(graph) == [("A", [("B", "x", 1)]), ("B", [])]
    assert dumps(graph, settings=settings) == "A (1) => B(x, 1),\nB (0)\n"


def test_save_and_load_file(tmp_path) -> None:
    alloc = IdAllocator()
    graph = loads("A (1) -> B(e, 3)\nB (1) -> A(f, 4)\n", alloc)
    path = tmp_path / "graph.txt"

    save_graph(graph, path)
    loaded = load_graph(path, alloc)

    assert path.read_text(encoding="utf-8") == dumps(graph)
    assert describe(loaded) == describe(graph)
    # Same allocator: the loaded copy gets fresh ids
    assert set(loaded.node_ids()).isdisjoint(graph.node_ids())
