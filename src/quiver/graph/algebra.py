from __future__ import annotations

"""
Unary and binary graph operations.

Mutating operations (contract, contract_edge, complement) change the given
graph in place and return it. Binary operations return a new graph:

- union, parallel and series move the nodes of both inputs into the result,
  leaving the input graphs empty;
- cartesian builds its layers from structural copies and leaves both inputs
  untouched.

Every operation validates its inputs before touching anything, so a raised
exception means no graph was modified.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from ..config import AlgebraSettings, get_settings
from ..ids import IdAllocatorError
from ..log import getLogger
from .core import Graph
from .errors import EdgeNotFoundError, InvalidPreconditionError, NodeNotFoundError
from .matrix import copy_graph
from .model import Edge, Node, construct_edge

logger = getLogger(__name__)

EdgeSpec = Tuple[int, int, int, str]  # (source, target, weight, label)


def _mint_edges(graph: Graph, specs: Sequence[EdgeSpec]) -> List[Edge]:
    """
    Mint one unattached edge per EdgeSpec.

    On IdAllocatorError the ids minted so far are recycled before the error
    propagates.
    """
    minted: List[Edge] = []
    try:
        for source, target, weight, label in specs:
            minted.append(construct_edge(graph.allocator, weight, label, (source, target)))
    except IdAllocatorError:
        for edge in minted:
            graph.allocator.recycle_edge_id(edge.id)
        raise
    return minted


def _require_shared_allocator(
    graph1: Graph,
    graph2: Graph,
    operation: str,
    *,
    allow_same: bool = False,
) -> None:
    if graph1 is graph2 and not allow_same:
        raise InvalidPreconditionError(f"{operation}: both operands are the same graph")
    if graph1.allocator is not graph2.allocator:
        raise InvalidPreconditionError(
            f"{operation}: operands use different id allocators; "
            "create them with Graph.sibling() or a shared IdAllocator"
        )


def _require_disjoint(graph1: Graph, graph2: Graph, operation: str) -> None:
    clash = set(graph1.node_ids()) & set(graph2.node_ids())
    if clash:
        raise InvalidPreconditionError(
            f"{operation}: node ids present in both graphs: {sorted(clash)}"
        )


# ---------------------------------------------------------------------------
# Unary operations
# ---------------------------------------------------------------------------


def contract(graph: Graph, keep_id: int, drop_id: int) -> Graph:
    """
    Merge node `drop_id` into node `keep_id`.

    1. Remove the first keep -> drop edge and the first drop -> keep edge,
       if present. Further parallel edges between the two survive.
    2. Move every remaining outgoing edge of `drop` to `keep`; a self-loop
       on `drop` becomes a self-loop on `keep`.
    3. Retarget every edge in the graph that points at `drop` to `keep`.
    4. Delete `drop`, recycling its id.

    Raises NodeNotFoundError if either id is not a node of the graph and
    InvalidPreconditionError if both ids are the same.
    """
    keep = graph.find(keep_id)
    drop = graph.find(drop_id)
    if keep is None or drop is None:
        missing = keep_id if keep is None else drop_id
        logger.warning("Vertex contraction rejected: node %s not in graph", missing)
        raise NodeNotFoundError(missing)
    if keep is drop:
        raise InvalidPreconditionError(f"Cannot contract node {keep_id} with itself")

    mutual = keep.edges.first_to(drop_id)
    if mutual is not None:
        keep.edges.delete(mutual.id)
    mutual = drop.edges.first_to(keep_id)
    if mutual is not None:
        drop.edges.delete(mutual.id)

    moved = drop.edges.detach_all()
    for edge in moved:
        if edge.target == drop_id:
            edge.target = keep_id
        edge.source = keep_id
        keep.edges.insert_back(edge)

    retargeted = 0
    for node in graph:
        if node is drop:
            continue
        for edge in node.edges:
            if edge.target == drop_id:
                edge.target = keep_id
                retargeted += 1

    graph.delete(drop_id)
    logger.debug(
        "Contracted node %d into %d: %d edges moved, %d retargeted",
        drop_id, keep_id, len(moved), retargeted,
    )
    return graph


vertex_contraction = contract


def contract_edge(graph: Graph, edge_id: int) -> Graph:
    """
    Contract an edge: its target node is merged into its source node.

    A self-loop is simply deleted. Raises EdgeNotFoundError if no node of the
    graph owns the edge, NodeNotFoundError if the edge points outside it.
    """
    found = graph.find_edge(edge_id)
    if found is None:
        raise EdgeNotFoundError(edge_id)
    owner, edge = found

    if edge.target == owner.id:
        owner.edges.delete(edge.id)
        return graph
    if graph.find(edge.target) is None:
        raise NodeNotFoundError(edge.target)

    # contract() drops the first keep -> drop edge; make it this one.
    owner.edges.remove(edge.id)
    owner.edges.insert_front(edge)
    return contract(graph, owner.id, edge.target)


def complement(graph: Graph, *, settings: Optional[AlgebraSettings] = None) -> Graph:
    """
    Replace every node's edges with the edges it does not have.

    For each node the candidate set is one edge to every node of the graph,
    itself included; every candidate matching an existing (source, target)
    pair is dropped. The old edges are deleted and the surviving candidates,
    labelled with the complement defaults, become the node's edges. Edges
    that pointed outside the graph simply disappear. Nodes are untouched.
    """
    settings = settings or get_settings().algebra
    nodes = list(graph)
    node_ids = [node.id for node in nodes]

    specs_per_node: List[List[EdgeSpec]] = []
    for node in nodes:
        existing = {(edge.source, edge.target) for edge in node.edges}
        specs_per_node.append([
            (node.id, target, settings.complement_edge_weight, settings.complement_edge_label)
            for target in node_ids
            if (node.id, target) not in existing
        ])

    flat = [spec for specs in specs_per_node for spec in specs]
    minted = iter(_mint_edges(graph, flat))

    for node, specs in zip(nodes, specs_per_node):
        node.edges.clear()
        node.edges.extend(next(minted) for _ in specs)

    logger.debug("Complemented graph: %d nodes, %d edges", len(nodes), len(flat))
    return graph


# ---------------------------------------------------------------------------
# Binary operations
# ---------------------------------------------------------------------------


def union(graph1: Graph, graph2: Graph) -> Graph:
    """
    Disjoint union: all nodes of graph1 followed by all nodes of graph2.

    Nodes and edges keep their ids, labels and order; nothing is relabelled.
    Both inputs are emptied, their nodes now belong to the result.
    """
    _require_shared_allocator(graph1, graph2, "union")
    _require_disjoint(graph1, graph2, "union")

    result = graph1.sibling()
    for node in graph1.take_nodes():
        result.insert_back(node)
    for node in graph2.take_nodes():
        result.insert_back(node)
    return result


disjoint_union = union


def cartesian(
    graph1: Graph,
    graph2: Graph,
    *,
    settings: Optional[AlgebraSettings] = None,
) -> Graph:
    """
    Cartesian (box) product of graph1 and graph2.

    The result holds |graph1| layers, each a structural copy of graph2, laid
    out one after the other. Layer j stands for the j-th node u_j of graph1;
    node i of layer j stands for the pair (u_j, v_i).

    - Within a layer, edges are those of graph2 (via the copy).
    - For every edge u_j -> u_k of graph1 and every position i, an edge
      joins node i of layer j to node i of layer k, carrying the product
      defaults. Edges of graph1 pointing outside graph1 are ignored.

    Layers are aligned by node position. Neither input is modified, so
    graph1 and graph2 may be the same graph.
    """
    _require_shared_allocator(graph1, graph2, "cartesian", allow_same=True)
    settings = settings or get_settings().algebra

    result = graph1.sibling()
    outer = list(graph1)
    if not outer or len(graph2) == 0:
        return result

    layers: List[Graph] = []
    try:
        for _ in outer:
            layers.append(copy_graph(graph2, settings=settings))
    except IdAllocatorError:
        for layer in layers:
            layer.destroy()
        raise

    layer_nodes: List[List[Node]] = [list(layer) for layer in layers]
    outer_pos: Dict[int, int] = {node.id: pos for pos, node in enumerate(outer)}

    specs: List[EdgeSpec] = []
    for i in range(len(graph2)):
        for j, u in enumerate(outer):
            for edge in u.edges:
                k = outer_pos.get(edge.target)
                if k is None:
                    continue
                specs.append((
                    layer_nodes[j][i].id,
                    layer_nodes[k][i].id,
                    settings.product_edge_weight,
                    settings.product_edge_label,
                ))

    try:
        minted = _mint_edges(result, specs)
    except IdAllocatorError:
        for layer in layers:
            layer.destroy()
        raise

    for layer in layers:
        for node in layer.take_nodes():
            result.insert_back(node)
    for edge in minted:
        result.require(edge.source).edges.insert_back(edge)

    logger.debug(
        "Cartesian product: %d layers x %d nodes, %d inter-layer edges",
        len(layers), len(graph2), len(minted),
    )
    return result


cartesian_product = cartesian


def parallel(
    graph1: Graph,
    graph2: Graph,
    source1: int,
    sink1: int,
    source2: int,
    sink2: int,
) -> Graph:
    """
    Parallel composition of two two-terminal graphs.

    Takes the disjoint union, contracts source2 into source1, then sink2
    into sink1. When source2 and sink2 are the same node it is gone after
    the first contraction and the second one is skipped.

    Raises NodeNotFoundError, before anything is modified, if source1/sink1
    are not in graph1 or source2/sink2 are not in graph2.
    """
    _require_shared_allocator(graph1, graph2, "parallel")
    _require_disjoint(graph1, graph2, "parallel")
    for node_id, graph, where in (
        (source1, graph1, "first graph"),
        (sink1, graph1, "first graph"),
        (source2, graph2, "second graph"),
        (sink2, graph2, "second graph"),
    ):
        if graph.find(node_id) is None:
            logger.warning("Parallel composition rejected: node %s not in %s", node_id, where)
            raise NodeNotFoundError(node_id, where)

    composed = union(graph1, graph2)
    contract(composed, source1, source2)
    if composed.find(sink2) is not None:
        contract(composed, sink1, sink2)
    return composed


def series(
    graph1: Graph,
    graph2: Graph,
    source_id: int,
    sink_id: int,
    *,
    settings: Optional[AlgebraSettings] = None,
) -> Graph:
    """
    Series composition, bridging variant.

    Takes the disjoint union and adds two edges with the series defaults:
    `source_id` (a node of graph1) -> `sink_id` (a node of graph2), and the
    reverse. The two terminals are joined by the bridge, not merged.

    Raises NodeNotFoundError, before anything is modified, if source_id is
    not in graph1 or sink_id is not in graph2.
    """
    _require_shared_allocator(graph1, graph2, "series")
    _require_disjoint(graph1, graph2, "series")
    settings = settings or get_settings().algebra

    left = graph1.find(source_id)
    right = graph2.find(sink_id)
    if left is None or right is None:
        missing, where = (source_id, "first graph") if left is None else (sink_id, "second graph")
        logger.warning("Series composition rejected: node %s not in %s", missing, where)
        raise NodeNotFoundError(missing, where)

    forward, backward = _mint_edges(graph1, [
        (left.id, right.id, settings.series_edge_weight, settings.series_edge_label),
        (right.id, left.id, settings.series_edge_weight, settings.series_edge_label),
    ])

    composed = union(graph1, graph2)
    left.edges.insert_back(forward)
    right.edges.insert_back(backward)
    return composed
