from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np
import graphblas as gb
from graphblas import Matrix

from ..config import AlgebraSettings, get_settings
from ..ids import IdAllocatorError
from ..log import getLogger
from .core import Graph
from .model import construct_edge

logger = getLogger(__name__)


def _position_index(graph: Graph) -> Dict[int, int]:
    """Map node id -> row/column position (insertion order)."""
    return {node.id: pos for pos, node in enumerate(graph)}


def _edge_coordinates(graph: Graph) -> Tuple[List[int], List[int]]:
    """
    (row, column) position of every edge whose target is in the graph.

    Edges pointing outside the graph are skipped. Parallel edges produce
    repeated coordinates.
    """
    index = _position_index(graph)
    rows: List[int] = []
    cols: List[int] = []
    for pos, node in enumerate(graph):
        for edge in node.edges:
            col = index.get(edge.target)
            if col is None:
                continue
            rows.append(pos)
            cols.append(col)
    return rows, cols


# ---------------------------------------------------------------------------
# Dense adjacency
# ---------------------------------------------------------------------------


def adjacency_matrix(graph: Graph) -> np.ndarray:
    """
    Dense boolean adjacency matrix of shape (n, n), n = number of nodes.

    Cell (i, j) is True iff the node at position i has at least one outgoing
    edge whose target id is the id of the node at position j.
    """
    n = len(graph)
    mat = np.zeros((n, n), dtype=bool)
    rows, cols = _edge_coordinates(graph)
    if rows:
        mat[np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64)] = True
    return mat


build_matrix = adjacency_matrix


# ---------------------------------------------------------------------------
# Sparse views (python-graphblas)
# ---------------------------------------------------------------------------


def sparse_adjacency(graph: Graph) -> Matrix:
    """Adjacency as a GraphBLAS Matrix[BOOL]; parallel edges collapse to one entry."""
    n = len(graph)
    rows, cols = _edge_coordinates(graph)
    if not rows:
        return gb.Matrix(gb.dtypes.BOOL, nrows=n, ncols=n)
    return gb.Matrix.from_coo(
        np.asarray(rows, dtype=np.int64),
        np.asarray(cols, dtype=np.int64),
        np.ones(len(rows), dtype=bool),
        dtype=gb.dtypes.BOOL,
        nrows=n,
        ncols=n,
        dup_op=gb.binary.lor,
    )


def multiplicity_matrix(graph: Graph) -> Matrix:
    """
    Edge multiplicities as a GraphBLAS Matrix[INT64].

    Entry (i, j) counts the edges from position i to position j, so parallel
    edges and repeated self-loops are visible.
    """
    n = len(graph)
    rows, cols = _edge_coordinates(graph)
    if not rows:
        return gb.Matrix(gb.dtypes.INT64, nrows=n, ncols=n)
    return gb.Matrix.from_coo(
        np.asarray(rows, dtype=np.int64),
        np.asarray(cols, dtype=np.int64),
        np.ones(len(rows), dtype=np.int64),
        dtype=gb.dtypes.INT64,
        nrows=n,
        ncols=n,
        dup_op=gb.binary.plus,
    )


def _dense_vector(vec: gb.Vector, size: int) -> np.ndarray:
    out = np.zeros(size, dtype=np.int64)
    indices, values = vec.to_coo()
    if len(indices):
        out[np.asarray(indices, dtype=np.int64)] = values
    return out


def degrees(graph: Graph) -> Tuple[np.ndarray, np.ndarray]:
    """
    Out- and in-degree per node position, counting only edges whose target
    is inside the graph.

    Implemented as row/column reductions of the multiplicity matrix.
    """
    n = len(graph)
    if n == 0:
        empty = np.zeros(0, dtype=np.int64)
        return empty, empty.copy()

    mat = multiplicity_matrix(graph)
    out_vec = mat.reduce_rowwise(gb.monoid.plus).new()
    in_vec = mat.reduce_columnwise(gb.monoid.plus).new()
    return _dense_vector(out_vec, n), _dense_vector(in_vec, n)


# ---------------------------------------------------------------------------
# Structural copy
# ---------------------------------------------------------------------------


def copy_graph(
    graph: Graph,
    *,
    preserve_attributes: bool = True,
    settings: Optional[AlgebraSettings] = None,
) -> Graph:
    """
    Return a structural copy of `graph` on the same allocator.

    - One new node per node, same labels, same order, fresh ids.
    - One new edge per True cell of the adjacency matrix. It takes the
      label and weight of the first original edge between that pair; with
      preserve_attributes=False it takes the configured copied-edge defaults.
    - Parallel edges collapse to one and edges leaving the graph are dropped,
      exactly as in the adjacency matrix.

    If the allocator runs out of ids the partial copy is destroyed and the
    error propagates; the source graph is never modified.
    """
    settings = settings or get_settings().algebra
    mat = adjacency_matrix(graph)
    originals = list(graph)

    copy = graph.sibling()
    try:
        for node in originals:
            copy.create_node(node.label)

        copies = list(copy)
        for i, j in np.argwhere(mat):
            source, target = originals[int(i)], originals[int(j)]
            if preserve_attributes:
                template = source.edges.first_to(target.id)
                label, weight = template.label, template.weight  # cell is True, so it exists
            else:
                label, weight = settings.copied_edge_label, settings.copied_edge_weight
            new_source, new_target = copies[int(i)], copies[int(j)]
            new_source.edges.insert_back(
                construct_edge(
                    copy.allocator, weight, label, (new_source.id, new_target.id)
                )
            )
    except IdAllocatorError:
        copy.destroy()
        raise

    logger.debug(
        "Copied graph: %d nodes, %d edges (from %d edges)",
        len(copy), copy.edge_count(), graph.edge_count(),
    )
    return copy

