"""
quiver.graph
============

Directed graph store and graph algebra.

Public API:

- Graph, Node, Edge       : in-memory store; nodes own their outgoing edges.
- construct_node/edge     : allocator-backed constructors.
- EdgeCollection          : ordered outgoing edges of one node.
- adjacency_matrix        : dense boolean matrix in graph order (numpy).
- sparse_adjacency        : the same as a GraphBLAS Matrix[BOOL].
- copy_graph              : structural copy with fresh ids.
- contract, contract_edge,
  complement              : in-place unary operations.
- union, cartesian,
  parallel, series        : binary operations returning a new graph.
- dumps/loads,
  save_graph/load_graph   : line-oriented text description.
- node_frame, edge_frame,
  adjacency_frame         : pandas views for inspection.

Persistence helpers live in quiver.graph.db and quiver.graph.schema.
"""

from __future__ import annotations

from .errors import (
    GraphError,
    NotFoundError,
    NodeNotFoundError,
    EdgeNotFoundError,
    InvalidPreconditionError,
)
from .edges import EdgeCollection
from .model import Edge, Node, construct_edge, construct_node
from .core import Graph, dedupe_labels
from .matrix import (
    adjacency_matrix,
    build_matrix,
    sparse_adjacency,
    multiplicity_matrix,
    degrees,
    copy_graph,
)
from .algebra import (
    contract,
    contract_edge,
    complement,
    union,
    cartesian,
    parallel,
    series,
)
from .text import GraphFormatError, dumps, loads, save_graph, load_graph
from .extract import node_frame, edge_frame, adjacency_frame

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "EdgeCollection",
    "construct_node",
    "construct_edge",
    "dedupe_labels",
    "adjacency_matrix",
    "build_matrix",
    "sparse_adjacency",
    "multiplicity_matrix",
    "degrees",
    "copy_graph",
    "contract",
    "contract_edge",
    "complement",
    "union",
    "cartesian",
    "parallel",
    "series",
    "dumps",
    "loads",
    "save_graph",
    "load_graph",
    "node_frame",
    "edge_frame",
    "adjacency_frame",
    "GraphError",
    "NotFoundError",
    "NodeNotFoundError",
    "EdgeNotFoundError",
    "InvalidPreconditionError",
    "GraphFormatError",
]
