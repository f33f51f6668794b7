from __future__ import annotations

"""Exception taxonomy shared by the graph store and graph operations."""


class GraphError(Exception):
    """Base exception for graph store and graph algebra failures."""
    pass


class NotFoundError(GraphError, LookupError):
    """An identifier, label or stored record does not resolve."""
    pass


class NodeNotFoundError(NotFoundError):
    """A node id or label required by an operation is not in the graph."""

    def __init__(self, node_ref: object, where: str = "graph") -> None:
        super().__init__(f"Node {node_ref!r} not found in {where}")
        self.node_ref = node_ref


class EdgeNotFoundError(NotFoundError):
    """An edge id required by an operation is not in the graph."""

    def __init__(self, edge_id: int) -> None:
        super().__init__(f"Edge {edge_id!r} not found")
        self.edge_id = edge_id


class InvalidPreconditionError(GraphError, ValueError):
    """The inputs of an operation are inconsistent; nothing was changed."""
    pass
