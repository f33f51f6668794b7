from __future__ import annotations

from typing import Any, List, Mapping, Sequence

import pandas as pd

from .core import Graph
from .matrix import adjacency_matrix, degrees

NODE_COLUMNS = ("position", "id", "label", "out_degree", "in_degree", "self_loops")
EDGE_COLUMNS = ("id", "source", "target", "source_label", "target_label", "label", "weight")


def _rows_to_df(rows: List[Mapping[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    """
    Convert a list of row mappings to a DataFrame, keeping the columns when
    there are no rows.
    """
    if not rows:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame(rows, columns=list(columns))


# ---------------------------------------------------------------------------
# 1. Node listing
# ---------------------------------------------------------------------------

def node_frame(graph: Graph) -> pd.DataFrame:
    """
    One row per node in graph order.

    Degrees only count edges whose target is inside the graph; `out_degree`
    can therefore be lower than the node's number of edges.
    """
    out_deg, in_deg = degrees(graph)
    rows = [
        {
            "position": pos,
            "id": node.id,
            "label": node.label,
            "out_degree": int(out_deg[pos]),
            "in_degree": int(in_deg[pos]),
            "self_loops": node.edges.self_loop_count(),
        }
        for pos, node in enumerate(graph)
    ]
    return _rows_to_df(rows, NODE_COLUMNS)


# ---------------------------------------------------------------------------
# 2. Edge listing (connections)
# ---------------------------------------------------------------------------

def edge_frame(graph: Graph) -> pd.DataFrame:
    """
    One row per edge, grouped by source node in graph order.

    `target_label` is None for edges pointing outside the graph.
    """
    labels = {node.id: node.label for node in graph}
    rows = [
        {
            "id": edge.id,
            "source": edge.source,
            "target": edge.target,
            "source_label": node.label,
            "target_label": labels.get(edge.target),
            "label": edge.label,
            "weight": edge.weight,
        }
        for node in graph
        for edge in node.edges
    ]
    return _rows_to_df(rows, EDGE_COLUMNS)


# ---------------------------------------------------------------------------
# 3. Adjacency matrix
# ---------------------------------------------------------------------------

def adjacency_frame(graph: Graph) -> pd.DataFrame:
    """Boolean adjacency matrix indexed by node id on both axes."""
    ids = graph.node_ids()
    frame = pd.DataFrame(
        adjacency_matrix(graph),
        index=pd.Index(ids, name="source"),
        columns=pd.Index(ids, name="target"),
    )
    return frame
