from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, delete, insert, literal, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ..config import DatabaseSettings, get_settings
from ..ids import IdAllocator
from ..log import getLogger
from .core import Graph
from .errors import NotFoundError
from .schema import edges, graphs, nodes

logger = getLogger(__name__)


def get_engine(settings: Optional[DatabaseSettings] = None) -> Engine:
    """Create an engine from DatabaseSettings (defaults to the app settings)."""
    settings = settings or get_settings().database
    return create_engine(settings.url, echo=settings.echo)


# ---------------------------------------------------------------------------
# Graph records
# ---------------------------------------------------------------------------


def create_graph_record(
    session: Session,
    name: str,
    *,
    description: Optional[str] = None,
) -> int:
    """
    Insert a new row into graphs and return its id.
    """
    now = datetime.now(timezone.utc)
    result = session.execute(
        insert(graphs).values(
            name=name,
            created_at=now,
            description=description,
        )
    )
    return int(result.inserted_primary_key[0])


def list_graphs(session: Session) -> List[Mapping[str, Any]]:
    """Return id, name, created_at and description of every stored graph."""
    result = session.execute(
        select(graphs.c.id, graphs.c.name, graphs.c.created_at, graphs.c.description)
        .order_by(graphs.c.id)
    )
    return list(result.mappings())


def _require_record(session: Session, graph_id: int) -> None:
    found = session.execute(
        select(graphs.c.id).where(graphs.c.id == literal(graph_id))
    ).first()
    if found is None:
        raise NotFoundError(f"No stored graph with id {graph_id}")


# ---------------------------------------------------------------------------
# Store Graph -> DB
# ---------------------------------------------------------------------------


def _clear_structure(session: Session, graph_id: int) -> None:
    session.execute(delete(edges).where(edges.c.graph_id == literal(graph_id)))
    session.execute(delete(nodes).where(nodes.c.graph_id == literal(graph_id)))


def store_graph(session: Session, graph: Graph, graph_id: int) -> None:
    """
    Persist the Graph's nodes and edges under an existing graph record.

    - Removes any structure previously stored for graph_id.
    - Node order and per-node edge order are kept as positions.
    - Edge targets are stored as positions so they survive id reassignment
      on load; targets outside the graph are kept with a NULL position.
    """
    _require_record(session, graph_id)
    _clear_structure(session, graph_id)

    position: Dict[int, int] = {node.id: pos for pos, node in enumerate(graph)}

    node_rows = [
        {
            "graph_id": graph_id,
            "position": pos,
            "node_id": node.id,
            "label": node.label,
        }
        for pos, node in enumerate(graph)
    ]
    if node_rows:
        session.execute(insert(nodes), node_rows)

    edge_rows = [
        {
            "graph_id": graph_id,
            "source_position": source_pos,
            "position": edge_pos,
            "edge_id": edge.id,
            "target_id": edge.target,
            "target_position": position.get(edge.target),
            "label": edge.label,
            "weight": edge.weight,
        }
        for source_pos, node in enumerate(graph)
        for edge_pos, edge in enumerate(node.edges)
    ]
    if edge_rows:
        session.execute(insert(edges), edge_rows)

    logger.debug(
        "Stored graph %d: %d nodes, %d edges", graph_id, len(node_rows), len(edge_rows)
    )


# ---------------------------------------------------------------------------
# Load DB -> Graph
# ---------------------------------------------------------------------------


def load_stored_graph(
    session: Session,
    graph_id: int,
    allocator: Optional[IdAllocator] = None,
) -> Graph:
    """
    Rebuild a Graph from its stored nodes and edges.

    Ids are reassigned by `allocator` (a fresh one if omitted). Edges stored
    with a target outside the graph cannot be re-linked and are skipped.
    """
    _require_record(session, graph_id)

    node_rows = session.execute(
        select(nodes.c.position, nodes.c.label)
        .where(nodes.c.graph_id == literal(graph_id))
        .order_by(nodes.c.position)
    ).all()

    edge_rows = session.execute(
        select(
            edges.c.source_position,
            edges.c.target_position,
            edges.c.label,
            edges.c.weight,
        )
        .where(edges.c.graph_id == literal(graph_id))
        .order_by(edges.c.source_position, edges.c.position)
    ).all()

    graph = Graph(allocator)
    by_position = {int(pos): graph.create_node(str(label)).id for pos, label in node_rows}

    skipped = 0
    for source_pos, target_pos, label, weight in edge_rows:
        if target_pos is None or int(target_pos) not in by_position:
            skipped += 1
            continue
        graph.create_edge(
            by_position[int(source_pos)],
            by_position[int(target_pos)],
            weight=int(weight),
            label=str(label),
        )

    if skipped:
        logger.debug("Graph %d: skipped %d edges with targets outside the graph", graph_id, skipped)
    return graph


def delete_stored_graph(session: Session, graph_id: int) -> bool:
    """Remove a graph record and its structure. Returns False if it did not exist."""
    try:
        _require_record(session, graph_id)
    except NotFoundError:
        return False
    _clear_structure(session, graph_id)
    session.execute(delete(graphs).where(graphs.c.id == literal(graph_id)))
    return True
