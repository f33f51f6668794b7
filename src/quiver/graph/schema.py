from __future__ import annotations

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    BigInteger,
    String,
    DateTime,
    ForeignKey,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

graphs = Table(
    "graphs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False, unique=True),
    Column("created_at", DateTime, nullable=False),
    Column("description", String, nullable=True),
)

nodes = Table(
    "nodes",
    metadata,
    Column("graph_id", Integer, ForeignKey("graphs.id"), primary_key=True),
    Column("position", BigInteger, primary_key=True),  # 0..N-1, graph order
    Column("node_id", BigInteger, nullable=False),  # id at the time of storing
    Column("label", String, nullable=False),
)

edges = Table(
    "edges",
    metadata,
    Column("graph_id", Integer, ForeignKey("graphs.id"), primary_key=True),
    Column("source_position", BigInteger, primary_key=True),
    Column("position", BigInteger, primary_key=True),  # order within the source node
    Column("edge_id", BigInteger, nullable=False),
    Column("target_id", BigInteger, nullable=False),
    Column("target_position", BigInteger, nullable=True),  # NULL: target outside the graph
    Column("label", String, nullable=False),
    Column("weight", BigInteger, nullable=False),
)


def create_graph_schema(engine: Engine) -> None:
    """Create the graphs/nodes/edges tables if they do not exist."""
    with engine.begin() as conn:
        metadata.create_all(conn)
