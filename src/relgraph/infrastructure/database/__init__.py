"""SQLite database engine and schema via SQLAlchemy Core."""

from relgraph.infrastructure.database.engine import create_db_engine, init_database
from relgraph.infrastructure.database.schema import (
    account_props,
    event_wal,
    graphs,
    labeled_edges,
    labeled_nodes,
    metadata,
    relationship_props,
    relationships,
)

__all__ = [
    "account_props",
    "create_db_engine",
    "event_wal",
    "graphs",
    "init_database",
    "labeled_edges",
    "labeled_nodes",
    "metadata",
    "relationship_props",
    "relationships",
]
