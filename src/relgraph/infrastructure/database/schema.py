"""SQLAlchemy Core table definitions for the relgraph database.

One row in ``graphs`` per instance; every other graph table is keyed by
``graph_id`` and cascades on delete. Property payloads are stored as
JSON objects in ``payload`` columns.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

metadata = MetaData()

graphs = Table(
    "graphs",
    metadata,
    Column("id", Text, primary_key=True),
    Column("kind", Text, nullable=False),  # relationship | beneficiary
    Column("max_out_degree", Integer),  # relationship graphs; NULL = unbounded
    Column("max_as_benefactor", Integer),  # beneficiary links
    Column("max_as_beneficiary", Integer),  # beneficiary links
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
    CheckConstraint("kind IN ('relationship', 'beneficiary')", name="ck_graphs_kind"),
)

relationships = Table(
    "relationships",
    metadata,
    Column("graph_id", Text, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False),
    Column("source", Text, nullable=False),
    Column("target", Text, nullable=False),
    PrimaryKeyConstraint("graph_id", "source", "target"),
)

account_props = Table(
    "account_props",
    metadata,
    Column("graph_id", Text, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False),
    Column("account", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON object
    PrimaryKeyConstraint("graph_id", "account"),
)

relationship_props = Table(
    "relationship_props",
    metadata,
    Column("graph_id", Text, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False),
    Column("source", Text, nullable=False),
    Column("target", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON object
    PrimaryKeyConstraint("graph_id", "source", "target"),
)

labeled_nodes = Table(
    "labeled_nodes",
    metadata,
    Column("graph_id", Text, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False),
    Column("node", Text, nullable=False),
    Column("incoming", Integer, nullable=False, default=0, server_default="0"),
    PrimaryKeyConstraint("graph_id", "node"),
)

labeled_edges = Table(
    "labeled_edges",
    metadata,
    Column("graph_id", Text, ForeignKey("graphs.id", ondelete="CASCADE"), nullable=False),
    Column("source", Text, nullable=False),
    Column("target", Text, nullable=False),
    Column("label", Text, nullable=False),
    PrimaryKeyConstraint("graph_id", "source", "target", "label"),
)

Index("ix_relationships_target", relationships.c.graph_id, relationships.c.target)
Index("ix_labeled_edges_target", labeled_edges.c.graph_id, labeled_edges.c.target)

event_wal = Table(
    "event_wal",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),  # pending | completed | failed | dead_letter
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("graph_id", Text),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)
