"""Repositories encapsulating SQL for graph snapshots."""

from relgraph.infrastructure.repositories.graphs import GraphRecord, GraphRepository

__all__ = ["GraphRecord", "GraphRepository"]
