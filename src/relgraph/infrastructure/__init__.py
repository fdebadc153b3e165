"""Infrastructure layer — SQLite persistence and the ledger.

This layer depends on stdlib, third-party libs (SQLAlchemy), and the
domain layer, whose graphs it loads and saves as snapshots.
It must never import from services, commands, or output.
"""
