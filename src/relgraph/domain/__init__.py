"""Domain layer — graphs, keyed stores, and their invariants.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
