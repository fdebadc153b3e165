"""Service layer — graph operations returning ServiceResult.

Services may import from the domain, config, infrastructure, and plugins layers.
They must never import from commands or output.
"""
