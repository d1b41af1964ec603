"""Service layer: one action per service, each returning a ServiceResult.

Services may import from domain, config, infrastructure and engines.
They must never import from commands or output.
"""
