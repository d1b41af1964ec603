"""Infrastructure layer: processes, block devices, live media, workspaces.

Depends on stdlib and on domain errors/models only. It must never import
from services, commands, or output. Services bridge between the domain
and this layer.
"""
