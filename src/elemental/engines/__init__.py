"""Execution engines: installer, builder, customizer, kernel modules.

Engines perform the actual system mutation and are provided by plugins
discovered through pluggy (entry-point group ``elemental.engines``). This
package only defines the contracts and the discovery layer.
"""

from elemental.engines.hookspecs import hookimpl
from elemental.engines.manager import EngineManager

__all__ = ["EngineManager", "hookimpl"]
