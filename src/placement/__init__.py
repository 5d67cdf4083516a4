"""
Placement package - module to device assignment.

Two strategies share the `ModulePlacement` interface: a static mapping
and an edge-ward search that keeps modules close to the sensors.
"""

from .base import ModulePlacement
from .mapping import ModuleMapping
from .static import ModulePlacementMapping
from .edgewards import ModulePlacementEdgewards
from .candidate_selection import create_module_mapping

__all__ = ['ModulePlacement', 'ModuleMapping', 'ModulePlacementMapping',
           'ModulePlacementEdgewards', 'create_module_mapping']
