"""
Revit-specific integrations for the section trace engine.

Modules:
- adapters: Revit document collaborators and geometry conversion
- safe_api: Guarded collaborator calls with diagnostics
"""

from .adapters import (
    RevitCollaborators,
    assembly_from_floor_or_roof,
    assembly_from_wall,
    brep_from_geometry,
    curve_from_revit,
    view_definition_from_view,
)
from .safe_api import safe_call_ex

__all__ = [
    "RevitCollaborators",
    "brep_from_geometry",
    "curve_from_revit",
    "assembly_from_floor_or_roof",
    "assembly_from_wall",
    "view_definition_from_view",
    "safe_call_ex",
]
