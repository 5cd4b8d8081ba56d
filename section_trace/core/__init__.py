"""
Core data structures and algorithms for the section trace engine.

Modules:
- view_frame: ViewFrame (origin, basis, crop)
- brep: Solid / Curve / Instance nodes and 3D curve types
- traverser: GeometryTraverser
- projector: CurveProjector, ProjectedLine, ProjectedArc
- clip: ClipFilter
- materials: MaterialMapping, MaterialTable
- layers: LayerClassifier, LayeredAssembly, Band
"""

from .errors import DropReason, ErrorKind, FatalPrecondition, TraceError
from .view_frame import ViewFrame
from .traverser import GeometryTraverser
from .projector import CurveProjector, ProjectedArc, ProjectedLine
from .clip import ClipFilter
from .materials import MaterialMapping, MaterialTable
from .layers import Band, LayerClassifier, LayeredAssembly, MaterialLayer

__all__ = [
    "DropReason",
    "ErrorKind",
    "FatalPrecondition",
    "TraceError",
    "ViewFrame",
    "GeometryTraverser",
    "CurveProjector",
    "ProjectedArc",
    "ProjectedLine",
    "ClipFilter",
    "MaterialMapping",
    "MaterialTable",
    "Band",
    "LayerClassifier",
    "LayeredAssembly",
    "MaterialLayer",
]
