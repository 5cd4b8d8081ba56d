"""
Section Trace Engine for Revit section, detail and elevation views.

Flattens a sectional view of the 3D model into a 2D drawing. Core principles:

1. The view frame is the only precondition; everything else degrades gracefully
2. Curves are flattened through the frame's inverse transform, never re-modelled
3. Layered assemblies become one band per material layer, in declaration order
4. Every dropped curve or band is counted; every failure is recorded, not raised

Modules:
- config: Tolerances, budgets and pass switches
- core.view_frame: View origin, orthonormal basis and crop rectangle
- core.brep / core.traverser: B-rep nodes and depth-capped traversal
- core.projector / core.clip: Curve flattening and crop tests
- core.materials / core.layers: Material lookup and band synthesis
- core.diagnostics / core.errors: Structured diagnostics and error taxonomy
- revit: Revit API adapters and the safe collaborator-call boundary
- pipeline: TraceOrchestrator and TraceResult
"""

__version__ = "1.0.0"

from .config import Config
from .core.errors import FatalPrecondition
from .pipeline import TraceOrchestrator, TraceResult, trace_view

__all__ = ["Config", "FatalPrecondition", "TraceOrchestrator", "TraceResult", "trace_view"]
