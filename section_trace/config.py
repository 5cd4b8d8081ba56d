"""
Configuration for the section trace engine.

Defines the Config class with every tolerance, budget and switch used by the
traverser, projector, layer classifier and orchestrator.
"""

# Model categories traced from the source view (BuiltInCategory names).
DEFAULT_TRACE_CATEGORIES = (
    "OST_Walls",
    "OST_Floors",
    "OST_Roofs",
    "OST_Ceilings",
    "OST_StructuralColumns",
    "OST_StructuralFraming",
    "OST_StructuralFoundation",
    "OST_Doors",
    "OST_Windows",
    "OST_Stairs",
    "OST_StairsRailing",
    "OST_GenericModel",
)

# Pre-existing view-specific elements duplicated verbatim into the drawing.
DETAIL_CATEGORIES = (
    "OST_DetailComponents",
    "OST_Lines",
    "OST_FilledRegion",
    "OST_InsulationLines",
)

ANNOTATION_CATEGORIES = (
    "OST_TextNotes",
    "OST_Dimensions",
    "OST_GenericAnnotation",
)

SUPPORTED_VIEW_TYPES = ("Section", "Detail", "Elevation")


class Config:
    """Configuration for the section trace engine.

    Attributes:
        curve_tolerance_ft (float): Endpoint bounds tolerance for curves (default: 0.1)
        min_curve_length_ft (float): Shorter projected curves are degenerate (default: 0.001)
        max_curve_length_ft (float): Longer projected curves are malformed (default: 10000.0)
        arc_radius_tolerance_ft (float): Max start/end radius mismatch for a projected arc (default: 0.001)
        band_clip_tolerance_ft (float): Crop margin used when clipping bands (default: 0.5)
        layer_min_width_in (float): Thinner layers get no band, printed inches (default: 1/64)
        band_min_height_ft (float): Clipped bands shorter than this are degenerate (default: 0.1)
        thickness_tolerance (float): Allowed |sum(widths) - thickness| (default: 1e-6)
        max_traversal_depth (int): Instance nesting cap for B-rep traversal (default: 32)
        basis_tolerance (float): Orthonormality tolerance for the view frame (default: 1e-6)
        trace_model_geometry (bool): Trace element edges (default: True)
        synthesize_bands (bool): Emit material bands for layered assemblies (default: True)
        copy_detail_elements (bool): Duplicate existing detail items (default: True)
        copy_annotations (bool): Duplicate existing annotations (default: True)
        trace_categories (tuple): Category names traced from the source view
        supported_view_types (tuple): View types accepted by the orchestrator
        material_table_path (str): Optional JSON material table (default: None = built-in table)
        max_diag_events (int): Diagnostics event cap per trace call (default: 200)
        verbose (bool): Print pass summaries (default: False)

    Commentary:
        ✔ Curve clipping (0.1 ft) is tighter than band clipping (0.5 ft)
        ✔ 1/64" layer epsilon matches the smallest width a drafter would draw
        ⚠ max_curve_length_ft rejects geometry, it never truncates it

    Example:
        >>> cfg = Config()
        >>> cfg.curve_tolerance_ft
        0.1
        >>> round(cfg.layer_min_width_ft, 6)
        0.001302
    """

    def __init__(
        self,
        curve_tolerance_ft=0.1,
        min_curve_length_ft=0.001,
        max_curve_length_ft=10000.0,
        arc_radius_tolerance_ft=0.001,
        band_clip_tolerance_ft=0.5,
        layer_min_width_in=1.0 / 64.0,
        band_min_height_ft=0.1,
        thickness_tolerance=1e-6,
        max_traversal_depth=32,
        basis_tolerance=1e-6,
        # Pass switches
        trace_model_geometry=True,
        synthesize_bands=True,
        copy_detail_elements=True,
        copy_annotations=True,
        trace_categories=DEFAULT_TRACE_CATEGORIES,
        supported_view_types=SUPPORTED_VIEW_TYPES,
        # Material table (JSON); None = built-in defaults
        material_table_path=None,
        # Debug and diagnostics
        max_diag_events=200,
        verbose=False,
    ):
        self.curve_tolerance_ft = float(curve_tolerance_ft)
        self.min_curve_length_ft = float(min_curve_length_ft)
        self.max_curve_length_ft = float(max_curve_length_ft)
        self.arc_radius_tolerance_ft = float(arc_radius_tolerance_ft)
        self.band_clip_tolerance_ft = float(band_clip_tolerance_ft)
        self.layer_min_width_in = float(layer_min_width_in)
        self.band_min_height_ft = float(band_min_height_ft)
        self.thickness_tolerance = float(thickness_tolerance)
        self.max_traversal_depth = int(max_traversal_depth)
        self.basis_tolerance = float(basis_tolerance)

        self.trace_model_geometry = bool(trace_model_geometry)
        self.synthesize_bands = bool(synthesize_bands)
        self.copy_detail_elements = bool(copy_detail_elements)
        self.copy_annotations = bool(copy_annotations)
        self.trace_categories = tuple(trace_categories or ())
        self.supported_view_types = tuple(supported_view_types or ())

        self.material_table_path = material_table_path
        self.max_diag_events = int(max_diag_events)
        self.verbose = bool(verbose)

        # Validate
        if self.curve_tolerance_ft < 0:
            raise ValueError("curve_tolerance_ft must be non-negative")
        if self.min_curve_length_ft <= 0:
            raise ValueError("min_curve_length_ft must be positive")
        if self.max_curve_length_ft <= self.min_curve_length_ft:
            raise ValueError("max_curve_length_ft must exceed min_curve_length_ft")
        if self.arc_radius_tolerance_ft < 0:
            raise ValueError("arc_radius_tolerance_ft must be non-negative")
        if self.band_clip_tolerance_ft < 0:
            raise ValueError("band_clip_tolerance_ft must be non-negative")
        if self.layer_min_width_in < 0:
            raise ValueError("layer_min_width_in must be non-negative")
        if self.band_min_height_ft < 0:
            raise ValueError("band_min_height_ft must be non-negative")
        if self.thickness_tolerance < 0:
            raise ValueError("thickness_tolerance must be non-negative")
        if self.max_traversal_depth <= 0:
            raise ValueError("max_traversal_depth must be positive")
        if self.basis_tolerance <= 0:
            raise ValueError("basis_tolerance must be positive")
        if self.max_diag_events < 0:
            raise ValueError("max_diag_events must be >= 0")

    @property
    def layer_min_width_ft(self):
        """Layer visibility epsilon in feet (converted from inches).

        Returns:
            float: Epsilon in feet (e.g., 1/64" = 0.0013 ft)
        """
        return self.layer_min_width_in / 12.0

    def __repr__(self):
        return (
            f"Config(curve_tolerance_ft={self.curve_tolerance_ft}, "
            f"min_curve_length_ft={self.min_curve_length_ft}, "
            f"max_curve_length_ft={self.max_curve_length_ft}, "
            f"band_clip_tolerance_ft={self.band_clip_tolerance_ft}, "
            f"layer_min_width_in={self.layer_min_width_in}, "
            f"max_traversal_depth={self.max_traversal_depth}, "
            f"trace_model_geometry={self.trace_model_geometry}, "
            f"synthesize_bands={self.synthesize_bands}, "
            f"copy_detail_elements={self.copy_detail_elements}, "
            f"copy_annotations={self.copy_annotations})"
        )

    def to_dict(self):
        """Export configuration as dictionary for JSON serialization."""
        return {
            "curve_tolerance_ft": self.curve_tolerance_ft,
            "min_curve_length_ft": self.min_curve_length_ft,
            "max_curve_length_ft": self.max_curve_length_ft,
            "arc_radius_tolerance_ft": self.arc_radius_tolerance_ft,
            "band_clip_tolerance_ft": self.band_clip_tolerance_ft,
            "layer_min_width_in": self.layer_min_width_in,
            "band_min_height_ft": self.band_min_height_ft,
            "thickness_tolerance": self.thickness_tolerance,
            "max_traversal_depth": self.max_traversal_depth,
            "basis_tolerance": self.basis_tolerance,
            "trace_model_geometry": self.trace_model_geometry,
            "synthesize_bands": self.synthesize_bands,
            "copy_detail_elements": self.copy_detail_elements,
            "copy_annotations": self.copy_annotations,
            "trace_categories": list(self.trace_categories),
            "supported_view_types": list(self.supported_view_types),
            "material_table_path": self.material_table_path,
            "max_diag_events": self.max_diag_events,
            "verbose": self.verbose,
        }

    @classmethod
    def from_dict(cls, d):
        """Create Config from dictionary (e.g., from JSON)."""
        return cls(
            curve_tolerance_ft=d.get("curve_tolerance_ft", 0.1),
            min_curve_length_ft=d.get("min_curve_length_ft", 0.001),
            max_curve_length_ft=d.get("max_curve_length_ft", 10000.0),
            arc_radius_tolerance_ft=d.get("arc_radius_tolerance_ft", 0.001),
            band_clip_tolerance_ft=d.get("band_clip_tolerance_ft", 0.5),
            layer_min_width_in=d.get("layer_min_width_in", 1.0 / 64.0),
            band_min_height_ft=d.get("band_min_height_ft", 0.1),
            thickness_tolerance=d.get("thickness_tolerance", 1e-6),
            max_traversal_depth=d.get("max_traversal_depth", 32),
            basis_tolerance=d.get("basis_tolerance", 1e-6),
            trace_model_geometry=d.get("trace_model_geometry", True),
            synthesize_bands=d.get("synthesize_bands", True),
            copy_detail_elements=d.get("copy_detail_elements", True),
            copy_annotations=d.get("copy_annotations", True),
            trace_categories=d.get("trace_categories", DEFAULT_TRACE_CATEGORIES),
            supported_view_types=d.get("supported_view_types", SUPPORTED_VIEW_TYPES),
            material_table_path=d.get("material_table_path"),
            max_diag_events=d.get("max_diag_events", 200),
            verbose=d.get("verbose", False),
        )
