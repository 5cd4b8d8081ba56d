"""
Section Trace Pipeline - Main Processing Logic.

Drives one trace pass over a source view:
- Validate the view frame (the only fatal step)
- Per visible element: B-rep traversal → curve projection
- Per layered assembly: material band synthesis
- Verbatim duplication of pre-existing detail items and annotations
- Aggregate counters and the non-fatal error list

Core principles:
1. A trace call either fails outright (invalid view) or returns a result
2. Failures are isolated to one curve, one layer or one element
3. Every dropped curve or band is counted; nothing disappears silently
4. Output is only assembled here; the host decides how to persist it
"""

from .config import Config, ANNOTATION_CATEGORIES, DETAIL_CATEGORIES
from .core.diagnostics import Diagnostics
from .core.errors import DropReason, ErrorKind, FatalPrecondition, TraceError
from .core.layers import LayerClassifier
from .core.materials import MaterialTable, load_material_table
from .core.projector import CurveProjector
from .core.traverser import GeometryTraverser, read_element_geometry
from .core.view_frame import ViewFrame
from .revit.safe_api import safe_call_ex

_COUNTER_KEYS = (
    "elements_seen",
    "elements_skipped",
    "solids_skipped_empty",
    "curves_traversed",
    "traced_curves",
    "curves_clip_miss",
    "curves_degenerate",
    "arc_degraded",
    "assemblies",
    "bands",
    "bands_clip_miss",
    "bands_degenerate",
    "layers_skipped",
    "layers_too_thin",
    "classification_fallbacks",
    "copied_detail_elements",
    "copied_annotations",
)


def pick_line_style(names):
    """Choose the line style for traced curves.

    Prefers a style whose name contains "Medium", then "Thin", then the first
    available one.

    Example:
        >>> pick_line_style(["Thin Lines", "Medium Lines", "Wide Lines"])
        'Medium Lines'
        >>> pick_line_style([]) is None
        True
    """
    names = [n for n in (names or []) if n]
    for token in ("Medium", "Thin"):
        for n in names:
            if token in n:
                return n
    return names[0] if names else None


class TraceResult:
    """Everything one trace call produced. Owned by the caller.

    Attributes:
        curves: ProjectedLine / ProjectedArc list, in element order
        bands: Band list, in element and layer order
        counters: Per-category counts (see _COUNTER_KEYS)
        curves_by_category: Traced curve count per host category
        bands_by_category: Band count per host category
        layers_processed: Layer count per material name
        errors: TraceError list (non-fatal)
        diagnostics: Diagnostics recorder for this call
    """

    def __init__(self, frame, view_id=None, view_name=None, view_type=None, diagnostics=None):
        self.frame = frame
        self.view_id = view_id
        self.view_name = view_name
        self.view_type = view_type
        self.line_style = None
        self.curves = []
        self.bands = []
        self.counters = {k: 0 for k in _COUNTER_KEYS}
        self.curves_by_category = {}
        self.bands_by_category = {}
        self.layers_processed = {}
        self.errors = []
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def add_error(self, err, phase, callsite):
        self.errors.append(err)
        self.diagnostics.record_trace_error(err, phase, callsite, view_id=self.view_id)

    def bump(self, key, n=1):
        self.counters[key] = self.counters.get(key, 0) + n

    @property
    def error_messages(self):
        return [str(e) for e in self.errors]

    def to_dict(self, include_geometry=False):
        """JSON-safe summary of the pass."""
        d = {
            "success": True,
            "source_view_id": self.view_id,
            "source_view_name": self.view_name,
            "source_view_type": self.view_type,
            "line_style": self.line_style,
            "view_bounds": {
                "width": round(self.frame.width, 4),
                "height": round(self.frame.height, 4),
            },
            "statistics": dict(self.counters),
            "curves_by_category": dict(self.curves_by_category),
            "bands_by_category": dict(self.bands_by_category),
            "layers_processed": dict(self.layers_processed),
            "layers_analyzed": len(self.layers_processed),
            "errors": self.error_messages or None,
        }
        if include_geometry:
            d["curves"] = [c.to_dict() for c in self.curves]
            d["bands"] = [b.to_dict() for b in self.bands]
        return d

    def __repr__(self):
        return "TraceResult({0} curves, {1} bands, {2} errors)".format(
            len(self.curves), len(self.bands), len(self.errors)
        )


def _element_id(collab, element):
    fn = getattr(collab, "element_id", None)
    if fn is not None:
        return fn(element)
    eid = getattr(element, "Id", None)
    if eid is not None:
        return getattr(eid, "IntegerValue", eid)
    return getattr(element, "id", None)


def _category_name(collab, element):
    fn = getattr(collab, "category_name", None)
    if fn is not None:
        return fn(element) or "Unknown"
    return getattr(element, "category", None) or "Unknown"


def _copied_count(copied):
    if copied is None:
        return 0
    if isinstance(copied, int):
        return copied
    return len(list(copied))


class TraceOrchestrator:
    """Runs trace passes against a set of host collaborators.

    The collaborator object must provide:
        view_definition(view) -> dict (see ViewFrame.from_definition; optional
            keys view_id, name, view_type, line_styles)
        visible_elements(view, categories) -> iterable of elements
        read_geometry(element) -> B-rep nodes (or None)
        read_assembly(element, frame) -> LayeredAssembly or None
        duplicate_annotations(view, categories) -> new ids (or a count)
    and optionally element_id(element) / category_name(element).

    The material table is built once and shared read-only by every call.
    """

    def __init__(self, collaborators, table=None, cfg=None):
        self.collab = collaborators
        self.cfg = cfg if cfg is not None else Config()
        if table is None:
            if self.cfg.material_table_path:
                table = load_material_table(self.cfg.material_table_path)
            else:
                table = MaterialTable.default()
        self.table = table
        self.traverser = GeometryTraverser(max_depth=self.cfg.max_traversal_depth)

    def trace(self, view):
        """Trace one source view.

        Raises:
            FatalPrecondition: the view definition or crop bounds are invalid

        Returns:
            TraceResult
        """
        cfg = self.cfg
        diag = Diagnostics(max_events=cfg.max_diag_events)

        view_def, exc = safe_call_ex(
            diag, phase="view", callsite="view_definition",
            fn=lambda: self.collab.view_definition(view), default=None,
        )
        if exc is not None:
            raise FatalPrecondition("view definition unavailable: {0}".format(exc)) from exc
        if view_def is None:
            raise FatalPrecondition("view definition missing")

        frame = ViewFrame.from_definition(view_def, tol=cfg.basis_tolerance)

        view_type = view_def.get("view_type")
        if view_type is not None and cfg.supported_view_types and str(view_type) not in cfg.supported_view_types:
            raise FatalPrecondition(
                "View type '{0}' is not supported. Use {1} views.".format(view_type, ", ".join(cfg.supported_view_types))
            )

        result = TraceResult(
            frame,
            view_id=view_def.get("view_id"),
            view_name=view_def.get("name"),
            view_type=view_type,
            diagnostics=diag,
        )
        result.line_style = pick_line_style(view_def.get("line_styles"))

        projector = CurveProjector.from_config(frame, cfg)
        classifier = LayerClassifier.from_config(frame, self.table, cfg, diag=diag)

        if cfg.trace_model_geometry or cfg.synthesize_bands:
            elements, exc = safe_call_ex(
                diag, phase="collect", callsite="visible_elements",
                fn=lambda: list(self.collab.visible_elements(view, cfg.trace_categories) or []),
                default=[], context={"view_id": result.view_id},
            )
            if exc is not None:
                result.add_error(
                    TraceError.from_exception(ErrorKind.ELEMENT_EXTRACTION, exc, context="element enumeration failed"),
                    "collect", "visible_elements",
                )

            for element in elements:
                self._trace_element(element, frame, projector, classifier, result)

        if cfg.copy_detail_elements:
            result.bump("copied_detail_elements", self._duplicate(view, DETAIL_CATEGORIES, "detail elements", result))
        if cfg.copy_annotations:
            result.bump("copied_annotations", self._duplicate(view, ANNOTATION_CATEGORIES, "annotations", result))

        if cfg.verbose:
            c = result.counters
            print("[INFO] section_trace.pipeline: Traced {0} curves, {1} bands from {2} elements".format(
                c["traced_curves"], c["bands"], c["elements_seen"]))
            if c["elements_skipped"]:
                print("[WARN] section_trace.pipeline: Skipped {0} elements due to errors".format(c["elements_skipped"]))
            if result.errors:
                print("[WARN] section_trace.pipeline: {0} non-fatal errors recorded".format(len(result.errors)))

        return result

    def _trace_element(self, element, frame, projector, classifier, result):
        cfg = self.cfg
        elem_id, _ = safe_call_ex(
            result.diagnostics, phase="collect", callsite="element_id",
            fn=lambda: _element_id(self.collab, element), default=None,
        )
        category, _ = safe_call_ex(
            result.diagnostics, phase="collect", callsite="category_name",
            fn=lambda: _category_name(self.collab, element), default="Unknown",
            context={"elem_id": elem_id},
        )
        result.bump("elements_seen")

        if cfg.trace_model_geometry:
            nodes, err = read_element_geometry(self.collab.read_geometry, element, elem_id=elem_id)
            if err is not None:
                result.add_error(err, "geometry", "read_geometry")
                result.bump("elements_skipped")
                return

            curves, errors = self.traverser.traverse(nodes, context=elem_id, counters=result.counters)
            for e in errors:
                result.add_error(e, "geometry", "GeometryTraverser.traverse")

            for curve, _owner in curves:
                result.bump("curves_traversed")
                self._project_one(curve, elem_id, category, projector, result)

        if cfg.synthesize_bands:
            self._classify_element(element, elem_id, frame, classifier, result)

    def _project_one(self, curve, elem_id, category, projector, result):
        try:
            projected, reason = projector.project(curve)
        except Exception as e:
            result.add_error(
                TraceError.from_exception(ErrorKind.PROJECTION, e, elem_id=elem_id, context="curve projection failed"),
                "projection", "CurveProjector.project",
            )
            return

        if projected is None:
            if reason is DropReason.CLIP_MISS:
                result.bump("curves_clip_miss")
            else:
                result.bump("curves_degenerate")
            return

        if projector.is_degraded_arc(curve, projected):
            result.bump("arc_degraded")
        result.curves.append(projected)
        result.bump("traced_curves")
        result.curves_by_category[category] = result.curves_by_category.get(category, 0) + 1

    def _classify_element(self, element, elem_id, frame, classifier, result):
        read_assembly = getattr(self.collab, "read_assembly", None)
        if read_assembly is None:
            return

        assembly, exc = safe_call_ex(
            result.diagnostics, phase="layers", callsite="read_assembly",
            fn=lambda: read_assembly(element, frame), default=None,
            context={"elem_id": elem_id},
        )
        if exc is not None:
            result.add_error(
                TraceError.from_exception(ErrorKind.ELEMENT_EXTRACTION, exc, elem_id=elem_id,
                                          context="layered assembly read failed"),
                "layers", "read_assembly",
            )
            return
        if assembly is None:
            return

        bands, errors, stats = classifier.classify(assembly)
        result.bump("assemblies")
        result.bands.extend(bands)
        if bands:
            by_cat = result.bands_by_category
            by_cat[assembly.category] = by_cat.get(assembly.category, 0) + len(bands)
        for e in errors:
            result.add_error(e, "layers", "LayerClassifier.classify")
        for key in ("bands", "bands_clip_miss", "bands_degenerate", "layers_skipped",
                    "layers_too_thin", "classification_fallbacks"):
            result.bump(key, stats[key])
        for material, n in stats["materials"].items():
            result.layers_processed[material] = result.layers_processed.get(material, 0) + n

    def _duplicate(self, view, categories, label, result):
        copied, exc = safe_call_ex(
            result.diagnostics, phase="duplicate", callsite="duplicate_annotations",
            fn=lambda: self.collab.duplicate_annotations(view, categories), default=None,
            context={"view_id": result.view_id, "categories": list(categories)},
        )
        if exc is not None:
            result.add_error(
                TraceError.from_exception(ErrorKind.DUPLICATION, exc, context="Error copying {0}".format(label)),
                "duplicate", "duplicate_annotations",
            )
            return 0
        return _copied_count(copied)


def trace_view(view, collaborators, table=None, cfg=None):
    """Trace a single view with a throwaway orchestrator.

    Example:
        >>> result = trace_view(view, collaborators)  # doctest: +SKIP
        >>> result.to_dict()["statistics"]["traced_curves"]  # doctest: +SKIP
        42
    """
    return TraceOrchestrator(collaborators, table=table, cfg=cfg).trace(view)
