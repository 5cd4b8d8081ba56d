"""
Revit API adapters for the section trace engine.

Notes
-----
- Must be importable under pytest (outside Revit). Do not import Autodesk at module import time.
- Conversion helpers are duck-typed (XYZ-like .X/.Y/.Z, Curve-like GetEndPoint) so they
  can be exercised with stubs; Revit-only calls happen inside RevitCollaborators methods.
- Duplication and any other document writes must run inside the host's open Transaction.
"""

from ..config import DEFAULT_TRACE_CATEGORIES
from ..core.brep import Arc3D, Edge, Face, Instance, Line3D, PolyCurve3D, Solid
from ..core.layers import LayeredAssembly, MaterialLayer
from ..core.math_utils import Transform3D, as_xyz, sub


def _elem_id_value(eid):
    if eid is None:
        return None
    return getattr(eid, "IntegerValue", getattr(eid, "Value", eid))


def transform_from_revit(t):
    """Revit Transform (Origin, BasisX/Y/Z) -> Transform3D."""
    if t is None:
        return Transform3D.identity()
    return Transform3D(origin=t.Origin, basis_x=t.BasisX, basis_y=t.BasisY, basis_z=t.BasisZ)


def curve_from_revit(curve):
    """Convert a Revit Curve into a Line3D, Arc3D or PolyCurve3D.

    Unbound curves (full circles, infinite lines) have no endpoints and
    raise ValueError so the traverser records the edge as unreadable.
    """
    if curve is None:
        return None
    if getattr(curve, "IsBound", True) is False:
        raise ValueError("unbound {0} cannot be traced".format(type(curve).__name__))

    p0 = curve.GetEndPoint(0)
    p1 = curve.GetEndPoint(1)

    if hasattr(curve, "Center") and hasattr(curve, "Radius"):
        mid = None
        evaluate = getattr(curve, "Evaluate", None)
        if evaluate is not None:
            mid = evaluate(0.5, True)
        return Arc3D(p0, p1, curve.Center, mid=mid)

    if type(curve).__name__ == "Line" or hasattr(curve, "Direction"):
        return Line3D(p0, p1)

    tessellate = getattr(curve, "Tessellate", None)
    if tessellate is not None:
        pts = list(tessellate())
        if len(pts) >= 2:
            return PolyCurve3D(pts)
    return PolyCurve3D([p0, p1])


def _face_node(face):
    def loops():
        out = []
        for edge_array in face.EdgeLoops:
            out.append([Edge(lambda e=edge: curve_from_revit(e.AsCurve())) for edge in edge_array])
        return out

    return Face(loops)


def brep_from_geometry(geom):
    """Wrap a Revit GeometryElement as B-rep nodes.

    Solids, curves and geometry instances become lazy nodes; anything else
    (meshes, points, polylines) is passed through so the traverser can record
    it as unsupported.
    """
    if geom is None:
        return []

    nodes = []
    for obj in geom:
        if obj is None:
            continue
        if hasattr(obj, "GetSymbolGeometry"):
            nodes.append(Instance(
                lambda g=obj: brep_from_geometry(g.GetSymbolGeometry()),
                transform_from_revit(getattr(obj, "Transform", None)),
            ))
        elif hasattr(obj, "Faces"):
            volume = getattr(obj, "Volume", None)
            nodes.append(Solid(lambda s=obj: [_face_node(f) for f in s.Faces], volume=volume))
        elif hasattr(obj, "GetEndPoint"):
            nodes.append(curve_from_revit(obj))
        else:
            nodes.append(obj)
    return nodes


def view_definition_from_view(view):
    """Build the orchestrator's view definition from a section/detail/elevation view.

    The crop box transform maps view-local coordinates to model space, and
    its Min/Max are already view-local, so no corner projection is needed.
    """
    crop_box = getattr(view, "CropBox", None)
    if crop_box is None:
        return None
    return {
        "transform": transform_from_revit(getattr(crop_box, "Transform", None)),
        "crop_min": crop_box.Min,
        "crop_max": crop_box.Max,
        "view_id": _elem_id_value(getattr(view, "Id", None)),
        "name": getattr(view, "Name", None),
        "view_type": str(getattr(view, "ViewType", "")) or None,
    }


def material_name(doc, material_id):
    """Material name for a layer; "Default" for invalid ids or missing materials."""
    if material_id is None or _elem_id_value(material_id) in (None, -1):
        return "Default"
    material = doc.GetElement(material_id)
    name = getattr(material, "Name", None) if material is not None else None
    return name or "Default"


def projected_extents(frame, bbox):
    """Project all 8 corners of a (possibly transformed) bounding box into the view.

    Returns:
        (xmin, ymin, xmax, ymax) in view-local coordinates
    """
    mn = as_xyz(bbox.Min)
    mx = as_xyz(bbox.Max)
    corners = [
        (mn[0], mn[1], mn[2]), (mx[0], mn[1], mn[2]), (mn[0], mx[1], mn[2]), (mx[0], mx[1], mn[2]),
        (mn[0], mn[1], mx[2]), (mx[0], mn[1], mx[2]), (mn[0], mx[1], mx[2]), (mx[0], mx[1], mx[2]),
    ]
    t = getattr(bbox, "Transform", None)
    if t is not None:
        tr = transform_from_revit(t)
        corners = [tr.of_point(c) for c in corners]

    uv = [frame.to_view_plane(c) for c in corners]
    xs = [p[0] for p in uv]
    ys = [p[1] for p in uv]
    return (min(xs), min(ys), max(xs), max(ys))


def _compound_assembly(element, host_type, frame, view, doc, direction, orientation, default_category):
    if host_type is None:
        return None
    cs = host_type.GetCompoundStructure()
    if cs is None:
        return None

    bbox = element.get_BoundingBox(view)
    if bbox is None:
        return None

    layers = [MaterialLayer(material_name(doc, layer.MaterialId), layer.Width) for layer in cs.GetLayers()]
    category = getattr(getattr(element, "Category", None), "Name", None) or default_category

    return LayeredAssembly(
        element_id=_elem_id_value(getattr(element, "Id", None)),
        layers=layers,
        direction=direction,
        extents=projected_extents(frame, bbox),
        thickness=cs.GetWidth(),
        orientation=orientation,
        category=category,
    )


def assembly_from_wall(wall, frame, view, doc):
    """Read a wall's compound structure as a LayeredAssembly (None when not layered)."""
    location = getattr(wall, "Location", None)
    loc_curve = getattr(location, "Curve", None)
    if loc_curve is None:
        return None
    direction = sub(as_xyz(loc_curve.GetEndPoint(1)), as_xyz(loc_curve.GetEndPoint(0)))
    orientation = getattr(wall, "Orientation", None)

    return _compound_assembly(
        wall, getattr(wall, "WallType", None), frame, view, doc,
        direction=direction,
        orientation=as_xyz(orientation) if orientation is not None else None,
        default_category="Walls",
    )


def assembly_from_floor_or_roof(element, frame, view, doc):
    """Read a floor or roof compound structure; layer 0 is the top face.

    Layers stack vertically, so the assembly carries the model up vector as
    its exterior orientation and no centerline direction.
    """
    if hasattr(element, "FloorType"):
        host_type, default_category = element.FloorType, "Floors"
    elif hasattr(element, "RoofType"):
        host_type, default_category = element.RoofType, "Roofs"
    else:
        return None
    return _compound_assembly(
        element, host_type, frame, view, doc,
        direction=None,
        orientation=(0.0, 0.0, 1.0),
        default_category=default_category,
    )


class RevitCollaborators(object):
    """Collaborator implementation backed by a live Revit document.

    Args:
        doc: Revit Document
        source_view: Section / detail / elevation view being traced
        target_view: Drafting view receiving duplicated annotation (optional)
        diag: Diagnostics (optional) for per-category collection failures
    """

    def __init__(self, doc, source_view, target_view=None, diag=None):
        self.doc = doc
        self.source_view = source_view
        self.target_view = target_view
        self.diag = diag
        self._geom_options = None

    def view_definition(self, view):
        d = view_definition_from_view(view)
        if d is not None:
            d["line_styles"] = self._line_style_names()
        return d

    def _line_style_names(self):
        from Autodesk.Revit.DB import BuiltInCategory, FilteredElementCollector, GraphicsStyle

        lines_cat_id = int(BuiltInCategory.OST_Lines)
        names = []
        for gs in FilteredElementCollector(self.doc).OfClass(GraphicsStyle):
            cat = getattr(gs, "GraphicsStyleCategory", None)
            parent = getattr(cat, "Parent", None)
            if parent is not None and _elem_id_value(parent.Id) == lines_cat_id:
                names.append(gs.Name)
        return names

    def _category_collector(self, view, bic_name):
        from Autodesk.Revit.DB import BuiltInCategory, FilteredElementCollector

        if not hasattr(BuiltInCategory, bic_name):
            return []
        bic = getattr(BuiltInCategory, bic_name)
        return FilteredElementCollector(self.doc, view.Id).OfCategory(bic).WhereElementIsNotElementType()

    def visible_elements(self, view, categories=DEFAULT_TRACE_CATEGORIES):
        elements = []
        for bic_name in categories:
            try:
                elements.extend(list(self._category_collector(view, bic_name)))
            except Exception as e:
                if self.diag is None:
                    raise
                self.diag.warn(
                    phase="collect",
                    callsite="RevitCollaborators.visible_elements",
                    message="Error processing category {0}".format(bic_name),
                    view_id=_elem_id_value(getattr(view, "Id", None)),
                    extra={"exc_type": type(e).__name__, "exc": str(e)},
                )
        return elements

    def _options(self):
        if self._geom_options is None:
            from Autodesk.Revit.DB import Options

            opts = Options()
            opts.View = self.source_view
            opts.IncludeNonVisibleObjects = False
            opts.ComputeReferences = False
            self._geom_options = opts
        return self._geom_options

    def read_geometry(self, element):
        geom = element.get_Geometry(self._options())
        if geom is None:
            return None
        return brep_from_geometry(geom)

    def read_assembly(self, element, frame):
        if hasattr(element, "WallType"):
            return assembly_from_wall(element, frame, self.source_view, self.doc)
        return assembly_from_floor_or_roof(element, frame, self.source_view, self.doc)

    def duplicate_annotations(self, view, categories):
        if self.target_view is None:
            return 0

        from Autodesk.Revit.DB import CopyPasteOptions, ElementId, ElementTransformUtils, Transform
        from System.Collections.Generic import List

        ids = List[ElementId]()
        for bic_name in categories:
            for elem in self._category_collector(view, bic_name):
                ids.Add(elem.Id)
        if ids.Count == 0:
            return 0

        copied = ElementTransformUtils.CopyElements(
            view, ids, self.target_view, Transform.Identity, CopyPasteOptions()
        )
        return [_elem_id_value(eid) for eid in copied]

    def element_id(self, element):
        return _elem_id_value(getattr(element, "Id", None))

    def category_name(self, element):
        cat = getattr(element, "Category", None)
        return getattr(cat, "Name", None) or "Unknown"
