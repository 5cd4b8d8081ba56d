"""
Boundary-representation traversal.

Flattens a tree of Solid / Curve / Instance nodes into (curve3d, context)
pairs using an explicit worklist instead of recursion, so nesting depth is
capped explicitly and every read failure stays local to the face, edge or
node that produced it.
"""

from .brep import NodeKind
from .errors import ErrorKind, TraceError
from .math_utils import Transform3D


def _try(fn):
    """Run fn(); return (value, None) or (None, exception)."""
    try:
        return fn(), None
    except Exception as e:
        return None, e


def read_element_geometry(reader, element, elem_id=None):
    """Read one element's top-level B-rep nodes via reader(element).

    Returns:
        (nodes, None) on success, ([], TraceError) when the element must be
        skipped. A None result from the reader means "no geometry in this
        view" and is not an error.
    """
    nodes, exc = _try(lambda: reader(element))
    if exc is not None:
        return [], TraceError.from_exception(
            ErrorKind.ELEMENT_EXTRACTION, exc, elem_id=elem_id, context="geometry read failed"
        )
    if nodes is None:
        return [], None
    if getattr(nodes, "kind", None) is not None:
        return [nodes], None
    return list(nodes), None


class GeometryTraverser:
    """Flatten B-rep trees into model-space 3D curves.

    Attributes:
        max_depth: Maximum instance nesting depth; deeper nodes are rejected

    Example:
        >>> from .brep import Line3D, Instance
        >>> t = GeometryTraverser(max_depth=4)
        >>> nested = Instance([Line3D((0, 0, 0), (1, 0, 0))], Transform3D.translation(0, 0, 5))
        >>> curves, errors = t.traverse([nested], context=7)
        >>> curves[0][0].start, curves[0][1]
        ((0.0, 0.0, 5.0), 7)
    """

    def __init__(self, max_depth=32):
        self.max_depth = int(max_depth)

    def traverse(self, nodes, transform=None, context=None, counters=None):
        """Walk nodes and return (curves, errors).

        Args:
            nodes: Iterable of top-level nodes
            transform: Cumulative Transform3D for the roots (default: identity)
            context: Owning context attached to every emitted curve (e.g. element id)
            counters: Optional dict; solids_skipped_empty is incremented there

        Returns:
            curves: list of (curve3d, context), in sibling order
            errors: list of TraceError
        """
        root = transform if transform is not None else Transform3D.identity()
        elem_id = context if isinstance(context, (int, str)) else None

        curves = []
        errors = []

        # LIFO worklist; children pushed reversed to keep sibling order.
        work = [(n, root, 0) for n in reversed(list(nodes or []))]

        while work:
            node, xform, depth = work.pop()
            if node is None:
                continue

            if depth > self.max_depth:
                errors.append(TraceError(
                    ErrorKind.DEPTH_EXCEEDED,
                    "instance nesting deeper than {0}; subtree skipped".format(self.max_depth),
                    elem_id=elem_id,
                    extra={"depth": depth},
                ))
                continue

            kind = getattr(node, "kind", None)

            if kind is NodeKind.CURVE:
                curve, err = self._place(node, xform, elem_id)
                if err is not None:
                    errors.append(err)
                else:
                    curves.append((curve, context))

            elif kind is NodeKind.SOLID:
                if node.is_empty():
                    if counters is not None:
                        counters["solids_skipped_empty"] = counters.get("solids_skipped_empty", 0) + 1
                    continue
                for curve in self._solid_curves(node, errors, elem_id):
                    placed, err = self._place(curve, xform, elem_id)
                    if err is not None:
                        errors.append(err)
                    else:
                        curves.append((placed, context))

            elif kind is NodeKind.INSTANCE:
                children, exc = _try(node.nested)
                if exc is not None:
                    errors.append(TraceError.from_exception(
                        ErrorKind.GEOMETRY_READ, exc, elem_id=elem_id, context="instance geometry read failed"
                    ))
                    continue
                local = node.transform if node.transform is not None else Transform3D.identity()
                composed = xform.compose(local)
                for child in reversed(children):
                    work.append((child, composed, depth + 1))

            else:
                errors.append(TraceError(
                    ErrorKind.UNSUPPORTED_GEOMETRY,
                    "unsupported geometry object {0}".format(type(node).__name__),
                    elem_id=elem_id,
                ))

        return curves, errors

    def _solid_curves(self, solid, errors, elem_id):
        """Yield every edge curve of a solid; failures recorded per face / edge."""
        faces, exc = _try(solid.faces)
        if exc is not None:
            errors.append(TraceError.from_exception(
                ErrorKind.GEOMETRY_READ, exc, elem_id=elem_id, context="solid faces read failed"
            ))
            return

        for face_index, face in enumerate(faces):
            loops, exc = _try(face.edge_loops)
            if exc is not None:
                errors.append(TraceError.from_exception(
                    ErrorKind.GEOMETRY_READ, exc, elem_id=elem_id,
                    context="face {0} edge loops read failed".format(face_index),
                ))
                continue

            for loop in loops:
                for edge in loop:
                    curve, exc = _try(edge.as_curve)
                    if exc is not None:
                        errors.append(TraceError.from_exception(
                            ErrorKind.GEOMETRY_READ, exc, elem_id=elem_id,
                            context="face {0} edge read failed".format(face_index),
                        ))
                        continue
                    if curve is not None:
                        yield curve

    def _place(self, curve, xform, elem_id):
        """Apply the cumulative instance transform to a curve."""
        if getattr(curve, "kind", None) is not NodeKind.CURVE:
            return None, TraceError(
                ErrorKind.UNSUPPORTED_GEOMETRY,
                "unsupported curve object {0}".format(type(curve).__name__),
                elem_id=elem_id,
            )
        if xform.is_identity():
            return curve, None
        placed, exc = _try(lambda: curve.transformed(xform))
        if exc is not None:
            return None, TraceError.from_exception(
                ErrorKind.GEOMETRY_READ, exc, elem_id=elem_id, context="curve transform failed"
            )
        return placed, None
