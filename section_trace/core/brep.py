"""
Boundary-representation nodes consumed by the geometry traverser.

A node is one of three tagged variants (NodeKind): SOLID (faces → edge loops →
edges → curves), CURVE (a bare 3D curve), INSTANCE (nested nodes under a local
transform). Children may be given eagerly as sequences or lazily as zero-arg
callables; lazy readers let host adapters defer API calls so a failing read is
isolated to the face/edge that raised it.
"""

from enum import Enum

from .math_utils import as_xyz


class NodeKind(Enum):
    SOLID = 1
    CURVE = 2
    INSTANCE = 3


def _load(source):
    """Resolve an eager sequence or lazy callable into a list."""
    if callable(source):
        source = source()
    if source is None:
        return []
    return list(source)


class Line3D:
    """Bound straight segment in model coordinates."""

    kind = NodeKind.CURVE
    curve_type = "line"

    __slots__ = ("start", "end")

    def __init__(self, start, end):
        self.start = as_xyz(start)
        self.end = as_xyz(end)

    def transformed(self, t):
        return Line3D(t.of_point(self.start), t.of_point(self.end))

    def __repr__(self):
        return "Line3D({0}, {1})".format(self.start, self.end)


class Arc3D:
    """Circular arc given by its endpoints and center.

    mid is an optional point on the arc between start and end; when present it
    fixes the sweep direction after projection.
    """

    kind = NodeKind.CURVE
    curve_type = "arc"

    __slots__ = ("start", "end", "center", "mid")

    def __init__(self, start, end, center, mid=None):
        self.start = as_xyz(start)
        self.end = as_xyz(end)
        self.center = as_xyz(center)
        self.mid = as_xyz(mid) if mid is not None else None

    def transformed(self, t):
        return Arc3D(
            t.of_point(self.start),
            t.of_point(self.end),
            t.of_point(self.center),
            t.of_point(self.mid) if self.mid is not None else None,
        )

    def __repr__(self):
        return "Arc3D({0}, {1}, center={2})".format(self.start, self.end, self.center)


class PolyCurve3D:
    """Any other bound curve (spline, ellipse, ...) as a sampled polyline.

    Only the endpoints are used downstream: the projector approximates these
    curves with their chord.
    """

    kind = NodeKind.CURVE
    curve_type = "other"

    __slots__ = ("points",)

    def __init__(self, points):
        pts = [as_xyz(p) for p in points]
        if len(pts) < 2:
            raise ValueError("PolyCurve3D needs at least two points")
        self.points = tuple(pts)

    @property
    def start(self):
        return self.points[0]

    @property
    def end(self):
        return self.points[-1]

    def transformed(self, t):
        return PolyCurve3D([t.of_point(p) for p in self.points])

    def __repr__(self):
        return "PolyCurve3D({0} pts)".format(len(self.points))


class Edge:
    """Edge of a face loop. source is a curve or a callable returning one."""

    __slots__ = ("_source",)

    def __init__(self, source):
        self._source = source

    def as_curve(self):
        if callable(self._source):
            return self._source()
        return self._source


class Face:
    """Face with one or more edge loops (each loop a sequence of Edge)."""

    __slots__ = ("_loops",)

    def __init__(self, loops):
        self._loops = loops

    def edge_loops(self):
        return [_load(loop) for loop in _load(self._loops)]


class Solid:
    """Solid bounded by faces. volume=None means unknown (not checked)."""

    kind = NodeKind.SOLID

    __slots__ = ("_faces", "volume")

    def __init__(self, faces, volume=None):
        self._faces = faces
        self.volume = None if volume is None else float(volume)

    def faces(self):
        return _load(self._faces)

    def is_empty(self):
        return self.volume is not None and self.volume <= 0.0


class Instance:
    """Nested geometry placed by a local transform (family instance, group, link)."""

    kind = NodeKind.INSTANCE

    __slots__ = ("_nested", "transform")

    def __init__(self, nested, transform):
        self._nested = nested
        self.transform = transform

    def nested(self):
        return _load(self._nested)


def box_solid(xmin, ymin, zmin, xmax, ymax, zmax):
    """Axis-aligned box as a Solid with six single-loop faces.

    Convenience for tests and synthetic geometry; each box edge appears in
    two faces, as it would in a real B-rep.
    """
    c = [
        (xmin, ymin, zmin), (xmax, ymin, zmin), (xmax, ymax, zmin), (xmin, ymax, zmin),
        (xmin, ymin, zmax), (xmax, ymin, zmax), (xmax, ymax, zmax), (xmin, ymax, zmax),
    ]
    quads = [
        (0, 1, 2, 3), (4, 5, 6, 7),
        (0, 1, 5, 4), (1, 2, 6, 5),
        (2, 3, 7, 6), (3, 0, 4, 7),
    ]
    faces = []
    for q in quads:
        loop = [Edge(Line3D(c[q[i]], c[q[(i + 1) % 4]])) for i in range(4)]
        faces.append(Face([loop]))
    volume = (xmax - xmin) * (ymax - ymin) * (zmax - zmin)
    return Solid(faces, volume=volume)
