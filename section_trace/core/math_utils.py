"""
Mathematical utilities for the section trace engine.

Provides 2D bounds, small 3D vector helpers and an affine Transform3D with
Revit-like semantics (origin + BasisX/BasisY/BasisZ columns).
"""

import math


class Bounds2D:
    """2D axis-aligned bounding box in view XY space.

    Attributes:
        xmin, ymin, xmax, ymax: Bounds coordinates

    Example:
        >>> b = Bounds2D(0.0, 0.0, 10.0, 10.0)
        >>> b.width()
        10.0
        >>> b.contains_point(10.0, 5.0)
        True
        >>> b.contains_point(10.05, 5.0, tolerance=0.1)
        True
    """

    def __init__(self, xmin, ymin, xmax, ymax):
        self.xmin = float(xmin)
        self.ymin = float(ymin)
        self.xmax = float(xmax)
        self.ymax = float(ymax)

    def width(self):
        """Width of bounds."""
        return self.xmax - self.xmin

    def height(self):
        """Height of bounds."""
        return self.ymax - self.ymin

    def contains_point(self, x, y, tolerance=0.0):
        """Check if point (x, y) is inside bounds grown by tolerance (inclusive)."""
        t = float(tolerance)
        return (self.xmin - t) <= x <= (self.xmax + t) and (self.ymin - t) <= y <= (self.ymax + t)

    def intersects(self, other):
        """Check if this bounds intersects another Bounds2D."""
        if self.xmax < other.xmin or other.xmax < self.xmin:
            return False
        if self.ymax < other.ymin or other.ymax < self.ymin:
            return False
        return True

    def expand(self, margin):
        """Return new Bounds2D expanded by margin on all sides."""
        return Bounds2D(
            self.xmin - margin, self.ymin - margin, self.xmax + margin, self.ymax + margin
        )

    def intersection(self, other):
        """Return the overlapping Bounds2D, or None when the boxes are disjoint."""
        if not self.intersects(other):
            return None
        return Bounds2D(
            max(self.xmin, other.xmin),
            max(self.ymin, other.ymin),
            min(self.xmax, other.xmax),
            min(self.ymax, other.ymax),
        )

    def as_tuple(self):
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    def __eq__(self, other):
        if not isinstance(other, Bounds2D):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"Bounds2D({self.xmin:.3f}, {self.ymin:.3f}, {self.xmax:.3f}, {self.ymax:.3f})"


def as_xyz(p):
    """Accept a Revit XYZ-like object or a 3-sequence; return a float tuple."""
    x = getattr(p, "X", None)
    if x is not None:
        return (float(p.X), float(p.Y), float(p.Z))
    return (float(p[0]), float(p[1]), float(p[2]))


def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def norm(a):
    return math.sqrt(dot(a, a))


def normalize(a):
    """Return a unit vector, or None when a has (near) zero length."""
    n = norm(a)
    if n < 1e-12 or not math.isfinite(n):
        return None
    return (a[0] / n, a[1] / n, a[2] / n)


def distance_2d(p0, p1):
    return math.hypot(p1[0] - p0[0], p1[1] - p0[1])


def is_finite(*values):
    """True when every number in values (flattening one level of tuples) is finite."""
    for v in values:
        if isinstance(v, (tuple, list)):
            for c in v:
                if not math.isfinite(c):
                    return False
        elif not math.isfinite(v):
            return False
    return True


class Transform3D:
    """Affine transform: p' = origin + x*basis_x + y*basis_y + z*basis_z.

    Mirrors Revit's Transform (OfPoint / OfVector / Multiply) so geometry read
    from instance transforms can be composed without the Revit API.

    Example:
        >>> t = Transform3D.translation(1, 2, 3)
        >>> t.of_point((0, 0, 0))
        (1.0, 2.0, 3.0)
        >>> t.compose(Transform3D.translation(1, 0, 0)).of_point((0, 0, 0))
        (2.0, 2.0, 3.0)
    """

    __slots__ = ("origin", "basis_x", "basis_y", "basis_z")

    def __init__(self, origin=(0.0, 0.0, 0.0), basis_x=(1.0, 0.0, 0.0),
                 basis_y=(0.0, 1.0, 0.0), basis_z=(0.0, 0.0, 1.0)):
        self.origin = as_xyz(origin)
        self.basis_x = as_xyz(basis_x)
        self.basis_y = as_xyz(basis_y)
        self.basis_z = as_xyz(basis_z)

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def translation(cls, dx, dy, dz):
        return cls(origin=(dx, dy, dz))

    def is_identity(self, tol=1e-12):
        ident = Transform3D()
        for a, b in zip(self._rows(), ident._rows()):
            if any(abs(x - y) > tol for x, y in zip(a, b)):
                return False
        return True

    def _rows(self):
        return (self.origin, self.basis_x, self.basis_y, self.basis_z)

    def of_vector(self, v):
        x, y, z = as_xyz(v)
        bx, by, bz = self.basis_x, self.basis_y, self.basis_z
        return (
            x * bx[0] + y * by[0] + z * bz[0],
            x * bx[1] + y * by[1] + z * bz[1],
            x * bx[2] + y * by[2] + z * bz[2],
        )

    def of_point(self, p):
        vx, vy, vz = self.of_vector(p)
        o = self.origin
        return (o[0] + vx, o[1] + vy, o[2] + vz)

    def compose(self, inner):
        """Return self ∘ inner (apply inner first, then self)."""
        return Transform3D(
            origin=self.of_point(inner.origin),
            basis_x=self.of_vector(inner.basis_x),
            basis_y=self.of_vector(inner.basis_y),
            basis_z=self.of_vector(inner.basis_z),
        )

    def __repr__(self):
        return "Transform3D(origin={0}, x={1}, y={2}, z={3})".format(
            self.origin, self.basis_x, self.basis_y, self.basis_z
        )
