"""
View frame for the section trace engine.

Holds the source view's coordinate system (origin + orthonormal basis) and its
crop rectangle in view-local coordinates, and supplies the inverse transform
used to flatten model geometry onto the drawing plane.
"""

import math

from .errors import FatalPrecondition
from .math_utils import Bounds2D, as_xyz, dot, norm


def _as_xy(p):
    """Accept an XYZ-like object (crop box corner) or a 2/3-sequence."""
    x = getattr(p, "X", None)
    if x is not None:
        return (float(p.X), float(p.Y))
    return (float(p[0]), float(p[1]))


class ViewFrame:
    """Immutable view coordinate system with crop rectangle.

    Attributes:
        origin: View origin in model coordinates
        basis_x: View X axis (drawing right)
        basis_y: View Y axis (drawing up)
        basis_z: View normal (out of the drawing)
        crop_min, crop_max: Crop rectangle corners (x, y) in view-local coordinates

    Example:
        >>> frame = ViewFrame(
        ...     origin=(0, 0, 0),
        ...     basis_x=(1, 0, 0),
        ...     basis_y=(0, 0, 1),
        ...     basis_z=(0, -1, 0),
        ...     crop_min=(-10, -10),
        ...     crop_max=(10, 10),
        ... )
        >>> frame.to_view_plane((5, 3, 2))
        (5.0, 2.0)
    """

    __slots__ = ("_origin", "_basis", "_crop")

    def __init__(self, origin, basis_x, basis_y, basis_z, crop_min, crop_max, tol=1e-6):
        try:
            o = as_xyz(origin)
            bx = as_xyz(basis_x)
            by = as_xyz(basis_y)
            bz = as_xyz(basis_z)
            cmin = _as_xy(crop_min)
            cmax = _as_xy(crop_max)
        except (TypeError, ValueError, IndexError, AttributeError) as e:
            raise FatalPrecondition("view frame is missing or malformed: {0}".format(e)) from e

        for label, v in (("origin", o), ("basis_x", bx), ("basis_y", by), ("basis_z", bz),
                         ("crop_min", cmin), ("crop_max", cmax)):
            if not all(math.isfinite(c) for c in v):
                raise FatalPrecondition("view frame {0} is not finite: {1}".format(label, v))

        for label, v in (("basis_x", bx), ("basis_y", by), ("basis_z", bz)):
            if abs(norm(v) - 1.0) > tol:
                raise FatalPrecondition("view frame {0} is not unit length: {1}".format(label, v))

        for label, a, b in (("x/y", bx, by), ("x/z", bx, bz), ("y/z", by, bz)):
            if abs(dot(a, b)) > tol:
                raise FatalPrecondition("view frame basis {0} is not orthogonal".format(label))

        if cmin[0] >= cmax[0] or cmin[1] >= cmax[1]:
            raise FatalPrecondition("crop min {0} must be below crop max {1} on both axes".format(cmin, cmax))

        object.__setattr__(self, "_origin", o)
        object.__setattr__(self, "_basis", (bx, by, bz))
        object.__setattr__(self, "_crop", Bounds2D(cmin[0], cmin[1], cmax[0], cmax[1]))

    def __setattr__(self, name, value):
        raise AttributeError("ViewFrame is immutable")

    @classmethod
    def from_transform(cls, transform, crop_min, crop_max, tol=1e-6):
        """Build from a Transform3D (or Revit Transform) and crop corners.

        The crop box transform of a section view maps view-local coordinates to
        model coordinates, so its origin and basis are exactly the view frame.
        """
        if transform is None:
            raise FatalPrecondition("view transform is missing")
        origin = getattr(transform, "origin", None)
        if origin is None:
            origin = getattr(transform, "Origin", None)
        bx = getattr(transform, "basis_x", None) or getattr(transform, "BasisX", None)
        by = getattr(transform, "basis_y", None) or getattr(transform, "BasisY", None)
        bz = getattr(transform, "basis_z", None) or getattr(transform, "BasisZ", None)
        if origin is None or bx is None or by is None or bz is None:
            raise FatalPrecondition("view transform lacks origin or basis")
        return cls(origin, bx, by, bz, crop_min, crop_max, tol=tol)

    @classmethod
    def from_definition(cls, view_def, tol=1e-6):
        """Build from a view definition dict.

        Accepted keys: crop_min, crop_max and either transform (Transform3D or
        Revit Transform) or origin / basis_x / basis_y / basis_z.
        """
        if not isinstance(view_def, dict):
            raise FatalPrecondition("view definition must be a dict, got {0}".format(type(view_def).__name__))
        crop_min = view_def.get("crop_min")
        crop_max = view_def.get("crop_max")
        if crop_min is None or crop_max is None:
            raise FatalPrecondition("view definition has no crop bounds")
        if view_def.get("transform") is not None:
            return cls.from_transform(view_def["transform"], crop_min, crop_max, tol=tol)
        missing = [k for k in ("origin", "basis_x", "basis_y", "basis_z") if view_def.get(k) is None]
        if missing:
            raise FatalPrecondition("view definition missing {0}".format(", ".join(missing)))
        return cls(
            view_def["origin"], view_def["basis_x"], view_def["basis_y"], view_def["basis_z"],
            crop_min, crop_max, tol=tol,
        )

    @property
    def origin(self):
        return self._origin

    @property
    def basis_x(self):
        return self._basis[0]

    @property
    def basis_y(self):
        return self._basis[1]

    @property
    def basis_z(self):
        return self._basis[2]

    @property
    def crop_min(self):
        return (self._crop.xmin, self._crop.ymin)

    @property
    def crop_max(self):
        return (self._crop.xmax, self._crop.ymax)

    @property
    def crop_bounds(self):
        """Crop rectangle as a fresh Bounds2D (callers may not mutate ours)."""
        c = self._crop
        return Bounds2D(c.xmin, c.ymin, c.xmax, c.ymax)

    @property
    def width(self):
        return self._crop.width()

    @property
    def height(self):
        return self._crop.height()

    def to_view_local(self, point_model):
        """Transform a model point to view-local (x, y, z); z is depth along the normal."""
        p = as_xyz(point_model)
        d = (p[0] - self._origin[0], p[1] - self._origin[1], p[2] - self._origin[2])
        bx, by, bz = self._basis
        return (dot(d, bx), dot(d, by), dot(d, bz))

    def to_view_plane(self, point_model):
        """Transform a model point onto the drawing plane, dropping depth."""
        x, y, _ = self.to_view_local(point_model)
        return (x, y)

    def vector_to_view(self, vec_model):
        """Rotate a model-space direction into view-local components (no translation)."""
        v = as_xyz(vec_model)
        bx, by, bz = self._basis
        return (dot(v, bx), dot(v, by), dot(v, bz))

    def is_within_bounds(self, point2d, tolerance=0.0):
        """Inclusive crop test with the rectangle grown by tolerance."""
        return self._crop.contains_point(point2d[0], point2d[1], tolerance)

    def __repr__(self):
        return "ViewFrame(origin={0}, x={1}, y={2}, z={3}, crop={4})".format(
            self._origin, self._basis[0], self._basis[1], self._basis[2], self._crop
        )
