"""
Curve projection onto the view plane.

Each model-space curve is flattened through the view frame's inverse
transform, validated (finite, inside the crop by the endpoint test, plausible
length) and emitted as a ProjectedLine or ProjectedArc. Arcs whose 2D
reconstruction fails degrade to their chord instead of being dropped.
"""

import math

from .clip import ClipFilter
from .errors import DropReason
from .math_utils import distance_2d, is_finite


class ProjectedLine:
    """Straight 2D segment in view coordinates. Immutable value object."""

    kind = "line"

    __slots__ = ("start", "end")

    def __init__(self, start, end):
        object.__setattr__(self, "start", (float(start[0]), float(start[1])))
        object.__setattr__(self, "end", (float(end[0]), float(end[1])))

    def __setattr__(self, name, value):
        raise AttributeError("ProjectedLine is immutable")

    def length(self):
        return distance_2d(self.start, self.end)

    def points(self):
        return (self.start, self.end)

    def to_dict(self):
        return {"kind": self.kind, "start": list(self.start), "end": list(self.end)}

    def __eq__(self, other):
        if not isinstance(other, ProjectedLine):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __hash__(self):
        return hash((self.kind, self.start, self.end))

    def __repr__(self):
        return "ProjectedLine({0}, {1})".format(self.start, self.end)


class ProjectedArc:
    """Circular 2D arc from start to end around center. Immutable value object."""

    kind = "arc"

    __slots__ = ("start", "end", "center", "clockwise")

    def __init__(self, start, end, center, clockwise=False):
        object.__setattr__(self, "start", (float(start[0]), float(start[1])))
        object.__setattr__(self, "end", (float(end[0]), float(end[1])))
        object.__setattr__(self, "center", (float(center[0]), float(center[1])))
        object.__setattr__(self, "clockwise", bool(clockwise))

    def __setattr__(self, name, value):
        raise AttributeError("ProjectedArc is immutable")

    @property
    def radius(self):
        return distance_2d(self.center, self.start)

    def sweep(self):
        """Swept angle in radians, in (0, 2*pi]."""
        a0 = math.atan2(self.start[1] - self.center[1], self.start[0] - self.center[0])
        a1 = math.atan2(self.end[1] - self.center[1], self.end[0] - self.center[0])
        d = (a0 - a1) if self.clockwise else (a1 - a0)
        d = d % (2.0 * math.pi)
        return d if d > 0.0 else 2.0 * math.pi

    def length(self):
        return self.radius * self.sweep()

    def points(self):
        return (self.start, self.end, self.center)

    def to_dict(self):
        return {
            "kind": self.kind,
            "start": list(self.start),
            "end": list(self.end),
            "center": list(self.center),
            "clockwise": self.clockwise,
        }

    def __eq__(self, other):
        if not isinstance(other, ProjectedArc):
            return NotImplemented
        return self.points() == other.points() and self.clockwise == other.clockwise

    def __hash__(self):
        return hash((self.kind, self.points(), self.clockwise))

    def __repr__(self):
        return "ProjectedArc({0}, {1}, center={2}, cw={3})".format(self.start, self.end, self.center, self.clockwise)


def reconstruct_arc(start, end, center, mid=None, radius_tolerance=1e-3):
    """Rebuild a 2D arc from projected points.

    Returns:
        ProjectedArc, or None when the points do not describe a circle in the
        drawing plane (foreshortened arc, zero radius, collinear mid point).
        A missing mid point also returns None: without it the sweep direction
        is unknown.
    """
    if mid is None or not is_finite(center, mid):
        return None

    r0 = distance_2d(center, start)
    r1 = distance_2d(center, end)
    if r0 <= radius_tolerance or abs(r0 - r1) > radius_tolerance:
        return None

    if abs(distance_2d(center, mid) - r0) > radius_tolerance:
        return None
    cross = (mid[0] - start[0]) * (end[1] - mid[1]) - (mid[1] - start[1]) * (end[0] - mid[0])
    if abs(cross) < 1e-12:
        return None

    return ProjectedArc(start, end, center, clockwise=cross < 0.0)


class CurveProjector:
    """Project model-space curves into a ViewFrame.

    Attributes:
        frame: ViewFrame supplying the inverse transform and crop
        clip: ClipFilter for the endpoint bounds test
        min_length, max_length: Plausible 2D chord length range
        radius_tolerance: Allowed radius mismatch for arc reconstruction

    Example:
        >>> from .view_frame import ViewFrame
        >>> from .brep import Line3D
        >>> frame = ViewFrame((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1), (0, 0), (10, 10))
        >>> curve, reason = CurveProjector(frame).project(Line3D((0, 0, 0), (0, 0, 5)))
        >>> curve is None, reason
        (True, <DropReason.DEGENERATE: 'degenerate'>)
    """

    def __init__(self, frame, tolerance=0.1, min_length=0.001, max_length=10000.0, radius_tolerance=1e-3):
        self.frame = frame
        self.clip = ClipFilter(frame.crop_bounds, curve_tolerance=tolerance)
        self.min_length = float(min_length)
        self.max_length = float(max_length)
        self.radius_tolerance = float(radius_tolerance)

    @classmethod
    def from_config(cls, frame, cfg):
        return cls(
            frame,
            tolerance=cfg.curve_tolerance_ft,
            min_length=cfg.min_curve_length_ft,
            max_length=cfg.max_curve_length_ft,
            radius_tolerance=cfg.arc_radius_tolerance_ft,
        )

    def project(self, curve):
        """Project one 3D curve.

        Returns:
            (ProjectedLine | ProjectedArc, None) when kept
            (None, DropReason) when dropped
        """
        start = self.frame.to_view_plane(curve.start)
        end = self.frame.to_view_plane(curve.end)

        if not ClipFilter.all_finite(start, end):
            return None, DropReason.DEGENERATE

        if not self.clip.curve_in_bounds(start, end):
            return None, DropReason.CLIP_MISS

        if not ClipFilter.length_ok(start, end, self.min_length, self.max_length):
            return None, DropReason.DEGENERATE

        if getattr(curve, "curve_type", None) == "arc":
            center = self.frame.to_view_plane(curve.center)
            mid = self.frame.to_view_plane(curve.mid) if curve.mid is not None else None
            arc = reconstruct_arc(start, end, center, mid=mid, radius_tolerance=self.radius_tolerance)
            if arc is not None:
                return arc, None

        return ProjectedLine(start, end), None

    def is_degraded_arc(self, curve, projected):
        """True when an input arc came out as a chord line."""
        return getattr(curve, "curve_type", None) == "arc" and isinstance(projected, ProjectedLine)
