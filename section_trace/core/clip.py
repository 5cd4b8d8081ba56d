"""
Bounds, length and validity tests shared by curve projection and band output.
"""

from .math_utils import Bounds2D, distance_2d, is_finite


class ClipFilter:
    """Crop-rectangle tests with separate tolerances for curves and bands.

    Attributes:
        bounds: Crop rectangle (Bounds2D) in view-local coordinates
        curve_tolerance: Margin for the endpoint test on curves
        band_tolerance: Margin used when clipping band rectangles

    Example:
        >>> clip = ClipFilter(Bounds2D(0, 0, 10, 10))
        >>> clip.curve_in_bounds((10.0, 5.0), (20.0, 5.0))
        True
        >>> clip.clip_rect(9.0, 2.0, 30.0, 4.0)
        (9.0, 2.0, 10.5, 4.0)
    """

    def __init__(self, bounds, curve_tolerance=0.1, band_tolerance=0.5):
        self.bounds = Bounds2D(bounds.xmin, bounds.ymin, bounds.xmax, bounds.ymax)
        self.curve_tolerance = float(curve_tolerance)
        self.band_tolerance = float(band_tolerance)

    def curve_in_bounds(self, p0, p1):
        """Endpoint-only test: keep when at least one endpoint is inside (inclusive).

        A segment crossing the crop with both endpoints outside is dropped, and
        a partially visible one is kept whole; it is never truncated.
        """
        t = self.curve_tolerance
        return self.bounds.contains_point(p0[0], p0[1], t) or self.bounds.contains_point(p1[0], p1[1], t)

    @staticmethod
    def all_finite(*points):
        return is_finite(*points)

    @staticmethod
    def length_ok(p0, p1, min_length, max_length):
        """True when the 2D distance lies in [min_length, max_length]."""
        length = distance_2d(p0, p1)
        return min_length <= length <= max_length

    def clip_rect(self, xmin, ymin, xmax, ymax):
        """Clip an axis-aligned rectangle to the crop grown by band_tolerance.

        Returns:
            (xmin, ymin, xmax, ymax) of the overlap, or None when the rectangle
            lies entirely outside.
        """
        crop = self.bounds.expand(self.band_tolerance)
        overlap = crop.intersection(Bounds2D(xmin, ymin, xmax, ymax))
        if overlap is None:
            return None
        return overlap.as_tuple()
