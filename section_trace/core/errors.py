"""
Error taxonomy for the section trace engine.

Only FatalPrecondition is ever raised out of a trace call. Everything else is
returned as a value (DropReason for silently countable drops, TraceError for
recorded, non-fatal failures) and accumulated by the orchestrator.
"""

from enum import Enum


class FatalPrecondition(ValueError):
    """Invalid or missing view frame / crop bounds. Aborts before any work."""


class DropReason(Enum):
    """Why a curve or band was dropped without being recorded as an error.

    CLIP_MISS: entirely outside the crop bounds
    DEGENERATE: NaN/Inf, zero-length or implausibly long curve
    BAND_DEGENERATE: clipped band collapsed below tolerance
    """

    CLIP_MISS = "clip_miss"
    DEGENERATE = "degenerate"
    BAND_DEGENERATE = "band_degenerate"


class ErrorKind(Enum):
    ELEMENT_EXTRACTION = "element_extraction"
    GEOMETRY_READ = "geometry_read"
    UNSUPPORTED_GEOMETRY = "unsupported_geometry"
    DEPTH_EXCEEDED = "depth_exceeded"
    PROJECTION = "projection"
    LAYER = "layer"
    THICKNESS_MISMATCH = "thickness_mismatch"
    DUPLICATION = "duplication"


class TraceError(object):
    """A non-fatal failure recorded during a trace pass.

    Attributes:
        kind: ErrorKind
        message: Human-readable description
        elem_id: Owning element id (optional)
        extra: JSON-safe dict with additional context

    Example:
        >>> err = TraceError(ErrorKind.LAYER, "bad width", elem_id=12)
        >>> str(err)
        '[layer] element 12: bad width'
    """

    __slots__ = ("kind", "message", "elem_id", "extra")

    def __init__(self, kind, message, elem_id=None, extra=None):
        self.kind = kind
        self.message = str(message)
        self.elem_id = elem_id
        self.extra = dict(extra or {})

    @classmethod
    def from_exception(cls, kind, exc, elem_id=None, context=None, extra=None):
        prefix = "{0}: ".format(context) if context else ""
        payload = dict(extra or {})
        payload["exc_type"] = type(exc).__name__
        return cls(kind, "{0}{1}".format(prefix, exc), elem_id=elem_id, extra=payload)

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "message": self.message,
            "elem_id": self.elem_id,
            "extra": dict(self.extra),
        }

    def __str__(self):
        if self.elem_id is not None:
            return "[{0}] element {1}: {2}".format(self.kind.value, self.elem_id, self.message)
        return "[{0}] {1}".format(self.kind.value, self.message)

    def __repr__(self):
        return "TraceError({0}, {1!r}, elem_id={2!r})".format(self.kind.name, self.message, self.elem_id)
