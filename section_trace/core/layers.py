"""
Layered-assembly classification.

Turns a wall / floor / roof material stack into one clipped rectangular band
per visible layer. Layers are laid out along the host's thickness axis in
declaration order. Skipped, unmapped, too-thin and clipped-away layers still
advance the running offset. An unreadable layer has no width to advance by,
so its error records that the layers after it shift.
"""

import math

from .clip import ClipFilter
from .errors import DropReason, ErrorKind, TraceError
from .math_utils import as_xyz, normalize


class MaterialLayer:
    """One layer of a compound structure: material name and width (feet)."""

    __slots__ = ("name", "width")

    def __init__(self, name, width):
        w = float(width)
        if not math.isfinite(w) or w < 0.0:
            raise ValueError("layer width must be finite and >= 0, got {0!r}".format(width))
        object.__setattr__(self, "name", "" if name is None else str(name))
        object.__setattr__(self, "width", w)

    def __setattr__(self, name, value):
        raise AttributeError("MaterialLayer is immutable")

    @classmethod
    def coerce(cls, raw):
        """Accept a MaterialLayer, a (name, width) pair or a {"name", "width"} dict."""
        if isinstance(raw, MaterialLayer):
            return raw
        if isinstance(raw, dict):
            return cls(raw.get("name"), raw.get("width"))
        name, width = raw
        return cls(name, width)

    def __repr__(self):
        return "MaterialLayer({0!r}, {1})".format(self.name, self.width)


class LayeredAssembly:
    """A host element's material stack plus its placement in the view.

    Attributes:
        element_id: Host element id (for diagnostics)
        layers: Ordered layers, exterior first (raw entries are coerced lazily)
        direction: Centerline direction in model coordinates
        extents: Projected host bounding box (xmin, ymin, xmax, ymax) in view coordinates
        thickness: Declared total thickness (optional; checked against layer widths)
        orientation: Exterior-facing normal (optional; fixes which side layer 0 sits on)
        category: Host category name
    """

    def __init__(self, element_id, layers, direction, extents, thickness=None, orientation=None, category="Walls"):
        self.element_id = element_id
        self.layers = list(layers or [])
        self.direction = as_xyz(direction) if direction is not None else None
        xmin, ymin, xmax, ymax = (float(v) for v in extents)
        self.extents = (min(xmin, xmax), min(ymin, ymax), max(xmin, xmax), max(ymin, ymax))
        self.thickness = None if thickness is None else float(thickness)
        self.orientation = as_xyz(orientation) if orientation is not None else None
        self.category = category

    def __repr__(self):
        return "LayeredAssembly(elem={0}, {1} layers, extents={2})".format(
            self.element_id, len(self.layers), self.extents
        )


class Band:
    """Clipped rectangle for one material layer. Immutable value object.

    points are ordered counter-clockwise starting at the min corner.
    """

    __slots__ = ("points", "representation_id", "line_weight", "material", "layer_index", "elem_id")

    def __init__(self, xmin, ymin, xmax, ymax, representation_id, line_weight,
                 material=None, layer_index=None, elem_id=None):
        pts = (
            (float(xmin), float(ymin)),
            (float(xmax), float(ymin)),
            (float(xmax), float(ymax)),
            (float(xmin), float(ymax)),
        )
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "representation_id", representation_id)
        object.__setattr__(self, "line_weight", int(line_weight))
        object.__setattr__(self, "material", material)
        object.__setattr__(self, "layer_index", layer_index)
        object.__setattr__(self, "elem_id", elem_id)

    def __setattr__(self, name, value):
        raise AttributeError("Band is immutable")

    @property
    def xmin(self):
        return self.points[0][0]

    @property
    def ymin(self):
        return self.points[0][1]

    @property
    def xmax(self):
        return self.points[2][0]

    @property
    def ymax(self):
        return self.points[2][1]

    def width(self):
        return self.xmax - self.xmin

    def height(self):
        return self.ymax - self.ymin

    def to_dict(self):
        return {
            "points": [list(p) for p in self.points],
            "representation_id": self.representation_id,
            "line_weight": self.line_weight,
            "material": self.material,
            "layer_index": self.layer_index,
            "elem_id": self.elem_id,
        }

    def __eq__(self, other):
        if not isinstance(other, Band):
            return NotImplemented
        return (self.points, self.representation_id, self.line_weight) == (
            other.points, other.representation_id, other.line_weight
        )

    def __hash__(self):
        return hash((self.points, self.representation_id, self.line_weight))

    def __repr__(self):
        return "Band({0}, rep={1!r}, lw={2})".format(self.points, self.representation_id, self.line_weight)


def thickness_axis(frame, direction, orientation=None):
    """Pick the view axis that runs through the host's thickness.

    Returns:
        (axis, from_max): axis 0 = view X, 1 = view Y; from_max means layer 0
        sits on the max side of the extents.

    Commentary:
        ✔ Wall normal is the in-plan perpendicular of the centerline
        ✔ Without an exterior orientation layers start at the min side
        ⚠ Missing or vertical direction falls back to view X
    """
    normal = None
    if orientation is not None:
        normal = normalize(orientation)
    if normal is None and direction is not None:
        d = normalize(direction)
        if d is not None:
            normal = normalize((-d[1], d[0], 0.0))
    if normal is None:
        return 0, False

    vx, vy, _ = frame.vector_to_view(normal)
    axis = 0 if abs(vx) >= abs(vy) else 1
    from_max = False
    if orientation is not None:
        from_max = (vx if axis == 0 else vy) > 0.0
    return axis, from_max


class LayerClassifier:
    """Synthesize material bands for layered assemblies.

    Attributes:
        frame: ViewFrame (crop bounds for clipping)
        table: MaterialTable used for every layer
        min_width: Layer visibility epsilon (feet)
        min_height: Minimum clipped band height (feet)
        thickness_tolerance: Allowed |sum(widths) - thickness|

    Example:
        >>> from .view_frame import ViewFrame
        >>> from .materials import MaterialTable
        >>> frame = ViewFrame((0, 0, 0), (1, 0, 0), (0, 0, 1), (0, -1, 0), (-5, -5), (5, 5))
        >>> asm = LayeredAssembly(1, [("Concrete", 0.5), ("GWB", 0.5)], (0, 1, 0), (0, 0, 1, 3), thickness=1.0)
        >>> bands, errors, stats = LayerClassifier(frame, MaterialTable.default()).classify(asm)
        >>> [b.width() for b in bands]
        [0.5, 0.5]
    """

    def __init__(self, frame, table, min_width=1.0 / 768.0, min_height=0.1, band_tolerance=0.5,
                 thickness_tolerance=1e-6, diag=None):
        self.frame = frame
        self.table = table
        self.clip = ClipFilter(frame.crop_bounds, band_tolerance=band_tolerance)
        self.min_width = float(min_width)
        self.min_height = float(min_height)
        self.thickness_tolerance = float(thickness_tolerance)
        self.diag = diag

    @classmethod
    def from_config(cls, frame, table, cfg, diag=None):
        return cls(
            frame,
            table,
            min_width=cfg.layer_min_width_ft,
            min_height=cfg.band_min_height_ft,
            band_tolerance=cfg.band_clip_tolerance_ft,
            thickness_tolerance=cfg.thickness_tolerance,
            diag=diag,
        )

    def classify(self, assembly):
        """Compute bands for one assembly.

        Returns:
            bands: list of Band in layer order
            errors: list of TraceError
            stats: dict of counters plus "materials" (material name -> layer count)
        """
        bands = []
        errors = []
        stats = {
            "layers": 0,
            "bands": 0,
            "layers_skipped": 0,
            "layers_too_thin": 0,
            "bands_clip_miss": 0,
            "bands_degenerate": 0,
            "classification_fallbacks": 0,
            "materials": {},
        }

        axis, from_max = thickness_axis(self.frame, assembly.direction, assembly.orientation)
        xmin, ymin, xmax, ymax = assembly.extents
        if axis == 0:
            t_lo, t_hi, h_lo, h_hi = xmin, xmax, ymin, ymax
        else:
            t_lo, t_hi, h_lo, h_hi = ymin, ymax, xmin, xmax

        offset = 0.0
        total = 0.0
        for index, raw in enumerate(assembly.layers):
            try:
                layer = MaterialLayer.coerce(raw)
            except (TypeError, ValueError) as e:
                errors.append(TraceError.from_exception(
                    ErrorKind.LAYER, e, elem_id=assembly.element_id,
                    context="layer {0} unreadable, later layers shift into its slot".format(index),
                    extra={"layer_index": index, "offset": offset, "offset_advanced": False},
                ))
                continue

            total += layer.width
            stats["layers"] += 1
            material = layer.name or "Default"
            stats["materials"][material] = stats["materials"].get(material, 0) + 1

            try:
                band, outcome = self._layer_band(
                    assembly, index, layer, offset, axis, from_max, (t_lo, t_hi, h_lo, h_hi), stats
                )
            except Exception as e:
                errors.append(TraceError.from_exception(
                    ErrorKind.LAYER, e, elem_id=assembly.element_id,
                    context="layer {0} ({1})".format(index, material),
                ))
            else:
                if band is not None:
                    bands.append(band)
                    stats["bands"] += 1
                elif outcome is DropReason.CLIP_MISS:
                    stats["bands_clip_miss"] += 1
                elif outcome is DropReason.BAND_DEGENERATE:
                    stats["bands_degenerate"] += 1
                elif outcome is not None:
                    stats[outcome] += 1

            offset += layer.width

        if assembly.thickness is not None and abs(total - assembly.thickness) > self.thickness_tolerance:
            errors.append(TraceError(
                ErrorKind.THICKNESS_MISMATCH,
                "layer widths sum to {0:.6f} but assembly thickness is {1:.6f}".format(total, assembly.thickness),
                elem_id=assembly.element_id,
                extra={"sum_widths": total, "thickness": assembly.thickness},
            ))

        return bands, errors, stats

    def _layer_band(self, assembly, index, layer, offset, axis, from_max, span, stats):
        """Resolve and place one layer.

        Returns:
            (Band, None) when drawn, otherwise (None, outcome) where outcome is a
            DropReason or the stats key of a non-drawing outcome.
        """
        key, mapping, how = self.table.resolve(layer.name)
        if how == "default":
            stats["classification_fallbacks"] += 1
            if self.diag is not None:
                self.diag.info_dedupe(
                    dedupe_key="fallback|{0}".format(layer.name),
                    phase="layers",
                    callsite="LayerClassifier.classify",
                    message="Unmapped material resolved via Default",
                    elem_id=assembly.element_id,
                    extra={"material": layer.name, "resolved_key": key},
                )

        if mapping.skip:
            return None, "layers_skipped"

        if layer.width < self.min_width:
            return None, "layers_too_thin"

        t_lo, t_hi, h_lo, h_hi = span
        if from_max:
            a1 = t_hi - offset
            a0 = a1 - layer.width
        else:
            a0 = t_lo + offset
            a1 = a0 + layer.width
        a0 = max(a0, t_lo)
        a1 = min(a1, t_hi)
        if a1 - a0 < self.min_width:
            return None, DropReason.BAND_DEGENERATE

        if axis == 0:
            rect = (a0, h_lo, a1, h_hi)
        else:
            rect = (h_lo, a0, h_hi, a1)

        clipped = self.clip.clip_rect(*rect)
        if clipped is None:
            return None, DropReason.CLIP_MISS

        cx0, cy0, cx1, cy1 = clipped
        thick = (cx1 - cx0) if axis == 0 else (cy1 - cy0)
        tall = (cy1 - cy0) if axis == 0 else (cx1 - cx0)
        if thick < self.min_width or tall < self.min_height:
            return None, DropReason.BAND_DEGENERATE

        band = Band(
            cx0, cy0, cx1, cy1,
            representation_id=mapping.representation_id,
            line_weight=mapping.line_weight,
            material=layer.name,
            layer_index=index,
            elem_id=assembly.element_id,
        )
        return band, None
