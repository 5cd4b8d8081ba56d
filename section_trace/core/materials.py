"""
Material-name to drawing-representation lookup.

MaterialTable is built once and never mutated: exact matches come from a
case-folded dict, substring matches from short ordered lists, and anything
else resolves to the "Default" entry. Tables can be loaded from JSON so the
mapping stays configurable outside the engine.
"""

import json
import re
from types import MappingProxyType

DEFAULT_KEY = "Default"

_NON_WORD_RE = re.compile(r"[^0-9a-z]+")


def normalize_material_name(name):
    """Case-fold, turn punctuation into spaces and collapse whitespace.

    Example:
        >>> normalize_material_name("Plywood, Sheathing")
        'plywood sheathing'
    """
    return _NON_WORD_RE.sub(" ", str(name).casefold()).strip()


class MaterialMapping:
    """How one material is drawn.

    Attributes:
        representation_id: Fill pattern / filled-region type name (optional)
        line_weight: Pen weight for the band outline (default: 2)
        skip: Layer occupies thickness but gets no band (air gaps, membranes)
        priority: Ordering tie-breaker for substring matches (lower wins)
        detail_component: Optional detail component family name
    """

    __slots__ = ("representation_id", "line_weight", "skip", "priority", "detail_component")

    def __init__(self, representation_id=None, line_weight=2, skip=False, priority=100, detail_component=None):
        object.__setattr__(self, "representation_id", None if representation_id in (None, "") else str(representation_id))
        object.__setattr__(self, "line_weight", int(line_weight))
        object.__setattr__(self, "skip", bool(skip))
        object.__setattr__(self, "priority", int(priority))
        object.__setattr__(self, "detail_component", None if detail_component in (None, "") else str(detail_component))
        if self.line_weight < 1:
            raise ValueError("line_weight must be >= 1")

    def __setattr__(self, name, value):
        raise AttributeError("MaterialMapping is immutable")

    def to_dict(self):
        return {
            "representation_id": self.representation_id,
            "line_weight": self.line_weight,
            "skip": self.skip,
            "priority": self.priority,
            "detail_component": self.detail_component,
        }

    @classmethod
    def from_dict(cls, d):
        if not isinstance(d, dict):
            raise ValueError("material mapping must be an object, got {0}".format(type(d).__name__))
        return cls(
            representation_id=d.get("representation_id"),
            line_weight=d.get("line_weight", 2),
            skip=d.get("skip", False),
            priority=d.get("priority", 100),
            detail_component=d.get("detail_component"),
        )

    def __eq__(self, other):
        if not isinstance(other, MaterialMapping):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(sorted(self.to_dict().items())))

    def __repr__(self):
        if self.skip:
            return "MaterialMapping(skip=True)"
        return "MaterialMapping({0!r}, line_weight={1})".format(self.representation_id, self.line_weight)


# Built-in table, grouped by material family. Order matters only for
# substring ties after length and priority.
_DEFAULT_ROWS = (
    # Stucco / plaster
    ("Stucco", "STUCCO", 1),
    ("Stucco Finish", "STUCCO", 1),
    ("Stucco Finish - 001", "STUCCO", 1),
    ("Stucco Finish - 002", "STUCCO", 1),
    ("Finish - Exterior - Stucco", "STUCCO", 1),
    ("Plaster", "STUCCO", 1),
    # Concrete
    ("Concrete", "CONCRETE", 2),
    ("Concrete - Cast-in-Place", "CONCRETE", 2),
    ("Concrete, Cast-in-Place", "CONCRETE", 2),
    ("Concrete, Cast-in-Place gray", "CONCRETE", 2),
    ("Concrete - Precast", "CONCRETE 2", 2),
    # CMU / masonry
    ("CMU", "GROUT", 2),
    ("Concrete Masonry Units", "GROUT", 2),
    ("Masonry - Concrete Masonry Units", "GROUT", 2),
    # Gypsum
    ("Gypsum Wall Board", "SOLID FILL LT GRAY", 1),
    ("Gypsum Board", "SOLID FILL LT GRAY", 1),
    ("GWB", "SOLID FILL LT GRAY", 1),
    ("Drywall", "SOLID FILL LT GRAY", 1),
    # Wood
    ("Wood", "WOOD", 2),
    ("Wood - Framing", "WOOD", 2),
    ("Wood - Stud Layer", "WOOD", 2),
    ("Softwood, Lumber", "WOOD", 2),
    ("Softwood - Lumber", "WOOD", 2),
    ("Plywood", "Wood 1", 1),
    ("Plywood, Sheathing", "Wood 1", 1),
    # Metal
    ("Metal", "STEEL", 3),
    ("Metal - Steel", "STEEL", 3),
    ("Steel", "STEEL", 3),
    ("Metal - Stud Layer", "STEEL", 2),
    ("Metal Stud", "STEEL", 2),
    ("Metal Furring", "STEEL", 2),
    ("Metal Deck", "STEEL", 2),
    ("Aluminum", "SOLID FILL LT GRAY", 2),
    # Insulation
    ("Insulation", "CMU INSULATION", 1),
    ("Rigid Insulation", "Diagonal Crosshatch", 1),
    ("Insulation / Thermal Barriers - Batt", "CMU INSULATION", 1),
    ("Insulation / Thermal Barriers - Rigid", "Diagonal Crosshatch", 1),
    ("Insulation - Batt", "CMU INSULATION", 1),
    ("Batt Insulation", "CMU INSULATION", 1),
    # Roofing
    ("Roofing", "Solid Black", 2),
    ("Roofing - TPO", "Solid Black", 2),
    ("Roofing - EPDM", "Solid Black", 2),
    ("Roofing, EPDM Membrane", "Solid Black", 2),
    ("Roofing - Built Up", "GRAY SHADE", 2),
    # Earth / site
    ("Earth", "EARTH", 2),
    ("Soil", "SOIL", 2),
    ("Stone", "STONE", 2),
    # Glass
    ("Glass", "LT GRAY TRANSPARENT 2", 1),
    # Defaults
    ("Default", "SOLID FILL LT GRAY", 2),
    ("Default Wall", "SOLID FILL LT GRAY", 2),
    ("Default Floor", "CONCRETE", 2),
    ("Default Roof", "CONCRETE", 2),
)

# Air gaps and membranes occupy thickness but are never drawn.
_DEFAULT_SKIPS = ("Air", "Air Space", "Membrane Layer")


def default_mappings():
    """The built-in mapping rows as an ordered dict of name -> MaterialMapping."""
    rows = {}
    for name, rep, weight in _DEFAULT_ROWS:
        rows[name] = MaterialMapping(representation_id=rep, line_weight=weight)
    for name in _DEFAULT_SKIPS:
        rows[name] = MaterialMapping(skip=True)
    return rows


class MaterialTable:
    """Immutable two-phase material lookup.

    Example:
        >>> table = MaterialTable.default()
        >>> table.resolve("Concrete, Cast-in-Place")[2]
        'exact'
        >>> key, mapping, how = table.resolve("Plywood Sheathing Grade A")
        >>> key, mapping.line_weight, how
        ('Plywood, Sheathing', 1, 'substring')
    """

    __slots__ = ("_exact", "_normalized", "_contained", "_containing", "_default")

    def __init__(self, mappings):
        exact = {}
        normalized_exact = {}
        substring = []
        for order, (name, mapping) in enumerate(mappings.items()):
            if not isinstance(mapping, MaterialMapping):
                raise ValueError("mapping for {0!r} is not a MaterialMapping".format(name))
            folded = str(name).casefold()
            if folded in exact:
                # First declaration wins, matching case-insensitive dict semantics.
                continue
            exact[folded] = (str(name), mapping)
            normalized = normalize_material_name(name)
            if normalized:
                normalized_exact.setdefault(normalized, (str(name), mapping))
                substring.append((normalized, order, str(name), mapping))

        # Key inside name: longest key first. Name inside key: shortest key first.
        # Ties go to lower priority, then declaration order.
        contained = sorted(substring, key=lambda row: (-len(row[0]), row[3].priority, row[1]))
        containing = sorted(substring, key=lambda row: (len(row[0]), row[3].priority, row[1]))

        default = exact.get(DEFAULT_KEY.casefold())
        if default is None:
            default = (DEFAULT_KEY, MaterialMapping())

        object.__setattr__(self, "_exact", MappingProxyType(exact))
        object.__setattr__(self, "_normalized", MappingProxyType(normalized_exact))
        object.__setattr__(self, "_contained", tuple(contained))
        object.__setattr__(self, "_containing", tuple(containing))
        object.__setattr__(self, "_default", default)

    def __setattr__(self, name, value):
        raise AttributeError("MaterialTable is immutable")

    @classmethod
    def default(cls):
        return cls(default_mappings())

    @classmethod
    def from_dict(cls, d):
        """Build from {"mappings": {name: {...}}} (or a bare {name: {...}} dict)."""
        if not isinstance(d, dict):
            raise ValueError("material table must be a JSON object")
        raw = d.get("mappings", d)
        if not isinstance(raw, dict):
            raise ValueError("'mappings' must be an object")
        return cls({str(name): MaterialMapping.from_dict(entry) for name, entry in raw.items()})

    def to_dict(self):
        return {"mappings": {name: mapping.to_dict() for name, mapping in self._exact.values()}}

    def __len__(self):
        return len(self._exact)

    def __contains__(self, name):
        return str(name).casefold() in self._exact

    def exact_match(self, name):
        hit = self._exact.get(str(name).casefold())
        return hit[1] if hit is not None else None

    def substring_match(self, name):
        """Normalized-equal key, else table key inside name, else name inside table key."""
        hit = self._substring_hit(name)
        return hit[1] if hit is not None else None

    def _substring_hit(self, name):
        needle = normalize_material_name(name)
        if not needle:
            return None
        hit = self._normalized.get(needle)
        if hit is not None:
            return hit
        for normalized, _order, key, mapping in self._contained:
            if normalized in needle:
                return key, mapping
        for normalized, _order, key, mapping in self._containing:
            if needle in normalized:
                return key, mapping
        return None

    @property
    def default_mapping(self):
        return self._default[1]

    def resolve(self, name):
        """Resolve a material name.

        Returns:
            (key, mapping, how) where how is "exact", "substring" or "default"
        """
        if name:
            hit = self._exact.get(str(name).casefold())
            if hit is not None:
                return hit[0], hit[1], "exact"
            hit = self._substring_hit(name)
            if hit is not None:
                return hit[0], hit[1], "substring"
        return self._default[0], self._default[1], "default"

    def __repr__(self):
        return "MaterialTable({0} entries)".format(len(self._exact))


def load_material_table(path):
    """Load a MaterialTable from a JSON file (UTF-8)."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return MaterialTable.from_dict(data)
