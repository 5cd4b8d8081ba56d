# tests/test_materials.py

import json

import pytest

from section_trace.core.materials import (
    DEFAULT_KEY,
    MaterialMapping,
    MaterialTable,
    load_material_table,
    normalize_material_name,
)


@pytest.fixture
def table():
    return MaterialTable.default()


def test_exact_match_is_case_insensitive(table):
    key, mapping, how = table.resolve("concrete, CAST-IN-PLACE")
    assert key == "Concrete, Cast-in-Place"
    assert mapping.representation_id == "CONCRETE"
    assert mapping.line_weight == 2
    assert how == "exact"


def test_substring_prefers_the_longest_key(table):
    key, mapping, how = table.resolve("Plywood Sheathing Grade A")
    assert key == "Plywood, Sheathing"
    assert mapping.line_weight == 1
    assert how == "substring"


def test_name_contained_in_key_matches(table):
    key, _, how = table.resolve("Thermal Barriers - Batt")
    assert how == "substring"
    assert key == "Insulation / Thermal Barriers - Batt"


@pytest.mark.parametrize("name, expected_key, rep, weight", [
    ("Insulation ", "Insulation", "CMU INSULATION", 1),
    ("Concrete.", "Concrete", "CONCRETE", 2),
    ("Metal -", "Metal", "STEEL", 3),
])
def test_punctuation_variant_resolves_to_its_own_key(table, name, expected_key, rep, weight):
    key, mapping, how = table.resolve(name)
    assert how == "substring"
    assert key == expected_key
    assert (mapping.representation_id, mapping.line_weight) == (rep, weight)


def test_name_inside_keys_prefers_the_shortest_key():
    t = MaterialTable({
        "Rigid Foam Insulation Board": MaterialMapping("LONG"),
        "Foam Insulation": MaterialMapping("SHORT"),
        DEFAULT_KEY: MaterialMapping("D"),
    })
    assert t.resolve("foam")[0] == "Foam Insulation"


def test_unmapped_material_falls_back_to_default(table):
    key, mapping, how = table.resolve("Vapor Barrier XYZ")
    assert key == DEFAULT_KEY
    assert how == "default"
    assert mapping == table.default_mapping
    assert mapping.representation_id == "SOLID FILL LT GRAY"


@pytest.mark.parametrize("name", [None, "", "   "])
def test_blank_names_resolve_to_default(table, name):
    assert table.resolve(name)[2] == "default"


def test_air_layers_are_skipped(table):
    assert table.exact_match("Air Space").skip is True
    assert table.resolve("Air")[1].skip is True


def test_lookup_helpers(table):
    assert "gwb" in table
    assert "Unobtainium" not in table
    assert table.exact_match("Unobtainium") is None
    assert table.substring_match("Cold-formed Metal Stud 20ga").representation_id == "STEEL"


def test_table_is_immutable(table):
    with pytest.raises(AttributeError):
        table._default = None
    with pytest.raises(AttributeError):
        MaterialMapping().line_weight = 4


def test_mapping_validation():
    with pytest.raises(ValueError):
        MaterialMapping("X", line_weight=0)
    with pytest.raises(ValueError):
        MaterialMapping.from_dict(["X", 2])


def test_normalize_material_name():
    assert normalize_material_name("  Roofing, EPDM  Membrane ") == "roofing epdm membrane"


def test_priority_breaks_equal_length_ties():
    t = MaterialTable({
        "Foam A": MaterialMapping("A", priority=50),
        "Foam B": MaterialMapping("B", priority=10),
        DEFAULT_KEY: MaterialMapping("D"),
    })
    assert t.resolve("foam")[0] == "Foam B"


def test_missing_default_row_uses_builtin_mapping():
    t = MaterialTable({"Brick": MaterialMapping("BRICK", line_weight=3)})
    key, mapping, how = t.resolve("Glass")
    assert (key, how) == (DEFAULT_KEY, "default")
    assert mapping == MaterialMapping()


def test_load_material_table_from_json(tmp_path):
    path = tmp_path / "materials.json"
    path.write_text(json.dumps({
        "mappings": {
            "Brick": {"representation_id": "BRICK", "line_weight": 3},
            "Air Gap": {"skip": True},
            "Default": {"representation_id": "HATCH"},
        }
    }), encoding="utf-8")

    t = load_material_table(str(path))

    assert len(t) == 3
    assert t.resolve("Face Brick")[1].line_weight == 3
    assert t.resolve("air gap")[1].skip is True
    assert t.resolve("Timber")[1].representation_id == "HATCH"


def test_to_dict_is_loadable(table):
    again = MaterialTable.from_dict(json.loads(json.dumps(table.to_dict())))
    assert len(again) == len(table)
    assert again.resolve("Plywood Sheathing Grade A")[0] == "Plywood, Sheathing"
