# tests/test_pipeline.py

import json

import pytest

from section_trace.config import ANNOTATION_CATEGORIES, DETAIL_CATEGORIES, Config
from section_trace.core.brep import Line3D, box_solid
from section_trace.core.errors import ErrorKind, FatalPrecondition
from section_trace.core.layers import LayeredAssembly
from section_trace.core.materials import MaterialMapping, MaterialTable
from section_trace.pipeline import TraceOrchestrator, pick_line_style, trace_view


class _Elem:
    def __init__(self, id, category="Walls"):
        self.id = id
        self.category = category


def _section_definition(**overrides):
    d = {
        "origin": (0.0, 0.0, 0.0),
        "basis_x": (1.0, 0.0, 0.0),
        "basis_y": (0.0, 0.0, 1.0),
        "basis_z": (0.0, -1.0, 0.0),
        "crop_min": (-10.0, -10.0),
        "crop_max": (10.0, 10.0),
        "view_id": 500,
        "name": "Section 1",
        "view_type": "Section",
        "line_styles": ["<Thin Lines>", "<Medium Lines>", "<Wide Lines>"],
    }
    d.update(overrides)
    return d


class FakeCollaborators:
    """In-memory host: elements, geometry and assemblies keyed by element id."""

    def __init__(self, view_def=None, elements=(), geometry=None, assemblies=None, copied=None):
        self.view_def = view_def if view_def is not None else _section_definition()
        self.elements = list(elements)
        self.geometry = geometry or {}
        self.assemblies = assemblies or {}
        self.copied = copied if copied is not None else {DETAIL_CATEGORIES: [101, 102], ANNOTATION_CATEGORIES: 3}
        self.duplicate_calls = []

    def view_definition(self, view):
        return self.view_def

    def visible_elements(self, view, categories):
        return self.elements

    def read_geometry(self, element):
        g = self.geometry.get(element.id)
        if isinstance(g, Exception):
            raise g
        return g

    def read_assembly(self, element, frame):
        return self.assemblies.get(element.id)

    def duplicate_annotations(self, view, categories):
        self.duplicate_calls.append(categories)
        c = self.copied.get(categories)
        if isinstance(c, Exception):
            raise c
        return c

    def element_id(self, element):
        return element.id

    def category_name(self, element):
        return element.category


def _wall_assembly(elem_id):
    return LayeredAssembly(
        elem_id, [("Concrete", 0.5), ("GWB", 0.5)], (0.0, 1.0, 0.0), (0.0, 0.0, 1.0, 3.0), thickness=1.0
    )


def _one_wall_host(**kw):
    return FakeCollaborators(
        elements=[_Elem(1)],
        geometry={1: [box_solid(0, 0, 0, 1, 1, 3)]},
        assemblies={1: _wall_assembly(1)},
        **kw
    )


def test_trace_wall_produces_curves_bands_and_counters():
    result = trace_view("view", _one_wall_host())

    c = result.counters
    assert c["elements_seen"] == 1
    assert c["curves_traversed"] == 24
    # Edges along the view direction collapse to points.
    assert c["curves_degenerate"] == 8
    assert c["traced_curves"] == 16
    assert len(result.curves) == 16
    assert result.curves_by_category == {"Walls": 16}

    assert c["assemblies"] == 1
    assert c["bands"] == 2
    assert result.bands_by_category == {"Walls": 2}
    assert [b.representation_id for b in result.bands] == ["CONCRETE", "SOLID FILL LT GRAY"]
    assert result.layers_processed == {"Concrete": 1, "GWB": 1}

    assert c["copied_detail_elements"] == 2
    assert c["copied_annotations"] == 3
    assert result.errors == []
    assert result.line_style == "<Medium Lines>"


def test_floor_bands_are_counted_under_their_category():
    floor = LayeredAssembly(
        2, [("Concrete", 0.75), ("Default", 0.25)], None, (0.0, 0.0, 4.0, 1.0),
        thickness=1.0, orientation=(0.0, 0.0, 1.0), category="Floors",
    )
    host = FakeCollaborators(
        elements=[_Elem(1), _Elem(2, "Floors")],
        assemblies={1: _wall_assembly(1), 2: floor},
    )

    result = trace_view("view", host)

    assert result.counters["assemblies"] == 2
    assert result.bands_by_category == {"Walls": 2, "Floors": 2}
    assert result.to_dict()["bands_by_category"] == {"Walls": 2, "Floors": 2}


def test_trace_is_deterministic():
    host = _one_wall_host()
    orchestrator = TraceOrchestrator(host)
    a = orchestrator.trace("view")
    b = orchestrator.trace("view")
    assert a.curves == b.curves
    assert a.bands == b.bands
    assert a.counters == b.counters


def test_missing_view_definition_is_fatal():
    host = FakeCollaborators()
    host.view_def = None
    host.view_definition = lambda view: None
    with pytest.raises(FatalPrecondition):
        trace_view("view", host)


def test_failing_view_definition_is_fatal():
    host = FakeCollaborators()

    def boom(view):
        raise RuntimeError("no crop box")

    host.view_definition = boom
    with pytest.raises(FatalPrecondition):
        trace_view("view", host)


def test_invalid_crop_is_fatal_before_any_work():
    host = _one_wall_host(view_def=_section_definition(crop_min=(5.0, 5.0), crop_max=(5.0, 10.0)))
    with pytest.raises(FatalPrecondition):
        trace_view("view", host)
    assert host.duplicate_calls == []


def test_unsupported_view_type_is_fatal():
    host = FakeCollaborators(view_def=_section_definition(view_type="ThreeD"))
    with pytest.raises(FatalPrecondition, match="ThreeD"):
        trace_view("view", host)


def test_failing_element_is_skipped_and_recorded():
    host = FakeCollaborators(
        elements=[_Elem(1), _Elem(2), _Elem(3, "Floors")],
        geometry={
            1: [Line3D((0, 0, 0), (1, 0, 0))],
            2: RuntimeError("geometry unavailable"),
            3: [Line3D((0, 0, 1), (1, 0, 1))],
        },
    )

    result = trace_view("view", host)

    assert result.counters["elements_seen"] == 3
    assert result.counters["elements_skipped"] == 1
    assert result.counters["traced_curves"] == 2
    assert result.curves_by_category == {"Walls": 1, "Floors": 1}
    assert len(result.errors) == 1
    assert result.errors[0].kind is ErrorKind.ELEMENT_EXTRACTION
    assert result.errors[0].elem_id == 2
    assert "geometry unavailable" in result.error_messages[0]


def test_enumeration_failure_yields_empty_result():
    host = FakeCollaborators()

    def boom(view, categories):
        raise RuntimeError("collector failed")

    host.visible_elements = boom
    result = trace_view("view", host)

    assert result.curves == []
    assert result.errors[0].kind is ErrorKind.ELEMENT_EXTRACTION
    assert result.counters["copied_annotations"] == 3


def test_clip_miss_and_degenerate_are_counted_not_errors():
    host = FakeCollaborators(
        elements=[_Elem(1)],
        geometry={1: [
            Line3D((30, 0, 0), (40, 0, 0)),
            Line3D((float("nan"), 0, 0), (1, 0, 0)),
            Line3D((0, 0, 0), (0, 5, 0)),
        ]},
    )
    result = trace_view("view", host)

    assert result.curves == []
    assert result.counters["curves_clip_miss"] == 1
    assert result.counters["curves_degenerate"] == 2
    assert result.errors == []


def test_degraded_arc_is_counted():
    from section_trace.core.brep import Arc3D

    host = FakeCollaborators(elements=[_Elem(1)], geometry={1: [Arc3D((1, 0, 0), (0, 1, 0), (0, 0, 0))]})
    result = trace_view("view", host)
    assert result.counters["arc_degraded"] == 1
    assert result.curves[0].kind == "line"


def test_duplication_failure_is_recorded():
    host = FakeCollaborators(copied={DETAIL_CATEGORIES: RuntimeError("copy failed"), ANNOTATION_CATEGORIES: [7]})
    result = trace_view("view", host)

    assert result.counters["copied_detail_elements"] == 0
    assert result.counters["copied_annotations"] == 1
    assert [e.kind for e in result.errors] == [ErrorKind.DUPLICATION]
    assert "Error copying detail elements" in result.error_messages[0]


def test_pass_switches():
    host = _one_wall_host()
    cfg = Config(trace_model_geometry=False, copy_detail_elements=False, copy_annotations=False)

    result = trace_view("view", host, cfg=cfg)

    assert result.curves == []
    assert result.counters["bands"] == 2
    assert host.duplicate_calls == []


def test_material_table_path_from_config(tmp_path):
    path = tmp_path / "materials.json"
    path.write_text(json.dumps({"mappings": {"Default": {"representation_id": "HATCH", "line_weight": 4}}}),
                    encoding="utf-8")

    result = trace_view("view", _one_wall_host(), cfg=Config(material_table_path=str(path)))

    assert [b.representation_id for b in result.bands] == ["HATCH", "HATCH"]
    assert result.counters["classification_fallbacks"] == 2


def test_explicit_table_wins():
    table = MaterialTable({"Concrete": MaterialMapping("C"), "GWB": MaterialMapping(skip=True)})
    result = trace_view("view", _one_wall_host(), table=table)
    assert [b.representation_id for b in result.bands] == ["C"]
    assert result.counters["layers_skipped"] == 1


def test_errors_are_mirrored_into_diagnostics():
    host = FakeCollaborators(elements=[_Elem(2)], geometry={2: RuntimeError("boom")})
    result = trace_view("view", host)
    events = result.diagnostics.to_dict()["events"]
    assert any(ev["extra"].get("kind") == "element_extraction" for ev in events)


def test_to_dict_is_json_serializable():
    result = trace_view("view", _one_wall_host())
    d = result.to_dict(include_geometry=True)

    json.dumps(d)
    assert d["success"] is True
    assert d["source_view_id"] == 500
    assert d["view_bounds"] == {"width": 20.0, "height": 20.0}
    assert d["statistics"]["traced_curves"] == 16
    assert d["layers_analyzed"] == 2
    assert d["errors"] is None
    assert len(d["curves"]) == 16
    assert len(d["bands"]) == 2


def test_verbose_prints_summary(capsys):
    trace_view("view", _one_wall_host(), cfg=Config(verbose=True))
    out = capsys.readouterr().out
    assert "[INFO] section_trace.pipeline: Traced 16 curves, 2 bands from 1 elements" in out


def test_pick_line_style():
    assert pick_line_style(["<Thin Lines>", "<Wide Lines>"]) == "<Thin Lines>"
    assert pick_line_style(["<Wide Lines>", "<Hidden>"]) == "<Wide Lines>"
    assert pick_line_style(None) is None
