# tests/test_projector.py

import math

import pytest

from section_trace.config import Config
from section_trace.core.brep import Arc3D, Line3D, PolyCurve3D
from section_trace.core.errors import DropReason
from section_trace.core.projector import CurveProjector, ProjectedArc, ProjectedLine, reconstruct_arc


def test_line_is_flattened(section_frame):
    curve, reason = CurveProjector(section_frame).project(Line3D((0, 4, 0), (5, 9, 3)))
    assert reason is None
    assert curve == ProjectedLine((0.0, 0.0), (5.0, 3.0))


def test_curve_along_view_normal_is_degenerate(plan_frame):
    curve, reason = CurveProjector(plan_frame).project(Line3D((0, 0, 0), (0, 0, 5)))
    assert curve is None
    assert reason is DropReason.DEGENERATE


def test_non_finite_point_is_never_emitted(section_frame):
    projector = CurveProjector(section_frame)
    for bad in (float("nan"), float("inf")):
        curve, reason = projector.project(Line3D((bad, 0, 0), (1, 0, 0)))
        assert curve is None
        assert reason is DropReason.DEGENERATE


def test_endpoint_on_crop_edge_keeps_whole_curve(section_frame):
    curve, reason = CurveProjector(section_frame).project(Line3D((10, 0, 0), (20, 0, 0)))
    assert reason is None
    assert curve.end == (20.0, 0.0)


def test_endpoint_within_tolerance_is_kept(section_frame):
    curve, _ = CurveProjector(section_frame).project(Line3D((10.05, 0, 0), (20, 0, 0)))
    assert curve is not None


def test_curve_outside_crop_is_clip_miss(section_frame):
    curve, reason = CurveProjector(section_frame).project(Line3D((30, 0, 0), (40, 0, 0)))
    assert curve is None
    assert reason is DropReason.CLIP_MISS


def test_crossing_curve_with_both_endpoints_outside_is_dropped(section_frame):
    curve, reason = CurveProjector(section_frame).project(Line3D((-20, 0, 0), (20, 0, 0)))
    assert curve is None
    assert reason is DropReason.CLIP_MISS


def test_length_limits(section_frame):
    projector = CurveProjector(section_frame)
    assert projector.project(Line3D((0, 0, 0), (0.0001, 0, 0)))[1] is DropReason.DEGENERATE
    assert projector.project(Line3D((0, 0, 0), (20000, 0, 0)))[1] is DropReason.DEGENERATE
    assert projector.project(Line3D((0, 0, 0), (0.001, 0, 0)))[1] is None


def test_arc_in_view_plane_is_reconstructed(section_frame):
    arc3d = Arc3D((1, 0, 0), (-1, 0, 0), (0, 0, 0), mid=(0, 0, 1))
    projector = CurveProjector(section_frame)

    curve, reason = projector.project(arc3d)

    assert reason is None
    assert isinstance(curve, ProjectedArc)
    assert curve.radius == pytest.approx(1.0)
    assert curve.clockwise is False
    assert curve.sweep() == pytest.approx(math.pi)
    assert not projector.is_degraded_arc(arc3d, curve)


def test_clockwise_arc_direction(section_frame):
    arc3d = Arc3D((-1, 0, 0), (1, 0, 0), (0, 0, 0), mid=(0, 0, 1))
    curve, _ = CurveProjector(section_frame).project(arc3d)
    assert curve.clockwise is True


def test_foreshortened_arc_degrades_to_chord(section_frame):
    c = math.sqrt(0.5)
    arc3d = Arc3D((1, 0, 0), (0, 1, 0), (0, 0, 0), mid=(c, c, 0))
    projector = CurveProjector(section_frame)

    curve, reason = projector.project(arc3d)

    assert reason is None
    assert curve == ProjectedLine((1.0, 0.0), (0.0, 0.0))
    assert projector.is_degraded_arc(arc3d, curve)


def test_other_curves_become_their_chord(section_frame):
    spline = PolyCurve3D([(0, 0, 0), (1, 0, 2), (2, 0, 0)])
    curve, _ = CurveProjector(section_frame).project(spline)
    assert curve == ProjectedLine((0.0, 0.0), (2.0, 0.0))


def test_arc_without_mid_point_becomes_its_chord(section_frame):
    arc3d = Arc3D((-1, 0, 0), (1, 0, 0), (0, 0, 0))
    projector = CurveProjector(section_frame)

    curve, reason = projector.project(arc3d)

    assert reason is None
    assert curve == ProjectedLine((-1.0, 0.0), (1.0, 0.0))
    assert projector.is_degraded_arc(arc3d, curve)
    assert reconstruct_arc((-1, 0), (1, 0), (0, 0)) is None


def test_reconstruct_arc_rejects_collinear_mid():
    assert reconstruct_arc((1, 0), (-1, 0), (0, 0), mid=(0, 0)) is None


def test_from_config_uses_config_tolerances(section_frame):
    cfg = Config(curve_tolerance_ft=1.0, max_curve_length_ft=5.0)
    projector = CurveProjector.from_config(section_frame, cfg)
    assert projector.project(Line3D((10.5, 0, 0), (12, 0, 0)))[0] is not None
    assert projector.project(Line3D((0, 0, 0), (6, 0, 0)))[1] is DropReason.DEGENERATE


def test_projected_curves_are_immutable_values():
    a = ProjectedLine((0, 0), (1, 1))
    assert a == ProjectedLine((0.0, 0.0), (1.0, 1.0))
    assert len({a, ProjectedLine((0, 0), (1, 1))}) == 1
    with pytest.raises(AttributeError):
        a.start = (5, 5)
    assert a.to_dict() == {"kind": "line", "start": [0.0, 0.0], "end": [1.0, 1.0]}
