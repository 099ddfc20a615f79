#!/usr/bin/env python
"""
Tests for the CurveModel orchestrator: recompute on every change, fit-mode
dispatch, curve presence, reset and snapshots.
"""
import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import CurveModel, FitMode, InternalConsistencyError


@pytest.fixture
def model():
    return CurveModel()


def test_initial_state(model):
    assert model.order == 1
    assert model.fit_mode is FitMode.BEST
    np.testing.assert_array_equal(model.coefficients, [0.0, 0.0])
    assert model.chi_squared == 0.0
    assert model.r_squared == 0.0
    assert not model.is_curve_present()


def test_best_fit_line_scenario(model):
    for x in (1, 2, 3):
        model.add_point((x, x), 1.0)
    np.testing.assert_allclose(model.coefficients, [0.0, 1.0], atol=1e-12)
    assert model.chi_squared == pytest.approx(0.0, abs=1e-9)
    assert model.r_squared == pytest.approx(1.0)
    assert model.is_curve_present()


def test_shared_x_scenario(model):
    model.add_point((1, 1), 1.0)
    model.add_point((1, 5), 1.0)
    assert model.points.unique_x_count() == 1
    np.testing.assert_array_equal(model.coefficients, [0.0, 0.0])


def test_single_point_adjustable_scenario(model):
    model.add_point((0, 0), 1.0)
    model.set_fit_mode(FitMode.ADJUSTABLE)
    model.set_manual_coefficients([2, 1])
    assert model.is_curve_present()
    np.testing.assert_array_equal(model.coefficients, [2.0, 1.0])
    assert model.chi_squared == 0.0
    assert model.r_squared == 0.0


def test_coefficient_length_tracks_order(model):
    for x, y in ((-2, 4), (-1, 1), (0, 0), (1, 1), (2, 4)):
        model.add_point((x, y), 0.5)
    for order in (1, 2, 3, 2, 1):
        model.set_order(order)
        assert len(model.coefficients) == order + 1
    model.set_order(2)
    np.testing.assert_allclose(model.coefficients, [0.0, 0.0, 1.0], atol=1e-10)


def test_invalid_order_is_rejected(model):
    for bad in (0, 4, 1.5, True, "2"):
        with pytest.raises(ValueError):
            model.set_order(bad)
    assert model.order == 1


def test_fit_mode_accepts_strings(model):
    model.set_fit_mode("adjustable")
    assert model.fit_mode is FitMode.ADJUSTABLE
    with pytest.raises(ValueError):
        model.set_fit_mode("manual")


def test_adjustable_curve_present_without_points(model):
    model.set_fit_mode(FitMode.ADJUSTABLE)
    assert model.is_curve_present()
    # starts from the default manual shape
    np.testing.assert_allclose(model.coefficients, [2.7, 0.0])
    assert model.evaluate(5.0) == pytest.approx(2.7)


def test_manual_coefficients_survive_mode_switch(model):
    for x in (1, 2, 3):
        model.add_point((x, 2 * x), 1.0)
    model.set_fit_mode(FitMode.ADJUSTABLE)
    model.set_manual_coefficients([1.0, -1.0])
    model.set_fit_mode(FitMode.BEST)
    np.testing.assert_allclose(model.coefficients, [0.0, 2.0], atol=1e-12)
    model.set_fit_mode(FitMode.ADJUSTABLE)
    np.testing.assert_allclose(model.coefficients, [1.0, -1.0])


def test_lowering_order_zeroes_higher_manual_coefficients(model):
    model.set_fit_mode(FitMode.ADJUSTABLE)
    model.set_order(3)
    model.set_manual_coefficients([1, 2, 3, 4])
    model.set_order(2)
    assert model.manual_coefficients == [1.0, 2.0, 3.0, 0.0]
    model.set_order(1)
    assert model.manual_coefficients == [1.0, 2.0, 0.0, 0.0]
    model.set_order(3)
    np.testing.assert_array_equal(model.coefficients, [1.0, 2.0, 0.0, 0.0])


def test_manual_coefficients_are_validated(model):
    with pytest.raises(ValueError):
        model.set_manual_coefficients([1.0, math.inf])
    model.set_manual_coefficients([1, 2, 3, 4, 5, 6])
    assert model.manual_coefficients == [1.0, 2.0, 3.0, 4.0]
    model.set_manual_coefficient(1, -0.5)
    assert model.manual_coefficients == [1.0, -0.5, 3.0, 4.0]
    with pytest.raises(ValueError):
        model.set_manual_coefficient(4, 1.0)


def test_adjustable_statistics_can_report_poor_fit(model):
    model.set_fit_mode(FitMode.ADJUSTABLE)
    model.set_manual_coefficients([5.0, 0.0])
    for x, y in ((0, 0), (1, 1), (2, 2)):
        model.add_point((x, y), 1.0)
    assert model.r_squared == 0.0
    assert model.chi_squared > 0.0


def test_point_changes_trigger_recompute(model):
    a = model.add_point((0, 0), 1.0)
    b = model.add_point((1, 1), 1.0)
    np.testing.assert_allclose(model.coefficients, [0.0, 1.0], atol=1e-12)

    model.set_point_position(b, (1, 3))
    np.testing.assert_allclose(model.coefficients, [0.0, 3.0], atol=1e-12)

    c = model.add_point((2, 0), 1.0)
    model.set_point_relevance(c, False)
    np.testing.assert_allclose(model.coefficients, [0.0, 3.0], atol=1e-12)
    assert model.number_of_relevant_points() == 2

    model.set_point_relevance(c, True)
    model.set_point_delta(c, 0.1)
    # the precise point at (2, 0) now dominates
    assert abs(model.evaluate(2.0)) < 0.1

    model.remove_point(a)
    assert len(model.points) == 2


def test_point_dragged_off_graph_is_ignored(model):
    model.add_point((0, 0), 1.0)
    p = model.add_point((1, 1), 1.0)
    model.set_point_position(p, (15, 1))
    assert model.number_of_relevant_points() == 1
    assert not model.is_curve_present()
    np.testing.assert_array_equal(model.coefficients, [0.0, 0.0])


def test_delta_is_clamped_through_the_model(model):
    p = model.add_point((0, 0), 0.0)
    assert p.delta == pytest.approx(model.constants.delta.min)
    model.set_point_delta(p, 1e6)
    assert p.delta == pytest.approx(model.constants.delta.max)


def test_unknown_point_is_rejected(model):
    other = CurveModel().add_point((0, 0))
    with pytest.raises(ValueError):
        model.set_point_position(other, (1, 1))
    with pytest.raises(ValueError):
        model.remove_point(other)


def test_recompute_is_idempotent(model):
    for x, y, d in ((0, 1.0, 1.0), (1, 2.5, 0.5), (2, 2.9, 1.0), (3, 4.8, 2.0)):
        model.add_point((x, y), d)
    model.set_order(2)
    first = (model.coefficients, model.chi_squared, model.r_squared)
    model.recompute()
    model.recompute()
    np.testing.assert_array_equal(model.coefficients, first[0])
    assert model.chi_squared == first[1]
    assert model.r_squared == first[2]


def test_listeners_notified_after_each_change(model):
    seen = []
    model.add_listener(lambda: seen.append((model.order, len(model.coefficients))))
    model.add_point((0, 0))
    model.set_order(3)
    model.set_fit_mode(FitMode.ADJUSTABLE)
    assert seen == [(1, 2), (3, 4), (3, 4)]


def test_mutation_inside_notification_is_refused(model):
    errors = []

    def listener():
        try:
            model.set_order(2)
        except RuntimeError as exc:
            errors.append(exc)

    model.add_listener(listener)
    model.add_point((0, 0))
    assert len(errors) == 1
    assert model.order == 1


def test_evaluate_checks_coefficient_length(model):
    model._coefficients = np.zeros(3)
    with pytest.raises(InternalConsistencyError):
        model.evaluate(1.0)


def test_residuals_and_sampling(model):
    assert model.residuals() == []
    model.add_point((0, 0), 1.0)
    model.add_point((2, 2), 1.0)
    res = model.residuals()
    assert [r[0] for r in res] == [0.0, 2.0]
    assert res[1][2] == pytest.approx(2.0)

    xs, ys = model.sample_curve(num=11)
    assert xs[0] == model.constants.graph_bounds.min_x
    assert xs[-1] == model.constants.graph_bounds.max_x
    np.testing.assert_allclose(ys, xs, atol=1e-12)


def test_snap_to_grid_rounds_positions():
    model = CurveModel(snap_to_grid=True)
    p = model.add_point((1.234, -5.678))
    assert p.position == (1.2, -5.7)
    model.set_point_position(p, (0.049, 0.051))
    assert p.position == (0.0, 0.1)


def test_reset(model):
    model.set_order(3)
    model.set_fit_mode(FitMode.ADJUSTABLE)
    model.set_manual_coefficients([1, 1, 1, 1])
    for x in (1, 2, 3):
        model.add_point((x, x * x))
    model.reset()
    assert model.order == 1
    assert model.fit_mode is FitMode.BEST
    assert len(model.points) == 0
    assert model.chi_squared == 0.0
    assert model.r_squared == 0.0
    np.testing.assert_array_equal(model.coefficients, [0.0, 0.0])
    assert model.manual_coefficients == model.constants.default_manual_coefficients


def test_snapshot_round_trip(model):
    model.set_order(2)
    a = model.add_point((0, 1), 0.5)
    model.add_point((1, 3), 1.0)
    model.add_point((2, 2), 2.0)
    model.set_point_relevance(a, False)
    model.set_manual_coefficients([0.5, 0.25])
    snap = model.snapshot()

    restored = CurveModel()
    restored.load_from_snapshot(snap)
    assert restored.order == 2
    assert restored.fit_mode is FitMode.BEST
    assert restored.manual_coefficients == [0.5, 0.25, 0.0, 0.0]
    assert [p.position for p in restored.points] == [(0.0, 1.0), (1.0, 3.0), (2.0, 2.0)]
    assert restored.number_of_relevant_points() == 2
    np.testing.assert_allclose(restored.coefficients, model.coefficients)


def test_bad_snapshot_leaves_model_untouched(model):
    model.add_point((1, 1))
    with pytest.raises(ValueError):
        model.load_from_snapshot({"order": 7, "points": []})
    assert len(model.points) == 1


@pytest.mark.parametrize("snap", [
    {"order": 2.9, "points": []},
    {"order": True, "points": []},
    {"order": "2", "points": []},
    {"order": 2, "points": [{"x": 0, "y": 0, "returning": "false"}]},
    {"order": 2, "points": [{"x": 0, "y": 0, "returning": 0}]},
])
def test_snapshot_values_are_type_checked(model, snap):
    model.add_point((1, 1))
    with pytest.raises(ValueError):
        model.load_from_snapshot(snap)
    assert model.order == 1
    assert model.number_of_relevant_points() == 1
