# models/curve_model.py
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constants import FittingConstants, load_fitting_constants
from .metrics import FitStatistics, compute_residuals, compute_statistics
from .points import PointSet, WeightedPoint
from .polynomial_fit import (
    FitMode,
    InternalConsistencyError,
    adjustable_fit,
    best_fit,
    evaluate_polynomial,
)

logger = logging.getLogger(__name__)


class CurveModel:
    """
    Holds the point set, the requested polynomial order and fit mode, and the
    resulting coefficients and goodness-of-fit statistics.

    Every mutating call recomputes the curve synchronously and then notifies
    listeners (no payload; listeners re-read the model). Listeners must not
    mutate the model while being notified.
    """

    def __init__(self, constants: Optional[FittingConstants] = None, snap_to_grid: bool = False):
        self.constants = constants or load_fitting_constants()
        self.points = PointSet()
        self.snap_to_grid = bool(snap_to_grid)

        self._listeners: List[Callable[[], None]] = []
        self._notifying = False

        self._order = 1
        self._fit_mode = FitMode.BEST
        self._manual_coefficients = list(self.constants.default_manual_coefficients)
        self._coefficients = np.zeros(self._order + 1, dtype=float)
        self._statistics = FitStatistics()
        self.recompute()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------
    @property
    def order(self) -> int:
        return self._order

    @property
    def fit_mode(self) -> FitMode:
        return self._fit_mode

    @property
    def manual_coefficients(self) -> List[float]:
        return list(self._manual_coefficients)

    @property
    def coefficients(self) -> np.ndarray:
        return self._coefficients.copy()

    @property
    def statistics(self) -> FitStatistics:
        return self._statistics

    @property
    def chi_squared(self) -> float:
        return self._statistics.chi_squared

    @property
    def r_squared(self) -> float:
        return self._statistics.r_squared

    def relevant_points(self) -> List[WeightedPoint]:
        return self.points.relevant_points()

    def number_of_relevant_points(self) -> int:
        return len(self.points.relevant_points())

    def is_curve_present(self) -> bool:
        """A curve is drawable with two relevant points, or always when adjustable."""
        return self.number_of_relevant_points() >= 2 or self._fit_mode is FitMode.ADJUSTABLE

    def evaluate(self, x):
        """Curve value at *x* (scalar or array)."""
        self._check_coefficients()
        return evaluate_polynomial(self._coefficients, x)

    def residuals(self) -> List[Tuple[float, float, float]]:
        """(x, y, y_curve) for each relevant point; empty without a curve."""
        if not self.is_curve_present():
            return []
        return compute_residuals(self.points.relevant_points(), self._coefficients)

    def sample_curve(self, num: int = 200) -> Tuple[np.ndarray, np.ndarray]:
        """Sample the curve across the graph's x range for plotting."""
        bounds = self.constants.graph_bounds
        xs = np.linspace(bounds.min_x, bounds.max_x, int(num))
        return xs, self.evaluate(xs)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, callback: Callable[[], None]) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self) -> None:
        self._notifying = True
        try:
            for callback in list(self._listeners):
                callback()
        finally:
            self._notifying = False

    def _check_writable(self) -> None:
        if self._notifying:
            raise RuntimeError("CurveModel cannot be modified from inside a change notification")

    # ------------------------------------------------------------------
    # Points
    # ------------------------------------------------------------------
    def _snap(self, position) -> Tuple[float, float]:
        x, y = (float(v) for v in position)
        if self.snap_to_grid:
            decimals = self.constants.snap_decimals
            x, y = round(x, decimals), round(y, decimals)
        return x, y

    def _require_member(self, point: WeightedPoint) -> None:
        if point not in self.points:
            raise ValueError(f"{point!r} is not part of this curve model")

    def add_point(self, position, delta: Optional[float] = None) -> WeightedPoint:
        """Create a point at *position* and add it; returns the new point."""
        self._check_writable()
        x, y = self._snap(position)
        point = WeightedPoint(x, y, delta,
                              bounds=self.constants.graph_bounds,
                              delta_range=self.constants.delta)
        self.points.add(point)
        self.recompute()
        return point

    def remove_point(self, point: WeightedPoint) -> None:
        self._check_writable()
        self.points.remove(point)
        self.recompute()

    def set_point_position(self, point: WeightedPoint, position) -> None:
        self._check_writable()
        self._require_member(point)
        point.position = self._snap(position)
        self.recompute()

    def set_point_delta(self, point: WeightedPoint, delta: float) -> None:
        self._check_writable()
        self._require_member(point)
        point.delta = delta
        self.recompute()

    def set_point_relevance(self, point: WeightedPoint, relevant: bool) -> None:
        """Mark a point as returning to the bucket (False) or settled (True)."""
        self._check_writable()
        self._require_member(point)
        point.returning = not relevant
        self.recompute()

    # ------------------------------------------------------------------
    # Curve settings
    # ------------------------------------------------------------------
    def _validate_order(self, order) -> int:
        if isinstance(order, bool) or not isinstance(order, (int, np.integer)):
            raise ValueError(f"Order must be an integer, got {order!r}")
        order = int(order)
        if not 1 <= order <= self.constants.max_order:
            raise ValueError(f"Order must be between 1 and {self.constants.max_order}, got {order}")
        return order

    def set_order(self, order: int) -> None:
        """Select the polynomial degree; manual coefficients above it are zeroed."""
        self._check_writable()
        order = self._validate_order(order)
        self._order = order
        for k in range(order + 1, len(self._manual_coefficients)):
            self._manual_coefficients[k] = 0.0
        self.recompute()

    def set_fit_mode(self, fit_mode) -> None:
        self._check_writable()
        self._fit_mode = FitMode(fit_mode)
        self.recompute()

    def _normalize_coefficients(self, coefficients: Sequence[float]) -> List[float]:
        values = [float(c) for c in coefficients]
        if not all(math.isfinite(c) for c in values):
            raise ValueError(f"Manual coefficients must be finite, got {values}")
        size = self.constants.number_of_coefficients
        if len(values) > size:
            logger.debug("Ignoring %d coefficients above order %d", len(values) - size, size - 1)
        values = values[:size]
        values.extend([0.0] * (size - len(values)))
        return values

    def set_manual_coefficients(self, coefficients: Sequence[float]) -> None:
        """Replace the adjustable coefficients (ascending powers, zero-padded)."""
        self._check_writable()
        self._manual_coefficients = self._normalize_coefficients(coefficients)
        self.recompute()

    def set_manual_coefficient(self, power: int, value: float) -> None:
        """Change a single adjustable coefficient (one slider)."""
        if not 0 <= power < self.constants.number_of_coefficients:
            raise ValueError(f"No coefficient for power {power}")
        coefficients = list(self._manual_coefficients)
        coefficients[power] = value
        self.set_manual_coefficients(coefficients)

    # ------------------------------------------------------------------
    # Recompute / reset
    # ------------------------------------------------------------------
    def _check_coefficients(self) -> None:
        if len(self._coefficients) != self._order + 1:
            raise InternalConsistencyError(
                f"Expected {self._order + 1} coefficients, have {len(self._coefficients)}"
            )

    def recompute(self) -> None:
        """Recompute coefficients then statistics from the current inputs, then notify."""
        self._check_writable()
        relevant = self.points.relevant_points()
        if self._fit_mode is FitMode.BEST:
            coefficients = best_fit(relevant, self._order)
        else:
            coefficients = adjustable_fit(self._manual_coefficients, self._order)
        self._coefficients = coefficients
        self._check_coefficients()
        self._statistics = compute_statistics(relevant, coefficients, self._order)
        self._notify()

    def reset(self) -> None:
        """Back to a linear best fit with no points."""
        self._check_writable()
        self._order = 1
        self._fit_mode = FitMode.BEST
        self._manual_coefficients = list(self.constants.default_manual_coefficients)
        self.points.clear()
        self._statistics = FitStatistics()
        self.recompute()

    # ------------------------------------------------------------------
    # Snapshot/save helpers
    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        """Serialize current state for saving."""
        return {
            "order": self._order,
            "fit_mode": self._fit_mode.value,
            "manual_coefficients": list(self._manual_coefficients),
            "snap_to_grid": self.snap_to_grid,
            "points": [
                {"x": p.x, "y": p.y, "delta": p.delta, "returning": bool(p.returning)}
                for p in self.points
            ],
        }

    def load_from_snapshot(self, snap: Dict[str, Any]) -> None:
        """Restore state from a snapshot and recompute once."""
        self._check_writable()
        order = self._validate_order(snap.get("order", 1))
        fit_mode = FitMode(snap.get("fit_mode", FitMode.BEST.value))
        manual = self._normalize_coefficients(
            snap.get("manual_coefficients", self.constants.default_manual_coefficients)
        )

        points = []
        for item in snap.get("points", []):
            point = WeightedPoint(item["x"], item["y"], item.get("delta"),
                                  bounds=self.constants.graph_bounds,
                                  delta_range=self.constants.delta)
            returning = item.get("returning", False)
            if not isinstance(returning, bool):
                raise ValueError(f"Point returning flag must be a boolean, got {returning!r}")
            point.returning = returning
            points.append(point)

        self._order = order
        self._fit_mode = fit_mode
        self._manual_coefficients = manual
        self.snap_to_grid = bool(snap.get("snap_to_grid", self.snap_to_grid))
        self.points.clear()
        for point in points:
            self.points.add(point)
        self.recompute()
