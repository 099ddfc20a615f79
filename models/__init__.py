# models/__init__.py

"""Public API for the models package.

The models package is the numerical core of the curve-fitting tool. It has no
GUI dependencies; the view layer talks to it through ``CurveModel`` (or the
Qt facade in ``viewmodel``).

Exports provided:
  - WeightedPoint, PointSet - data points and the collection used for fitting
  - FitMode - BEST (least squares) or ADJUSTABLE (user coefficients)
  - best_fit, adjustable_fit, evaluate_polynomial - coefficient helpers
  - FitStatistics, compute_statistics, compute_residuals - goodness of fit
  - CurveModel - orchestrates fitting and statistics for a point set
  - FittingConstants, GraphBounds, DeltaRange, load_fitting_constants
  - InternalConsistencyError - raised on logic bugs, never on bad input

Coefficients are always in ascending powers of x (constant term first).
"""

from .constants import (
    EPSILON,
    DETERMINANT_EPSILON,
    DeltaRange,
    FittingConstants,
    GraphBounds,
    load_fitting_constants,
)
from .points import PointSet, WeightedPoint, unique_x_count
from .polynomial_fit import (
    FitMode,
    InternalConsistencyError,
    adjustable_fit,
    best_fit,
    evaluate_polynomial,
)
from .metrics import FitStatistics, compute_residuals, compute_statistics
from .curve_model import CurveModel

__all__ = [
    "EPSILON",
    "DETERMINANT_EPSILON",
    "DeltaRange",
    "FittingConstants",
    "GraphBounds",
    "load_fitting_constants",
    "PointSet",
    "WeightedPoint",
    "unique_x_count",
    "FitMode",
    "InternalConsistencyError",
    "adjustable_fit",
    "best_fit",
    "evaluate_polynomial",
    "FitStatistics",
    "compute_residuals",
    "compute_statistics",
    "CurveModel",
]
