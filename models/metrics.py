import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .constants import EPSILON
from .polynomial_fit import evaluate_polynomial


@dataclass(frozen=True)
class FitStatistics:
    """Reduced chi-squared and r-squared of a curve against its points."""
    chi_squared: float = 0.0
    r_squared: float = 0.0

    @property
    def r_squared_defined(self) -> bool:
        return not math.isnan(self.r_squared)


def compute_statistics(points: Sequence, coefficients: Sequence[float], order: int) -> FitStatistics:
    """Compute reduced chi-squared and r-squared for *points*.

    Both are 0 for fewer than two points. r-squared is NaN when the weighted
    variance of y vanishes, 1 for a perfect fit, and clamped to 0 when the
    curve is worse than the weighted mean.
    """
    n = len(points)
    if n < 2:
        return FitStatistics(0.0, 0.0)

    weight_sum = 0.0
    wy_sum = 0.0
    wyy_sum = 0.0
    wyfit_sum = 0.0
    wfitfit_sum = 0.0
    for p in points:
        weight = p.weight
        y_fit = evaluate_polynomial(coefficients, p.x)
        weight_sum += weight
        wy_sum += weight * p.y
        wyy_sum += weight * p.y * p.y
        wyfit_sum += weight * p.y * y_fit
        wfitfit_sum += weight * y_fit * y_fit

    # rebuilt from the average weight to keep the reference rounding
    weight_avg = weight_sum / n
    denom = weight_avg * n
    y_avg = wy_sum / denom
    yy_avg = wyy_sum / denom

    residual_sum_sq = wyy_sum - 2.0 * wyfit_sum + wfitfit_sum
    avg_residual_sq = residual_sum_sq / denom
    avg_sq = yy_avg - y_avg * y_avg

    dof = max(n - order - 1, 1)
    chi_squared = abs(residual_sum_sq) / dof

    if abs(avg_sq) < EPSILON:
        r_squared = float('nan')
    elif abs(avg_residual_sq) < EPSILON:
        r_squared = 1.0
    elif avg_residual_sq / avg_sq > 1:
        r_squared = 0.0
    else:
        r_squared = 1.0 - avg_residual_sq / avg_sq

    return FitStatistics(float(chi_squared), float(r_squared))


def compute_residuals(points: Sequence, coefficients: Sequence[float]) -> List[Tuple[float, float, float]]:
    """Return (x, y, y_curve) per point, for drawing residual segments."""
    return [(p.x, p.y, float(evaluate_polynomial(coefficients, p.x))) for p in points]
