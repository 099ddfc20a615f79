# models/polynomial_fit.py
"""Polynomial coefficients for the curve: weighted least squares or manual.

Coefficients are always in ascending powers of x (constant term first).
"""
import logging
from enum import Enum
from typing import Sequence

import numpy as np
from scipy import linalg

from .constants import DETERMINANT_EPSILON
from .points import unique_x_count

logger = logging.getLogger(__name__)


class FitMode(str, Enum):
    """How the curve's coefficients are obtained."""
    BEST = "best"
    ADJUSTABLE = "adjustable"


class InternalConsistencyError(AssertionError):
    """Raised when the fitter or curve model reaches an impossible state.

    This signals a logic bug, not bad input, and is never caught by the model.
    """
    pass


def _build_normal_equations(points, m: int):
    """Accumulate the weighted power sums X (m x m) and Y (m).

    X[j][k] = sum x^(j+k) / delta^2,  Y[j] = sum x^j * y / delta^2
    Sums run over *points* in the given order.
    """
    X = np.zeros((m, m), dtype=float)
    Y = np.zeros(m, dtype=float)
    for p in points:
        weight = p.weight
        for j in range(m):
            for k in range(m):
                X[j, k] += p.x ** (j + k) * weight
            Y[j] += p.x ** j * p.y * weight
    return X, Y


def best_fit(points: Sequence, order: int) -> np.ndarray:
    """Weighted least-squares polynomial of the given order through *points*.

    The system size is capped by the number of distinct x values so there are
    never more unknowns than independent samples. Fewer than two distinct x
    values, or a (near) singular system, yields all-zero coefficients.

    Returns:
        array of ``order + 1`` coefficients, unused high orders set to zero
    """
    coefficients = np.zeros(order + 1, dtype=float)
    unique = unique_x_count(points)
    if unique < 2:
        logger.debug("Degenerate fit (%d distinct x values); returning zero coefficients", unique)
        return coefficients
    m = min(order + 1, unique)

    X, Y = _build_normal_equations(points, m)
    det = linalg.det(X)
    if abs(det) <= DETERMINANT_EPSILON:
        logger.debug("Degenerate fit (det=%g, m=%d); returning zero coefficients", det, m)
        return coefficients

    solution = linalg.solve(X, Y)
    if not np.all(np.isfinite(solution)):
        raise InternalConsistencyError(f"Non-finite coefficients from solver: {solution}")
    coefficients[:m] = solution
    return coefficients


def adjustable_fit(manual_coefficients: Sequence[float], order: int) -> np.ndarray:
    """First ``order + 1`` user-supplied coefficients, unchanged."""
    if len(manual_coefficients) < order + 1:
        raise InternalConsistencyError(
            f"Need {order + 1} manual coefficients, got {len(manual_coefficients)}"
        )
    return np.array(manual_coefficients[:order + 1], dtype=float)


def evaluate_polynomial(coefficients: Sequence[float], x):
    """Sum of coefficients[k] * x**k; *x* may be a scalar or numpy array."""
    if np.ndim(x) == 0:
        x = float(x)
        y = 0.0
    else:
        x = np.asarray(x, dtype=float)
        y = np.zeros_like(x)
    for k, c in enumerate(coefficients):
        y = y + c * x ** k
    return y
