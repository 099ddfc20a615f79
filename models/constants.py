"""
Curve-fitting constants.

This module loads the graph bounds, point uncertainty limits and polynomial
settings from the YAML file shipped next to it (``curve_fitting.yaml``).
Numerical tolerances are fixed here and are not configurable.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional
import math
import yaml


# General tolerance used by the goodness-of-fit statistics
EPSILON = 1e-10

# Below this |det| the normal-equations matrix is treated as singular
DETERMINANT_EPSILON = 1e-30

DEFAULT_CONSTANTS_FILENAME = "curve_fitting.yaml"


@dataclass
class GraphBounds:
    """Axis-aligned graph area in model coordinates (edges inclusive)."""
    min_x: float = -10.0
    min_y: float = -10.0
    max_x: float = 10.0
    max_y: float = 10.0

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y


@dataclass
class DeltaRange:
    """Allowed range for a point's uncertainty."""
    min: float = 0.1
    max: float = 10.0
    default: float = 0.8

    def clamp(self, value: Optional[float]) -> float:
        """Clamp *value* into [min, max]; None or non-finite gives the default."""
        if value is None:
            return self.default
        value = float(value)
        if not math.isfinite(value):
            return self.default
        return min(max(value, self.min), self.max)


def _default_manual_coefficients() -> List[float]:
    return [2.7, 0.0, 0.0, 0.0]


@dataclass
class FittingConstants:
    """
    Complete set of constants used by the curve model.

    The manual coefficients are the adjustable curve's starting shape, in
    ascending powers of x.
    """
    name: str = "Curve Fitting"
    description: str = ""
    graph_bounds: GraphBounds = field(default_factory=GraphBounds)
    delta: DeltaRange = field(default_factory=DeltaRange)
    max_order: int = 3
    default_manual_coefficients: List[float] = field(default_factory=_default_manual_coefficients)
    snap_decimals: int = 1

    def __post_init__(self):
        _validate(self)
        # pad/truncate so there is always one slider per coefficient
        size = self.max_order + 1
        coeffs = [float(c) for c in self.default_manual_coefficients][:size]
        coeffs.extend([0.0] * (size - len(coeffs)))
        self.default_manual_coefficients = coeffs

    @property
    def number_of_coefficients(self) -> int:
        return self.max_order + 1


def _validate(constants: FittingConstants) -> None:
    b = constants.graph_bounds
    if not (b.min_x < b.max_x and b.min_y < b.max_y):
        raise ValueError(f"Invalid graph bounds: {b}")
    d = constants.delta
    if not d.min > 0:
        raise ValueError(f"Minimum delta must be strictly positive, got {d.min}")
    if d.max < d.min:
        raise ValueError(f"Maximum delta {d.max} is below minimum {d.min}")
    if not d.min <= d.default <= d.max:
        raise ValueError(f"Default delta {d.default} outside [{d.min}, {d.max}]")
    if constants.max_order not in (1, 2, 3):
        raise ValueError(f"max_order must be 1, 2 or 3, got {constants.max_order}")
    if constants.snap_decimals < 0:
        raise ValueError(f"snap_decimals must be non-negative, got {constants.snap_decimals}")


def _parse_graph_bounds(data: Dict[str, Any]) -> GraphBounds:
    """Parse graph bounds from YAML data."""
    return GraphBounds(
        min_x=float(data.get("min_x", -10.0)),
        min_y=float(data.get("min_y", -10.0)),
        max_x=float(data.get("max_x", 10.0)),
        max_y=float(data.get("max_y", 10.0)),
    )


def _parse_delta_range(data: Dict[str, Any]) -> DeltaRange:
    """Parse the delta limits from YAML data."""
    return DeltaRange(
        min=float(data.get("min", 0.1)),
        max=float(data.get("max", 10.0)),
        default=float(data.get("default", 0.8)),
    )


def get_default_constants_path() -> Path:
    """Path to the YAML file bundled with the models package."""
    return Path(__file__).resolve().parent / DEFAULT_CONSTANTS_FILENAME


def load_fitting_constants(path: Optional[Path] = None) -> FittingConstants:
    """
    Load fitting constants from a YAML file.

    Args:
        path: YAML file to read. When omitted the bundled file is used, and
            built-in defaults are returned if it is missing.

    Returns:
        FittingConstants with parsed values

    Raises:
        FileNotFoundError: If an explicit *path* doesn't exist
        ValueError: If the file can't be parsed or holds invalid values
    """
    if path is None:
        path = get_default_constants_path()
        if not path.exists():
            return FittingConstants()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Fitting constants not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML constants: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Invalid fitting constants: expected dictionary")

    try:
        return FittingConstants(
            name=data.get("name", "Curve Fitting"),
            description=data.get("description", ""),
            graph_bounds=_parse_graph_bounds(data.get("graph_bounds") or {}),
            delta=_parse_delta_range(data.get("delta") or {}),
            max_order=int(data.get("max_order", 3)),
            default_manual_coefficients=list(
                data.get("default_manual_coefficients") or _default_manual_coefficients()
            ),
            snap_decimals=int(data.get("snap_decimals", 1)),
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid fitting constants in {path}: {e}")
