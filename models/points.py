# models/points.py
"""Weighted data points and the collection the fitter reads from.

A point counts toward fitting ("is relevant") only while it lies inside the
graph bounds and is not returning to the bucket. The returning flag belongs to
the view/animation layer, which pushes it in through ``returning``.
"""
import logging
from typing import Iterator, List, Optional, Tuple

from .constants import DeltaRange, GraphBounds

logger = logging.getLogger(__name__)


class WeightedPoint:
    """
    A 2-D data point with an uncertainty (delta).

    Points compare by identity so they can be used as references by callers.
    """

    def __init__(self, x: float, y: float, delta: Optional[float] = None,
                 bounds: Optional[GraphBounds] = None,
                 delta_range: Optional[DeltaRange] = None):
        self.bounds = bounds or GraphBounds()
        self.delta_range = delta_range or DeltaRange()
        self.x = float(x)
        self.y = float(y)
        self._delta = self.delta_range.default
        self.delta = delta
        # transient state owned by the view (point animating back to the bucket)
        self.returning = False

    def __repr__(self):
        return (f"WeightedPoint(x={self.x!r}, y={self.y!r}, delta={self._delta!r}, "
                f"returning={self.returning!r})")

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @position.setter
    def position(self, value):
        x, y = value
        self.x = float(x)
        self.y = float(y)

    @property
    def delta(self) -> float:
        return self._delta

    @delta.setter
    def delta(self, value):
        clamped = self.delta_range.clamp(value)
        if value is not None and clamped != value:
            logger.debug("Clamped delta %r to %r", value, clamped)
        self._delta = clamped

    @property
    def weight(self) -> float:
        """Regression weight 1/delta^2."""
        return 1.0 / (self._delta * self._delta)

    @property
    def is_inside_graph(self) -> bool:
        return self.bounds.contains(self.x, self.y)

    @property
    def is_relevant(self) -> bool:
        return self.is_inside_graph and not self.returning


class PointSet:
    """Collection of points; insertion order is kept so sums are reproducible."""

    def __init__(self, points=None):
        self._points: List[WeightedPoint] = []
        for p in points or ():
            self.add(p)

    def __len__(self):
        return len(self._points)

    def __iter__(self) -> Iterator[WeightedPoint]:
        return iter(list(self._points))

    def __contains__(self, point) -> bool:
        return any(p is point for p in self._points)

    def add(self, point: WeightedPoint) -> None:
        """Add *point*; adding a point that is already present does nothing."""
        if point in self:
            return
        self._points.append(point)

    def remove(self, point: WeightedPoint) -> None:
        for i, p in enumerate(self._points):
            if p is point:
                del self._points[i]
                return
        raise ValueError(f"{point!r} is not in the point set")

    def clear(self) -> None:
        self._points.clear()

    def relevant_points(self) -> List[WeightedPoint]:
        """Points used for fitting, in insertion order."""
        return [p for p in self._points if p.is_relevant]

    def unique_x_count(self) -> int:
        """Number of distinct x values among relevant points (exact equality)."""
        return unique_x_count(self.relevant_points())


def unique_x_count(points) -> int:
    """Count distinct x positions in *points*.

    eg. x positions [8, 9, 9, 9, 10] give 3.
    """
    return len({p.x for p in points})
