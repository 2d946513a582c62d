"""Piecewise two-point cubic model ``y = a*x**3 + b``.

This is the curve-fit convention of the catalog spreadsheets: every pair of
neighbouring samples gets its own cubic through both points. It is shared by
the matching pipeline and by the chart code, so both always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidInput
from .formulas import is_number


@dataclass(frozen=True)
class Segment:
    x_min: float
    x_max: float
    # None when an endpoint y is missing or the two x values coincide
    a: Optional[float]
    b: Optional[float]

    def contains(self, xi: float) -> bool:
        return self.x_min <= xi <= self.x_max

    def at(self, xi: float) -> Optional[float]:
        if self.a is None or self.b is None:
            return None
        return self.a * xi**3 + self.b


def sort_by_x(
    x: Sequence[float], *ys: Sequence[Optional[float]]
) -> Tuple[List[float], List[List[Optional[float]]]]:
    """Sort x ascending (stable) and reorder every y array the same way."""
    for y in ys:
        if len(y) != len(x):
            raise InvalidInput(f"x and y lengths differ: {len(x)} != {len(y)}")
    if not all(is_number(v) for v in x):
        raise InvalidInput("x values must all be numeric")
    order = sorted(range(len(x)), key=lambda i: x[i])
    return [float(x[i]) for i in order], [[y[i] for i in order] for y in ys]


def _segment(x0: float, y0: Optional[float], x1: float, y1: Optional[float]) -> Segment:
    x0_cubed = x0**3
    x1_cubed = x1**3
    lo, hi = min(x0, x1), max(x0, x1)
    if not is_number(y0) or not is_number(y1) or x1_cubed == x0_cubed:
        return Segment(lo, hi, None, None)
    a = (y1 - y0) / (x1_cubed - x0_cubed)  # type: ignore[operator]
    b = y0 - a * x0_cubed  # type: ignore[operator]
    return Segment(lo, hi, a, b)


class CurveInterpolator:
    """Evaluate a sampled curve anywhere.

    Points are sorted by x first. Inside the sampled range the first segment
    whose closed bound contains xi wins (shared boundary points resolve to the
    lower-indexed segment). Below the range the first segment's formula is
    used, above it the last one's.
    """

    def __init__(self, x: Sequence[float], y: Sequence[Optional[float]]) -> None:
        if len(x) < 2:
            raise InvalidInput("at least 2 points are required")
        xs, (ys,) = sort_by_x(x, y)
        self.x: List[float] = xs
        self.y: List[Optional[float]] = ys
        self.segments: List[Segment] = [
            _segment(xs[i], ys[i], xs[i + 1], ys[i + 1]) for i in range(len(xs) - 1)
        ]

    @property
    def x_min(self) -> float:
        return self.x[0]

    @property
    def x_max(self) -> float:
        return self.x[-1]

    def in_range(self, xi: float) -> bool:
        return self.x_min <= xi <= self.x_max

    def segment_for(self, xi: float) -> Segment:
        for seg in self.segments:
            if seg.contains(xi):
                return seg
        return self.segments[0] if xi < self.segments[0].x_min else self.segments[-1]

    def at(self, xi: float) -> Optional[float]:
        return self.segment_for(xi).at(xi)

    __call__ = at


def sample_curve(
    x: Sequence[float], y: Sequence[Optional[float]], n: int = 100
) -> List[Tuple[float, Optional[float]]]:
    """n evenly spaced chart points over [min x, max x], rounded to 2 decimals."""
    if n < 2:
        raise ValueError("n must be >= 2")
    interp = CurveInterpolator(x, y)
    step = (interp.x_max - interp.x_min) / (n - 1)
    out: List[Tuple[float, Optional[float]]] = []
    for i in range(n):
        xi = interp.x_min + i * step
        yi = interp.at(xi)
        out.append((round(xi, 2), round(yi, 2) if yi is not None else None))
    return out


def system_curve(
    static_pressure: float, air_flow: float, xs: Sequence[float]
) -> List[Tuple[float, float]]:
    """System resistance through the duty point: p = (p_s / Q^2) * x^2."""
    if air_flow <= 0:
        raise ValueError("air_flow must be > 0")
    k = static_pressure / air_flow**2
    return [(float(x), k * x**2) for x in xs]
