"""Distance functions on reference coordinate spaces.

A metric tells :class:`geometry.intrinsic.Geometry` how far apart two
*neighbouring* reference coordinates are, and how large the area element at a
coordinate is. Rest lengths and charge areas are read from here once, when the
energy terms are built.

The tensor metrics use a midpoint approximation, so they are only meaningful
for nearby points (mesh edges, quad diagonals, bend pairs).
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Callable, Dict

import numpy as np


def _wrap(delta: float, period: float) -> float:
    """Wrap ``delta`` into ``[-period/2, period/2]``."""
    half = 0.5 * period
    while delta > half:
        delta -= period
    while delta < -half:
        delta += period
    return delta


def _one(_y: float) -> float:
    return 1.0


class Metric(ABC):
    @abstractmethod
    def distance(self, a, b) -> float:
        """Distance between two coordinate points."""

    @abstractmethod
    def local_area(self, coord, du: float, dv: float) -> float:
        """Area element at ``coord`` for a ``du`` x ``dv`` parameter cell."""


class EuclideanMetric(Metric):
    """Flat metric in any dimension."""

    def distance(self, a, b) -> float:
        diff = np.asarray(b, dtype=float) - np.asarray(a, dtype=float)
        return float(np.sqrt(np.dot(diff, diff)))

    def local_area(self, coord, du: float, dv: float) -> float:
        return float(du) * float(dv)


class PeriodicMetric(Metric):
    """Euclidean metric where some axes wrap around.

    ``periods`` maps an axis index to its period, e.g. ``{0: 2*pi}`` for a
    cylinder parameterized by angle on axis 0.
    """

    def __init__(self, periods: Dict[int, float] | None = None) -> None:
        self.periods = dict(periods or {})

    def distance(self, a, b) -> float:
        total = 0.0
        for axis, (x, y) in enumerate(zip(a, b)):
            d = float(y) - float(x)
            period = self.periods.get(axis)
            if period is not None:
                d = _wrap(d, float(period))
            total += d * d
        return math.sqrt(total)

    def local_area(self, coord, du: float, dv: float) -> float:
        return float(du) * float(dv)


class FunctionMetric(Metric):
    """Metric delegating to a user-provided ``distance_fn(a, b)``."""

    def __init__(self, distance_fn: Callable[[object, object], float]) -> None:
        self.distance_fn = distance_fn

    def distance(self, a, b) -> float:
        return float(self.distance_fn(a, b))

    def local_area(self, coord, du: float, dv: float) -> float:
        # Only the flat area element is known for an arbitrary distance.
        return float(du) * float(dv)


class CylinderMetricTensor(Metric):
    """ds^2 = scale_y(y)^2 dy^2 + scale_theta(y)^2 dtheta^2 on ``[theta, y]``.

    ``theta`` is periodic with ``period``; both scale factors are evaluated
    at the midpoint height of the two points.
    """

    def __init__(
        self,
        period: float,
        scale_theta: Callable[[float], float],
        scale_y: Callable[[float], float] = _one,
    ) -> None:
        self.period = float(period)
        self.scale_theta = scale_theta
        self.scale_y = scale_y

    def distance(self, a, b) -> float:
        d_theta = _wrap(float(b[0]) - float(a[0]), self.period)
        d_y = float(b[1]) - float(a[1])
        y_mid = 0.5 * (float(a[1]) + float(b[1]))
        return math.hypot(self.scale_theta(y_mid) * d_theta, self.scale_y(y_mid) * d_y)

    def local_area(self, coord, du: float, dv: float) -> float:
        y = float(coord[1])
        return self.scale_theta(y) * float(du) * self.scale_y(y) * float(dv)


class SurfaceMetricTensor(Metric):
    """Metric on R^3 reference coordinates scaled by height.

    Horizontal (xz-plane) separations are scaled by ``scale_horiz(y)`` and
    vertical ones by ``scale_vert(y)``, both at the midpoint height. Used for
    reference surfaces that are already cylinders in R^3.
    """

    def __init__(
        self,
        scale_horiz: Callable[[float], float],
        scale_vert: Callable[[float], float] = _one,
    ) -> None:
        self.scale_horiz = scale_horiz
        self.scale_vert = scale_vert

    def distance(self, a, b) -> float:
        dx = float(b[0]) - float(a[0])
        dy = float(b[1]) - float(a[1])
        dz = float(b[2]) - float(a[2])
        d_horiz = math.hypot(dx, dz)
        y_mid = 0.5 * (float(a[1]) + float(b[1]))
        return math.hypot(self.scale_horiz(y_mid) * d_horiz, self.scale_vert(y_mid) * dy)

    def local_area(self, coord, du: float, dv: float) -> float:
        y = float(coord[1])
        return self.scale_horiz(y) * float(du) * self.scale_vert(y) * float(dv)


def hyperbolic_cylinder_metric(lam: float, height: float) -> SurfaceMetricTensor:
    """Horizontal distances grow like ``cosh(lam * y / height)``."""
    return SurfaceMetricTensor(lambda y: math.cosh(lam * y / height))


def schwarzschild_metric(radius: float) -> SurfaceMetricTensor:
    """Schwarzschild metric on a cylinder, radial coordinate stored in y.

    ds^2 = alpha(u)^2 du^2 + beta(u)^2 dtheta^2 with
    alpha(u) = 1 / (1 - R/u) and beta(u) = u / sqrt(1 - R/u).
    """

    def alpha(u: float) -> float:
        return 1.0 / (1.0 - radius / u)

    def beta(u: float) -> float:
        return u / math.sqrt(1.0 - radius / u)

    return SurfaceMetricTensor(beta, alpha)


def hyperbolic_strip_metric(lam: float = 1.0, half_width: float = 1.0) -> SurfaceMetricTensor:
    """Fermi coordinates around a geodesic: ds^2 = cosh^2(y) dx^2 + dy^2."""
    return SurfaceMetricTensor(lambda y: math.cosh(lam * y / half_width))


__all__ = [
    "Metric",
    "EuclideanMetric",
    "PeriodicMetric",
    "FunctionMetric",
    "CylinderMetricTensor",
    "SurfaceMetricTensor",
    "hyperbolic_cylinder_metric",
    "schwarzschild_metric",
    "hyperbolic_strip_metric",
]
