# modules/constraints/sphere.py
"""Keep vertices inside (or outside) a sphere.

Violating vertices are projected onto the surface. If their radial velocity
points further into the forbidden region it is reflected and damped by
``restitution``. Vertices sitting on the center have no radial direction
and are left alone.
"""

from __future__ import annotations

import numpy as np

from modules.constraints.base import Constraint, as_rows

_CENTER_EPS = 1e-10


class SphereConstraint(Constraint):
    def __init__(self, center, radius: float, interior: bool = True, restitution: float = 0.8):
        self.center = np.asarray(center, dtype=float).copy()
        self.radius = float(radius)
        self.interior = bool(interior)
        self.restitution = float(restitution)
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {radius!r}.")

    def __repr__(self) -> str:
        side = "inside" if self.interior else "outside"
        return f"SphereConstraint({side}, center={self.center.tolist()}, radius={self.radius:g})"

    @classmethod
    def inside(cls, center, radius: float, restitution: float = 0.8) -> "SphereConstraint":
        return cls(center, radius, True, restitution)

    @classmethod
    def outside(cls, center, radius: float, restitution: float = 0.8) -> "SphereConstraint":
        return cls(center, radius, False, restitution)

    def enforce(self, pos: np.ndarray, vel: np.ndarray, n: int) -> None:
        P = as_rows(pos, n)
        V = as_rows(vel, n)
        offset = P - self.center
        dist = np.linalg.norm(offset, axis=1)
        if self.interior:
            bad = dist > self.radius
        else:
            bad = dist < self.radius
        bad &= dist >= _CENTER_EPS
        if not np.any(bad):
            return

        rows = np.flatnonzero(bad)
        normal = offset[rows] / dist[rows, None]
        P[rows] = self.center + self.radius * normal

        vn = np.einsum("ij,ij->i", V[rows], normal)
        wrong_way = vn > 0.0 if self.interior else vn < 0.0
        if np.any(wrong_way):
            r = rows[wrong_way]
            V[r] -= ((1.0 + self.restitution) * vn[wrong_way])[:, None] * normal[wrong_way]


def build_constraint(options, resolver) -> SphereConstraint:
    """Sphere from a scene entry: ``center``, ``radius``, ``interior``."""
    return SphereConstraint(
        options.get("center", (0.0, 0.0, 0.0)),
        float(options["radius"]),
        interior=bool(options.get("interior", True)),
        restitution=resolver.get_float(options, "restitution", 0.8),
    )


__all__ = ["SphereConstraint", "build_constraint"]
