# modules/constraints/plane.py
"""Half-space collision: keep vertices on the positive side of a plane.

The plane is ``n . p = offset`` with unit normal ``n``. A vertex with
``d = n . p - offset < 0`` is pushed back onto the plane, and if it was moving
into the plane its normal velocity is reflected and damped by
``restitution``.
"""

from __future__ import annotations


import numpy as np

from modules.constraints.base import Constraint, as_rows, unit_vector


# side -> (normal, sign of the offset)
_WALLS = {
    "left": ((1.0, 0.0, 0.0), 1.0),
    "right": ((-1.0, 0.0, 0.0), -1.0),
    "front": ((0.0, 0.0, 1.0), 1.0),
    "back": ((0.0, 0.0, -1.0), -1.0),
}


class PlaneConstraint(Constraint):
    def __init__(self, normal=(0.0, 1.0, 0.0), offset: float = 0.0, restitution: float = 0.8):
        self.normal = unit_vector(normal)
        self.offset = float(offset)
        self.restitution = float(restitution)

    def __repr__(self) -> str:
        return (
            f"PlaneConstraint(normal={self.normal.tolist()}, offset={self.offset:g}, "
            f"restitution={self.restitution:g})"
        )

    @classmethod
    def floor(cls, y_min: float, restitution: float = 0.8) -> "PlaneConstraint":
        return cls((0.0, 1.0, 0.0), y_min, restitution)

    @classmethod
    def ceiling(cls, y_max: float, restitution: float = 0.8) -> "PlaneConstraint":
        return cls((0.0, -1.0, 0.0), -y_max, restitution)

    @classmethod
    def wall(cls, side: str, position: float, restitution: float = 0.8) -> "PlaneConstraint":
        """Axis-aligned wall; ``side`` is one of left/right/front/back."""
        try:
            normal, sign = _WALLS[side]
        except KeyError:
            raise ValueError(
                f"Unknown wall side '{side}'; expected one of {sorted(_WALLS)}."
            ) from None
        return cls(normal, sign * position, restitution)

    def enforce(self, pos: np.ndarray, vel: np.ndarray, n: int) -> None:
        P = as_rows(pos, n)
        V = as_rows(vel, n)
        normal = self.normal
        if P.shape[1] != normal.shape[0]:
            raise ValueError(
                f"Plane normal has dim {normal.shape[0]}, positions have dim {P.shape[1]}."
            )

        d = P @ normal - self.offset
        inside = d < 0.0
        if not np.any(inside):
            return
        P[inside] -= d[inside, None] * normal

        vn = V[inside] @ normal
        incoming = vn < 0.0
        if np.any(incoming):
            rows = np.flatnonzero(inside)[incoming]
            V[rows] += (-(1.0 + self.restitution) * vn[incoming])[:, None] * normal


def build_constraint(options, resolver) -> PlaneConstraint:
    """Plane from a scene entry.

    Accepts ``floor: y``, ``ceiling: y``, ``wall: {side, position}`` or an
    explicit ``normal``/``offset``.
    """
    restitution = resolver.get_float(options, "restitution", 0.8)
    if "floor" in options:
        return PlaneConstraint.floor(float(options["floor"]), restitution)
    if "ceiling" in options:
        return PlaneConstraint.ceiling(float(options["ceiling"]), restitution)
    if "wall" in options:
        wall = options["wall"]
        return PlaneConstraint.wall(wall["side"], float(wall["position"]), restitution)
    return PlaneConstraint(
        options.get("normal", (0.0, 1.0, 0.0)),
        float(options.get("offset", 0.0)),
        restitution,
    )


__all__ = ["PlaneConstraint", "build_constraint"]
