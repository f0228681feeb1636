"""Triangle helpers shared by the hinge energy and its builders."""

from __future__ import annotations

import math

import numpy as np


def _fast_cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compute cross products for arrays of 3D vectors along the last axis."""
    x = a[..., 1] * b[..., 2] - a[..., 2] * b[..., 1]
    y = a[..., 2] * b[..., 0] - a[..., 0] * b[..., 2]
    z = a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]
    out = np.empty(x.shape + (3,), dtype=x.dtype)
    out[..., 0] = x
    out[..., 1] = y
    out[..., 2] = z
    return out


def _row_dot(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Row-wise dot product of two (..., 3) arrays."""
    return np.einsum("...i,...i->...", a, b)


def triangle_normals(
    p0: np.ndarray, p1: np.ndarray, p2: np.ndarray
) -> np.ndarray:
    """Unnormalized normals ``(p1 - p0) x (p2 - p0)``."""
    return _fast_cross(p1 - p0, p2 - p0)


def triangle_area_from_lengths(a: float, b: float, c: float) -> float:
    """Heron's formula; degenerate (or impossible) triangles give 0."""
    s = 0.5 * (a + b + c)
    squared = s * (s - a) * (s - b) * (s - c)
    return math.sqrt(squared) if squared > 0.0 else 0.0


__all__ = [
    "_fast_cross",
    "_row_dot",
    "triangle_normals",
    "triangle_area_from_lengths",
]
