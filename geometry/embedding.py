# embedding.py
"""Vertex positions stored in one flat buffer.

``Embedding.pos`` is laid out as ``[x0, y0, z0, x1, y1, z1, ...]`` (``dim``
floats per vertex). This is the object the external integrator mutates every
step, so the per-vertex accessors write into caller-supplied ``out`` arrays
(or an internal scratch vector) instead of allocating.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np

from core.exceptions import EmbeddingShapeError

logger = logging.getLogger("mesh_embedding")


class Embedding:
    dim = 3

    def __init__(
        self,
        n_vertices: int,
        init_positions=None,
        *,
        dim: Optional[int] = None,
    ) -> None:
        if dim is not None:
            self.dim = int(dim)
        self.N = int(n_vertices)
        self.pos = np.zeros(self.dim * self.N, dtype=float)
        self._scratch = np.zeros(self.dim, dtype=float)

        if init_positions is not None:
            self.set_positions(init_positions)

    @classmethod
    def from_topology(cls, topology, init_positions=None, **kwargs) -> "Embedding":
        return cls(len(topology.vertices), init_positions, **kwargs)

    def __len__(self) -> int:
        return self.N

    def __repr__(self) -> str:
        return f"{type(self).__name__}(N={self.N}, dim={self.dim})"

    def copy(self) -> "Embedding":
        out = type(self).__new__(type(self))
        out.__dict__.update(self.__dict__)
        out.pos = self.pos.copy()
        out._scratch = np.zeros(self.dim, dtype=float)
        return out

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------
    def set_positions(self, positions) -> None:
        """Overwrite all positions from an (N, dim) array or flat buffer."""
        arr = np.asarray(positions, dtype=float)
        if arr.ndim == 1:
            if arr.shape[0] != self.pos.shape[0]:
                raise EmbeddingShapeError(
                    f"set_positions: expected {self.pos.shape[0]} values, "
                    f"got {arr.shape[0]}",
                    expected=self.pos.shape,
                    got=arr.shape,
                )
            self.pos[:] = arr
            return

        expected = (self.N, self.dim)
        if arr.shape != expected:
            raise EmbeddingShapeError(
                f"set_positions: expected shape {expected}, got {arr.shape}",
                expected=expected,
                got=arr.shape,
            )
        self.pos[:] = arr.reshape(-1)

    def set_position_at(self, i: int, p) -> None:
        a = self.dim * i
        self.pos[a : a + self.dim] = p

    def add_scaled_vector(self, vec, scale: float = 1.0) -> None:
        """``pos += scale * vec`` over the whole buffer."""
        self.pos += scale * np.asarray(vec, dtype=float)

    def add_scaled_vector_at(self, i: int, vec, scale: float = 1.0) -> None:
        a = self.dim * i
        self.pos[a : a + self.dim] += scale * np.asarray(vec, dtype=float)

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------
    def positions_view(self) -> np.ndarray:
        """(N, dim) view onto the flat buffer."""
        return self.pos.reshape(self.N, self.dim)

    def position(self, i: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        if out is None:
            out = self._scratch
        a = self.dim * i
        out[: self.dim] = self.pos[a : a + self.dim]
        return out

    def difference(
        self, i: int, j: int, out: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """Vector from vertex ``i`` to vertex ``j`` (``x_j - x_i``)."""
        if out is None:
            out = self._scratch
        d = self.dim
        a, b = d * i, d * j
        np.subtract(self.pos[b : b + d], self.pos[a : a + d], out=out[:d])
        return out

    def distance2(self, i: int, j: int) -> float:
        d = self.dim
        a, b = d * i, d * j
        total = 0.0
        for k in range(d):
            delta = self.pos[a + k] - self.pos[b + k]
            total += delta * delta
        return float(total)

    def distance(self, i: int, j: int) -> float:
        return float(np.sqrt(self.distance2(i, j)))

    def coords(self, i: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Display coordinates of vertex ``i``; the position itself in R^3."""
        return self.position(i, out)

    def reproject(self) -> None:
        """Project back onto the constraint manifold (nothing to do in R^3)."""


_SO4_PLANES = (
    ("xy", 0, 1),
    ("xz", 0, 2),
    ("xw", 0, 3),
    ("yz", 1, 2),
    ("yw", 1, 3),
    ("zw", 2, 3),
)


def build_so4_rotation(angles: Optional[Dict[str, float]] = None) -> np.ndarray:
    """Compose plane rotations of R^4 into one 4x4 matrix.

    ``angles`` maps plane names (``xy``, ``xz``, ``xw``, ``yz``, ``yw``,
    ``zw``) to angles in radians; missing planes are not rotated.
    """
    angles = angles or {}
    M = np.eye(4, dtype=float)
    for name, i, j in _SO4_PLANES:
        theta = float(angles.get(name, 0.0) or 0.0)
        if not theta:
            continue
        c, s = np.cos(theta), np.sin(theta)
        col_i = M[:, i].copy()
        col_j = M[:, j].copy()
        M[:, i] = c * col_i - s * col_j
        M[:, j] = s * col_i + c * col_j
    return M


class EmbeddingS3(Embedding):
    """Positions on the unit 3-sphere in R^4.

    Distances are geodesic (``arccos`` of the dot product). After an
    unconstrained gradient update the integrator calls :meth:`reproject` to
    renormalize every point. The SO(4) ``rotation`` only affects
    :meth:`coords`, which stereographically projects to R^3 for display.
    """

    dim = 4

    def __init__(self, n_vertices: int, init_positions=None) -> None:
        super().__init__(n_vertices, init_positions)
        self.rotation = build_so4_rotation()
        self._rotated = np.zeros(4, dtype=float)
        self._coords = np.zeros(3, dtype=float)

    def copy(self) -> "EmbeddingS3":
        out = super().copy()
        out.rotation = self.rotation.copy()
        out._rotated = np.zeros(4, dtype=float)
        out._coords = np.zeros(3, dtype=float)
        return out

    def cos_angle(self, i: int, j: int) -> float:
        a, b = 4 * i, 4 * j
        c = float(np.dot(self.pos[a : a + 4], self.pos[b : b + 4]))
        return min(1.0, max(-1.0, c))

    def distance(self, i: int, j: int) -> float:
        return float(np.arccos(self.cos_angle(i, j)))

    def distance2(self, i: int, j: int) -> float:
        d = self.distance(i, j)
        return d * d

    def set_rotation(self, angles: Dict[str, float]) -> None:
        self.rotation = build_so4_rotation(angles)

    def coords(self, i: int, out: Optional[np.ndarray] = None) -> np.ndarray:
        if out is None:
            out = self._coords
        a = 4 * i
        q = np.dot(self.rotation, self.pos[a : a + 4], out=self._rotated)
        denom = 1.0 - q[3]
        out[0] = q[0] / denom
        out[1] = q[1] / denom
        out[2] = q[2] / denom
        return out

    def reproject(self) -> None:
        pts = self.positions_view()
        norms = np.linalg.norm(pts, axis=1)
        mask = norms > 1e-15
        if not np.all(mask):
            logger.warning(
                "EmbeddingS3.reproject: %d point(s) at the origin left unchanged.",
                int(np.count_nonzero(~mask)),
            )
        pts[mask] /= norms[mask, None]


__all__ = ["Embedding", "EmbeddingS3", "build_so4_rotation"]
