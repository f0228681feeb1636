# modules/energy/hinge.py
r"""Discrete bending energy on pairs of adjacent triangles.

A hinge joins triangle 1 = (A, B, C) and triangle 2 = (B, A, D) across the
shared edge A-B::

          C
         /|\
        / | \
       / 1|  \
      A---+---B
       \ 2|  /
        \ | /
         \|/
          D

Both faces wind so that their normals agree on a flat configuration:

    N1 = (B - A) x (C - A),   N2 = (A - B) x (D - B),   n = N / |N|

and the energy is

    E = k * (1 - n1 . n2)

which behaves like ``k * theta^2 / 2`` for small dihedral angles. If either
triangle is degenerate (``|N| < 1e-10``) the hinge contributes neither energy
nor gradient.

Gradient
--------
With ``dn1 = (I - n1 n1^T) dN1 / |N1|``,

    dE = -k (proj_n2 . dN1 / |N1| + proj_n1 . dN2 / |N2|)

where ``proj_n2 = n2 - n1 (n1.n2)`` and ``proj_n1 = n1 - n2 (n1.n2)``. Every
partial of N is a cross-product map; the transpose of ``delta -> w x delta``
is ``x -> x x w`` and the transpose of ``delta -> delta x w`` is
``x -> w x x``:

    dN1/dA: delta -> (C - B) x delta      dN2/dA: delta -> delta x (D - B)
    dN1/dB: delta -> delta x (C - A)      dN2/dB: delta -> (D - A) x delta
    dN1/dC: delta -> (B - A) x delta      dN2/dD: delta -> (A - B) x delta

A and B receive contributions from both triangles, C and D only from their
own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from geometry.triangle_ops import _fast_cross, _row_dot, triangle_normals
from modules.energy.base import Energy

logger = logging.getLogger("mesh_embedding")

DEGENERATE_NORMAL = 1e-10


@dataclass(frozen=True)
class Hinge:
    a: int  # shared edge
    b: int  # shared edge
    c: int  # wing of triangle (a, b, c)
    d: int  # wing of triangle (b, a, d)
    k: float


def hinge_energy_and_gradients(
    A: np.ndarray,
    B: np.ndarray,
    C: np.ndarray,
    D: np.ndarray,
    k: np.ndarray,
    *,
    compute_gradient: bool = True,
):
    """Evaluate a batch of hinges given (M, 3) corner positions.

    Returns ``(energies, (gA, gB, gC, gD))``; the gradient tuple is ``None``
    when ``compute_gradient`` is False. Degenerate hinges get zeros.
    """
    AB = B - A
    AC = C - A
    BA = A - B
    BD = D - B

    N1 = _fast_cross(AB, AC)
    N2 = _fast_cross(BA, BD)
    len1 = np.linalg.norm(N1, axis=1)
    len2 = np.linalg.norm(N2, axis=1)
    live = (len1 >= DEGENERATE_NORMAL) & (len2 >= DEGENERATE_NORMAL)

    energies = np.zeros(A.shape[0], dtype=float)
    if not np.any(live):
        if not compute_gradient:
            return energies, None
        zeros = np.zeros_like(A)
        return energies, (zeros, zeros.copy(), zeros.copy(), zeros.copy())

    n1 = N1[live] / len1[live, None]
    n2 = N2[live] / len2[live, None]
    cos_theta = _row_dot(n1, n2)
    kl = k[live]
    energies[live] = kl * (1.0 - cos_theta)
    if not compute_gradient:
        return energies, None

    proj_n2 = n2 - n1 * cos_theta[:, None]
    proj_n1 = n1 - n2 * cos_theta[:, None]
    scale1 = (-kl / len1[live])[:, None]
    scale2 = (-kl / len2[live])[:, None]

    ABl, ACl, BAl, BDl = AB[live], AC[live], BA[live], BD[live]
    CB = ACl - ABl  # C - B
    DA = BDl + ABl  # D - A

    gA = np.zeros_like(A)
    gB = np.zeros_like(A)
    gC = np.zeros_like(A)
    gD = np.zeros_like(A)
    gA[live] = scale1 * _fast_cross(proj_n2, CB) + scale2 * _fast_cross(BDl, proj_n1)
    gB[live] = scale1 * _fast_cross(ACl, proj_n2) + scale2 * _fast_cross(proj_n1, DA)
    gC[live] = scale1 * _fast_cross(proj_n2, ABl)
    gD[live] = scale2 * _fast_cross(proj_n1, BAl)
    return energies, (gA, gB, gC, gD)


class HingeEnergy(Energy):
    def __init__(self, hinges: Iterable[Hinge], rng=None) -> None:
        super().__init__(rng)
        self.hinges = list(hinges)
        n = len(self.hinges)
        self._corners = np.array(
            [(h.a, h.b, h.c, h.d) for h in self.hinges], dtype=int
        ).reshape(n, 4)
        self._k = np.fromiter((h.k for h in self.hinges), dtype=float, count=n)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.hinges)} hinges)"

    def term_count(self) -> int:
        return len(self.hinges)

    def term_vertices(self, k: int) -> Sequence[int]:
        h = self.hinges[k]
        return (h.a, h.b, h.c, h.d)

    def term_value(self, k: int, emb) -> float:
        return float(self.term_values(emb, [k])[0])

    def term_grad_accumulate(self, k: int, emb, grad: np.ndarray) -> None:
        self.accumulate_terms(emb, grad, [k])

    def _gather(self, emb, terms: Optional[Sequence[int]]):
        if emb.dim != 3:
            raise ValueError(
                f"HingeEnergy needs a 3D embedding, got dim={emb.dim}."
            )
        if terms is None:
            corners, k = self._corners, self._k
        else:
            idx = np.asarray(terms, dtype=int)
            corners, k = self._corners[idx], self._k[idx]
        pts = emb.positions_view()
        A, B, C, D = (pts[corners[:, col]] for col in range(4))
        return corners, k, A, B, C, D

    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        _, k, A, B, C, D = self._gather(emb, terms)
        energies, _ = hinge_energy_and_gradients(A, B, C, D, k, compute_gradient=False)
        return energies

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        corners, k, A, B, C, D = self._gather(emb, terms)
        if k.size == 0:
            return
        _, grads = hinge_energy_and_gradients(A, B, C, D, k)
        g = grad.reshape(emb.N, 3)
        for col, g_corner in enumerate(grads):
            np.add.at(g, corners[:, col], g_corner)

    def dihedral_cosines(self, emb) -> np.ndarray:
        """``n1 . n2`` per hinge (1 for flat, NaN for degenerate hinges)."""
        _, k, A, B, C, D = self._gather(emb, None)
        N1 = triangle_normals(A, B, C)
        N2 = triangle_normals(B, A, D)
        len1 = np.linalg.norm(N1, axis=1)
        len2 = np.linalg.norm(N2, axis=1)
        out = np.full(k.shape, np.nan)
        live = (len1 >= DEGENERATE_NORMAL) & (len2 >= DEGENERATE_NORMAL)
        out[live] = _row_dot(N1[live], N2[live]) / (len1[live] * len2[live])
        return out


def build_energy(geometry, options, resolver) -> HingeEnergy:
    """Assemble a hinge energy from a scene entry.

    Reads ``hinge_stiffness``; ``hinge_discrete: true`` (or ``discrete``)
    switches to the discrete-shells weighting.
    """
    from modules.energy import hinge_builder

    k = resolver.get_float(options, "hinge_stiffness", 1.0)
    discrete = options.get("discrete")
    if discrete is None:
        discrete = resolver.get(options, "hinge_discrete", False)
    if discrete:
        hinges = hinge_builder.bending_hinges_discrete(geometry, k)
    else:
        hinges = hinge_builder.bending_hinges(geometry, k)
    return HingeEnergy(hinges, rng=resolver.get(options, "seed"))


__all__ = [
    "Hinge",
    "HingeEnergy",
    "DEGENERATE_NORMAL",
    "hinge_energy_and_gradients",
    "build_energy",
]
