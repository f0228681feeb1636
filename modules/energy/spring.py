# modules/energy/spring.py
"""Harmonic spring energy.

Each spring contributes

    E = 0.5 * k * (|x_i - x_j| - rest)^2

with gradient ``k * (1 - rest/L) * (x_i - x_j)`` on vertex i and the negative
on vertex j. A zero-length spring keeps its value ``0.5 * k * rest^2`` but
contributes no gradient (the direction is undefined).

``SpringEnergyS3`` measures the geodesic length on the unit 3-sphere instead
and returns the tangential gradient.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from modules.energy.base import Energy

logger = logging.getLogger("mesh_embedding")


@dataclass(frozen=True)
class Spring:
    i: int
    j: int
    k: float
    rest: float


class SpringEnergy(Energy):
    def __init__(self, springs: Iterable[Spring], rng=None) -> None:
        super().__init__(rng)
        self.springs = list(springs)
        n = len(self.springs)
        self._i = np.fromiter((s.i for s in self.springs), dtype=int, count=n)
        self._j = np.fromiter((s.j for s in self.springs), dtype=int, count=n)
        self._k = np.fromiter((s.k for s in self.springs), dtype=float, count=n)
        self._rest = np.fromiter((s.rest for s in self.springs), dtype=float, count=n)
        self._scratch = np.zeros(4, dtype=float)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.springs)} springs)"

    def term_count(self) -> int:
        return len(self.springs)

    def term_vertices(self, k: int) -> Sequence[int]:
        s = self.springs[k]
        return (s.i, s.j)

    def term_value(self, k: int, emb) -> float:
        s = self.springs[k]
        diff = emb.difference(s.i, s.j, self._scratch)[: emb.dim]
        dL = float(np.sqrt(np.dot(diff, diff))) - s.rest
        return 0.5 * s.k * dL * dL

    def term_grad_accumulate(self, k: int, emb, grad: np.ndarray) -> None:
        s = self.springs[k]
        d = emb.dim
        diff = emb.difference(s.j, s.i, self._scratch)[:d]  # x_i - x_j
        L2 = float(np.dot(diff, diff))
        if L2 == 0.0:
            return
        coef = s.k * (1.0 - s.rest / np.sqrt(L2))
        a, b = d * s.i, d * s.j
        grad[a : a + d] += coef * diff
        grad[b : b + d] -= coef * diff

    # Vectorized batch paths --------------------------------------------
    def _select(self, terms: Optional[Sequence[int]]):
        if terms is None:
            return self._i, self._j, self._k, self._rest
        idx = np.asarray(terms, dtype=int)
        return self._i[idx], self._j[idx], self._k[idx], self._rest[idx]

    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        i, j, k, rest = self._select(terms)
        pts = emb.positions_view()
        L = np.linalg.norm(pts[i] - pts[j], axis=1)
        return 0.5 * k * (L - rest) ** 2

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        i, j, k, rest = self._select(terms)
        if i.size == 0:
            return
        pts = emb.positions_view()
        diff = pts[i] - pts[j]
        L = np.linalg.norm(diff, axis=1)
        live = L > 0.0
        coef = np.zeros_like(L)
        coef[live] = k[live] * (1.0 - rest[live] / L[live])
        force = coef[:, None] * diff

        g = grad.reshape(emb.N, emb.dim)
        np.add.at(g, i, force)
        np.add.at(g, j, -force)


class SpringEnergyS3(SpringEnergy):
    """Springs measured by geodesic length on the unit 3-sphere.

    With ``c = <p, q>`` and ``theta = arccos(c)`` the tangential gradient on
    p is ``-k (theta - rest) / sin(theta) * (q - c p)`` (symmetric for q).
    Coincident or antipodal endpoints (``sin(theta) ~ 0``) contribute no
    gradient.
    """

    _SIN_EPS = 1e-12

    def _angles(self, emb, i, j):
        pts = emb.positions_view()
        p = pts[i]
        q = pts[j]
        c = np.clip(np.einsum("ij,ij->i", p, q), -1.0, 1.0)
        return p, q, c, np.arccos(c)

    def term_value(self, k: int, emb) -> float:
        return float(self.term_values(emb, [k])[0])

    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        i, j, k, rest = self._select(terms)
        _, _, _, theta = self._angles(emb, i, j)
        return 0.5 * k * (theta - rest) ** 2

    def term_grad_accumulate(self, k: int, emb, grad: np.ndarray) -> None:
        self.accumulate_terms(emb, grad, [k])

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        i, j, k, rest = self._select(terms)
        if i.size == 0:
            return
        p, q, c, theta = self._angles(emb, i, j)
        s = np.sin(theta)
        live = s > self._SIN_EPS
        coef = np.zeros_like(theta)
        coef[live] = -k[live] * (theta[live] - rest[live]) / s[live]

        g = grad.reshape(emb.N, emb.dim)
        np.add.at(g, i, coef[:, None] * (q - c[:, None] * p))
        np.add.at(g, j, coef[:, None] * (p - c[:, None] * q))


_KIND_STIFFNESS = {
    "stretch": "stretch_stiffness",
    "shear": "shear_stiffness",
    "bend": "bend_spring_stiffness",
    "boundary": "boundary_stiffness",
}


def build_energy(geometry, options, resolver) -> SpringEnergy:
    """Assemble a spring energy from a scene entry.

    ``options["kinds"]`` selects any of ``stretch``, ``shear``, ``bend`` and
    ``boundary`` (default: stretch only). Each kind reads its stiffness from
    ``<kind>_stiffness`` (``bend_spring_stiffness`` for bend springs).
    ``spherical: true`` measures lengths on the unit 3-sphere.
    """
    from modules.energy import builders

    kinds = options.get("kinds", ["stretch"])
    if isinstance(kinds, str):
        kinds = [kinds]

    springs = []
    for kind in kinds:
        key = _KIND_STIFFNESS.get(kind)
        if key is None:
            raise ValueError(f"Unknown spring kind '{kind}'.")
        k = resolver.get_float(options, key, 1.0)
        springs.extend(getattr(builders, f"{kind}_springs")(geometry, k))
        logger.debug("spring: %s springs with k=%g", kind, k)

    cls = SpringEnergyS3 if options.get("spherical") else SpringEnergy
    return cls(springs, rng=resolver.get(options, "seed"))


__all__ = ["Spring", "SpringEnergy", "SpringEnergyS3", "build_energy"]
