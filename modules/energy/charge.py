# modules/energy/charge.py
"""Pairwise repulsion between point charges.

Every unordered pair of charges (a, b) is one term

    E_ab = kC * q_a * q_b / r^2

(inverse-square, not Coulomb's 1/r). The pairs are enumerated once at
construction into two parallel index arrays, so the term count is
``M * (M - 1) / 2`` for ``M`` charges; stochastic gradients are the practical
way to evaluate large charge sets.

Pairs closer than ``1e-6`` or farther than ``cutoff`` contribute nothing to
either the value or the gradient.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from modules.energy.base import Energy

logger = logging.getLogger("mesh_embedding")

MIN_SEPARATION = 1e-6


@dataclass(frozen=True)
class Charge:
    i: int
    q: float


class ChargeEnergy(Energy):
    def __init__(
        self,
        charges: Iterable[Charge],
        kc: float = 1.0,
        cutoff: float = 100.0,
        rng=None,
    ) -> None:
        super().__init__(rng)
        self.charges = list(charges)
        self.kc = float(kc)
        self.cutoff = float(cutoff)

        # A = 0,0,...,0,1,1,...  B = 1,2,...,M-1,2,3,...
        M = len(self.charges)
        self.A, self.B = np.triu_indices(M, k=1)

        verts = np.fromiter((c.i for c in self.charges), dtype=int, count=M)
        q = np.fromiter((c.q for c in self.charges), dtype=float, count=M)
        self._va = verts[self.A]
        self._vb = verts[self.B]
        self._qq = q[self.A] * q[self.B]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({len(self.charges)} charges, "
            f"{self.term_count()} pairs)"
        )

    def term_count(self) -> int:
        return int(self.A.shape[0])

    def term_vertices(self, k: int) -> Sequence[int]:
        return (int(self._va[k]), int(self._vb[k]))

    def term_value(self, k: int, emb) -> float:
        return float(self.term_values(emb, [k])[0])

    def term_grad_accumulate(self, k: int, emb, grad: np.ndarray) -> None:
        self.accumulate_terms(emb, grad, [k])

    def _select(self, terms: Optional[Sequence[int]]):
        if terms is None:
            return self._va, self._vb, self._qq
        idx = np.asarray(terms, dtype=int)
        return self._va[idx], self._vb[idx], self._qq[idx]

    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        va, vb, qq = self._select(terms)
        pts = emb.positions_view()
        r = np.linalg.norm(pts[va] - pts[vb], axis=1)
        live = (r >= MIN_SEPARATION) & (r <= self.cutoff)
        out = np.zeros_like(r)
        out[live] = self.kc * qq[live] / (r[live] * r[live])
        return out

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        va, vb, qq = self._select(terms)
        if va.size == 0:
            return
        pts = emb.positions_view()
        diff = pts[va] - pts[vb]  # x_a - x_b
        r2 = np.einsum("ij,ij->i", diff, diff)
        r = np.sqrt(r2)
        live = (r >= MIN_SEPARATION) & (r <= self.cutoff)

        # d/dx_a (kC qq / r^2) = -2 kC qq (x_a - x_b) / r^4
        coef = np.zeros_like(r)
        coef[live] = -2.0 * self.kc * qq[live] / (r2[live] * r2[live])
        force = coef[:, None] * diff

        g = grad.reshape(emb.N, emb.dim)
        np.add.at(g, va, force)
        np.add.at(g, vb, -force)


class ChargeEnergyS3(ChargeEnergy):
    """Charges on the unit 3-sphere with the intrinsic potential.

    ``E_ab = kC q_a q_b cot(theta)`` where ``theta`` is the geodesic distance.
    With ``c = <p, q>``, dE/dc = kC q_a q_b / sin^3(theta), so the tangential
    gradient on p is that coefficient times ``q - c p``. Pairs beyond the
    (geodesic) cutoff, coincident pairs and near-antipodal pairs
    (``sin(theta) < 0.01``) are skipped.
    """

    _SIN_FLOOR = 0.01

    def __init__(self, charges, kc: float = 1.0, cutoff: float = 0.2, rng=None) -> None:
        super().__init__(charges, kc=kc, cutoff=cutoff, rng=rng)

    def _angles(self, emb, va, vb):
        pts = emb.positions_view()
        p = pts[va]
        q = pts[vb]
        c = np.clip(np.einsum("ij,ij->i", p, q), -1.0, 1.0)
        theta = np.arccos(c)
        s = np.sin(theta)
        live = (
            (theta >= MIN_SEPARATION)
            & (theta <= self.cutoff)
            & (np.abs(s) >= self._SIN_FLOOR)
        )
        return p, q, c, theta, s, live

    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        va, vb, qq = self._select(terms)
        _, _, _, theta, _, live = self._angles(emb, va, vb)
        out = np.zeros_like(theta)
        out[live] = self.kc * qq[live] / np.tan(theta[live])
        return out

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        va, vb, qq = self._select(terms)
        if va.size == 0:
            return
        p, q, c, _, s, live = self._angles(emb, va, vb)
        coef = np.zeros_like(s)
        coef[live] = self.kc * qq[live] / (s[live] ** 3)

        g = grad.reshape(emb.N, emb.dim)
        np.add.at(g, va, coef[:, None] * (q - c[:, None] * p))
        np.add.at(g, vb, coef[:, None] * (p - c[:, None] * q))


def build_energy(geometry, options, resolver) -> ChargeEnergy:
    """Assemble a charge energy from a scene entry.

    ``area: true`` places ``charge`` as a density times the local area of a
    ``du`` x ``dv`` cell; otherwise every vertex carries ``charge``.
    """
    from modules.energy import builders

    q = resolver.get_float(options, "charge", 0.0)
    if options.get("area"):
        du = float(options.get("du", 1.0))
        dv = float(options.get("dv", 1.0))
        charges = builders.area_charges(geometry, q, du, dv)
    else:
        charges = builders.vertex_charges(geometry.topology, q)

    kc = resolver.get_float(options, "coulomb_constant", 1.0)
    seed = resolver.get(options, "seed")
    if options.get("spherical"):
        cutoff = resolver.get_float(options, "charge_cutoff_s3", 0.2)
        return ChargeEnergyS3(charges, kc=kc, cutoff=cutoff, rng=seed)
    cutoff = resolver.get_float(options, "charge_cutoff", 100.0)
    return ChargeEnergy(charges, kc=kc, cutoff=cutoff, rng=seed)


__all__ = ["Charge", "ChargeEnergy", "ChargeEnergyS3", "MIN_SEPARATION", "build_energy"]
