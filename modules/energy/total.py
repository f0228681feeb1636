# modules/energy/total.py
"""Weighted sum of energy functionals.

``TotalEnergy((springs, 1.0), (charges, 0.05), hinges)`` combines energies
linearly; a bare energy gets weight 1. Gradients go through one shared
scratch buffer that is reused across calls.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np

from modules.energy.base import make_rng

logger = logging.getLogger("mesh_embedding")


class TotalEnergy:
    def __init__(self, *entries) -> None:
        self.terms: List[Tuple[object, float]] = []
        for entry in entries:
            if isinstance(entry, tuple):
                energy, weight = entry
                self.add(energy, weight)
            else:
                self.add(entry)
        self._tmp: np.ndarray | None = None

    def __repr__(self) -> str:
        inner = ", ".join(f"{w:g}*{e!r}" for e, w in self.terms)
        return f"TotalEnergy({inner})"

    def __len__(self) -> int:
        return len(self.terms)

    def add(self, energy, weight: float = 1.0) -> None:
        self.terms.append((energy, float(weight)))

    def term_count(self) -> int:
        return sum(energy.term_count() for energy, _ in self.terms)

    def invalidate_index(self) -> None:
        for energy, _ in self.terms:
            energy.invalidate_index()

    def _scratch(self, grad: np.ndarray) -> np.ndarray:
        if self._tmp is None or self._tmp.shape != grad.shape:
            self._tmp = np.zeros_like(grad, dtype=float)
        return self._tmp

    def value(self, emb) -> float:
        return float(sum(w * energy.value(emb) for energy, w in self.terms))

    def local_value(self, emb, v: int) -> float:
        """Weighted local energies of ``v`` (for single-vertex trial moves)."""
        return float(sum(w * energy.local_value(emb, v) for energy, w in self.terms))

    def gradient(self, emb, grad: np.ndarray) -> np.ndarray:
        grad.fill(0.0)
        tmp = self._scratch(grad)
        for energy, w in self.terms:
            energy.gradient(emb, tmp)
            grad += w * tmp
        return grad

    def stochastic_gradient(
        self, emb, grad: np.ndarray, fraction: float = 0.1, rng=None
    ) -> np.ndarray:
        grad.fill(0.0)
        tmp = self._scratch(grad)
        # An explicit rng is shared by all sub-energies; otherwise each
        # energy draws from its own generator.
        gen = None if rng is None else make_rng(rng)
        for energy, w in self.terms:
            tmp.fill(0.0)
            stochastic = getattr(energy, "stochastic_gradient", None)
            if callable(stochastic):
                stochastic(emb, tmp, fraction, rng=gen)
            else:
                energy.gradient(emb, tmp)
            grad += w * tmp
        return grad


__all__ = ["TotalEnergy"]
