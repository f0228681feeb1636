# modules/energy/base.py
"""Term-decomposed energy functionals.

An energy is a sum ``E = sum_k E_k`` of terms that each touch a small, fixed
set of vertices. Subclasses implement the four-method term contract:

- ``term_count()``
- ``term_value(k, emb)``
- ``term_grad_accumulate(k, emb, grad)`` -- *adds* dE_k/dx into ``grad``
- ``term_vertices(k)``

and inherit full, local and stochastic evaluation. ``grad`` is a flat buffer
laid out like ``Embedding.pos``. Accumulation never zeroes or resizes it;
:meth:`Energy.gradient` and :meth:`Energy.stochastic_gradient` zero it on
entry.

Concrete energies may override the batch hooks :meth:`term_values` and
:meth:`accumulate_terms` with vectorized versions; every derived evaluation
goes through them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

import numpy as np

logger = logging.getLogger("mesh_embedding")


def make_rng(rng=None) -> np.random.Generator:
    """Return ``rng`` if it already is a Generator, else seed a new one."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def sample_size(term_count: int, fraction: float) -> int:
    """Number of terms a stochastic gradient draws.

    ``fraction < 1`` is a share of the terms (at least one); ``fraction >= 1``
    is read as an absolute count, capped at ``term_count``.
    """
    if term_count <= 0:
        return 0
    if fraction < 1.0:
        return max(1, int(np.floor(fraction * term_count)))
    return min(term_count, int(np.floor(fraction)))


class Energy(ABC):
    def __init__(self, rng=None) -> None:
        self._terms_for_vertex: Optional[Dict[int, List[int]]] = None
        self.rng = make_rng(rng)

    # ------------------------------------------------------------------
    # Term contract
    # ------------------------------------------------------------------
    @abstractmethod
    def term_count(self) -> int: ...

    @abstractmethod
    def term_value(self, k: int, emb) -> float: ...

    @abstractmethod
    def term_grad_accumulate(self, k: int, emb, grad: np.ndarray) -> None: ...

    @abstractmethod
    def term_vertices(self, k: int) -> Sequence[int]: ...

    # ------------------------------------------------------------------
    # Batch hooks
    # ------------------------------------------------------------------
    def term_values(self, emb, terms: Optional[Sequence[int]] = None) -> np.ndarray:
        """Values of the selected terms (all terms when ``terms`` is None)."""
        if terms is None:
            terms = range(self.term_count())
        return np.array([self.term_value(k, emb) for k in terms], dtype=float)

    def accumulate_terms(
        self, emb, grad: np.ndarray, terms: Optional[Sequence[int]] = None
    ) -> None:
        """Add the gradients of the selected terms into ``grad``."""
        if terms is None:
            terms = range(self.term_count())
        for k in terms:
            self.term_grad_accumulate(int(k), emb, grad)

    # ------------------------------------------------------------------
    # Vertex -> term index
    # ------------------------------------------------------------------
    def build_index(self) -> Dict[int, List[int]]:
        """Build (once) the map from each vertex to the terms touching it.

        The index is only valid while the term list is unchanged; call
        :meth:`invalidate_index` after editing terms.
        """
        if self._terms_for_vertex is None:
            index: Dict[int, List[int]] = {}
            for k in range(self.term_count()):
                for v in self.term_vertices(k):
                    index.setdefault(int(v), []).append(k)
            self._terms_for_vertex = index
            logger.debug(
                "%s: built vertex->term index for %d vertices.",
                type(self).__name__,
                len(index),
            )
        return self._terms_for_vertex

    def invalidate_index(self) -> None:
        self._terms_for_vertex = None

    def terms_for_vertex(self, v: int) -> List[int]:
        return self.build_index().get(int(v), [])

    # ------------------------------------------------------------------
    # Derived evaluation
    # ------------------------------------------------------------------
    def value(self, emb) -> float:
        if self.term_count() == 0:
            return 0.0
        return float(np.sum(self.term_values(emb)))

    def local_value(self, emb, v: int) -> float:
        """Sum of the terms involving vertex ``v``.

        Cost is proportional to the local degree, which makes single-vertex
        trial moves (e.g. annealing) cheap.
        """
        terms = self.terms_for_vertex(v)
        if not terms:
            return 0.0
        return float(np.sum(self.term_values(emb, terms)))

    def gradient(self, emb, grad: np.ndarray) -> np.ndarray:
        grad.fill(0.0)
        if self.term_count():
            self.accumulate_terms(emb, grad)
        return grad

    def stochastic_gradient(
        self, emb, grad: np.ndarray, fraction: float = 0.1, rng=None
    ) -> np.ndarray:
        """Unbiased gradient estimate from a uniform sample of terms.

        Draws ``sample_size(S, fraction)`` distinct terms, accumulates their
        gradients and scales by ``S / sample_count`` so the expectation equals
        the full gradient.
        """
        grad.fill(0.0)
        S = self.term_count()
        n = sample_size(S, fraction)
        if n == 0:
            return grad

        gen = self.rng if rng is None else make_rng(rng)
        picked = gen.choice(S, size=n, replace=False)
        self.accumulate_terms(emb, grad, picked)
        grad *= S / n
        return grad


__all__ = ["Energy", "make_rng", "sample_size"]
