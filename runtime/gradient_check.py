# runtime/gradient_check.py
"""Central-difference checks for analytic energy gradients."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger("mesh_embedding")


def numerical_gradient(energy, emb, eps: float = 1e-6, value_fn=None) -> np.ndarray:
    """Central differences of ``energy.value`` over every coordinate of ``emb``.

    ``emb.pos`` is perturbed in place and restored afterwards.
    """
    value = value_fn if value_fn is not None else energy.value
    grad = np.zeros_like(emb.pos)
    for idx in range(emb.pos.size):
        orig = emb.pos[idx]
        emb.pos[idx] = orig + eps
        e_plus = value(emb)
        emb.pos[idx] = orig - eps
        e_minus = value(emb)
        emb.pos[idx] = orig
        grad[idx] = (e_plus - e_minus) / (2.0 * eps)
    return grad


def relative_error(analytic: np.ndarray, numeric: np.ndarray, floor: float = 1e-12) -> float:
    """Max over coordinates of ``|a - n| / max(|a|, |n|, floor)``."""
    scale = np.maximum(np.maximum(np.abs(analytic), np.abs(numeric)), floor)
    return float(np.max(np.abs(analytic - numeric) / scale)) if analytic.size else 0.0


def check_gradient(energy, emb, eps: float = 1e-6, atol: float = 1e-8) -> float:
    """Compare ``energy.gradient`` to central differences.

    Coordinates where both gradients are below ``atol`` are ignored; returns
    the maximum relative error of the rest.
    """
    analytic = energy.gradient(emb, np.zeros_like(emb.pos)).copy()
    numeric = numerical_gradient(energy, emb, eps)
    keep = (np.abs(analytic) > atol) | (np.abs(numeric) > atol)
    err = relative_error(analytic[keep], numeric[keep])
    logger.debug("check_gradient(%r): max relative error %.3e", energy, err)
    return err


def check_terms(
    energy,
    emb,
    terms: Optional[Sequence[int]] = None,
    eps: float = 1e-6,
    atol: float = 1e-8,
) -> float:
    """Per-term check of ``term_grad_accumulate`` against ``term_value``.

    Only the coordinates of each term's own vertices are perturbed. Returns
    the worst relative error over the checked terms.
    """
    if terms is None:
        terms = range(energy.term_count())
    dim = emb.dim
    worst = 0.0
    for k in terms:
        analytic = np.zeros_like(emb.pos)
        energy.term_grad_accumulate(k, emb, analytic)
        a_vals = []
        n_vals = []
        for v in energy.term_vertices(k):
            for d in range(dim):
                idx = v * dim + d
                orig = emb.pos[idx]
                emb.pos[idx] = orig + eps
                e_plus = energy.term_value(k, emb)
                emb.pos[idx] = orig - eps
                e_minus = energy.term_value(k, emb)
                emb.pos[idx] = orig
                a_vals.append(analytic[idx])
                n_vals.append((e_plus - e_minus) / (2.0 * eps))
        a = np.asarray(a_vals)
        n = np.asarray(n_vals)
        keep = (np.abs(a) > atol) | (np.abs(n) > atol)
        err = relative_error(a[keep], n[keep])
        if err > worst:
            worst = err
            logger.debug("check_terms: term %d relative error %.3e", k, err)
    return worst


__all__ = ["numerical_gradient", "relative_error", "check_gradient", "check_terms"]
