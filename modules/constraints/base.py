# modules/constraints/base.py
"""Common interface for position/velocity constraints.

Constraints run after an integration step and mutate the flat position and
velocity buffers in place. They are not differentiable and never enter the
energy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class Constraint(ABC):
    @abstractmethod
    def enforce(self, pos: np.ndarray, vel: np.ndarray, n: int) -> None:
        """Correct ``pos``/``vel`` (flat, length ``n * dim``) in place."""

    def __call__(self, pos: np.ndarray, vel: np.ndarray, n: int) -> None:
        self.enforce(pos, vel, n)


def as_rows(buf: np.ndarray, n: int) -> np.ndarray:
    """(n, dim) view of a flat buffer; writes go through to ``buf``."""
    return buf.reshape(n, buf.size // n)


def unit_vector(vec, name: str = "normal") -> np.ndarray:
    v = np.asarray(vec, dtype=float).copy()
    norm = np.linalg.norm(v)
    if norm < 1e-15:
        raise ValueError(f"{name} must be non-zero, got {vec!r}.")
    return v / norm


__all__ = ["Constraint", "as_rows", "unit_vector"]
