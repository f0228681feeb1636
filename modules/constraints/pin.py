# modules/constraints/pin.py
"""Hold selected vertices fixed in space.

Without explicit positions the pin snapshots the current positions of its
vertices the first time it is enforced. Every enforce resets the pinned
positions and zeroes their velocities.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from modules.constraints.base import Constraint, as_rows

logger = logging.getLogger("mesh_embedding")


class PinConstraint(Constraint):
    def __init__(self, indices: Iterable[int], positions=None) -> None:
        self.indices = [int(i) for i in indices]
        self._pending = {}
        if positions is None:
            self.positions: Optional[np.ndarray] = None
            self.initialized = False
        else:
            self.positions = np.array(positions, dtype=float).reshape(len(self.indices), -1)
            self.initialized = True

    def __repr__(self) -> str:
        return f"PinConstraint(indices={self.indices}, initialized={self.initialized})"

    @classmethod
    def vertex(cls, index: int, position=None) -> "PinConstraint":
        return cls([index], None if position is None else [position])

    @classmethod
    def vertices(cls, indices: Iterable[int]) -> "PinConstraint":
        return cls(indices)

    @classmethod
    def from_embedding(cls, emb, indices: Iterable[int]) -> "PinConstraint":
        """Pin ``indices`` at their current positions in ``emb``."""
        indices = list(indices)
        return cls(indices, emb.positions_view()[indices].copy())

    def add_vertex(self, index: int, position=None) -> None:
        """Pin another vertex.

        Without a position the new vertex is snapshotted at the next enforce;
        vertices already pinned keep their held positions.
        """
        self.indices.append(int(index))
        if not self.initialized:
            if position is not None:
                self._pending[int(index)] = np.asarray(position, dtype=float)
            return
        if position is None:
            row = np.full((1, self.positions.shape[1]), np.nan)
        else:
            row = np.asarray(position, dtype=float).reshape(1, -1)
        self.positions = np.vstack([self.positions, row])

    def remove_vertex(self, index: int) -> None:
        if index not in self.indices:
            return
        k = self.indices.index(index)
        del self.indices[k]
        self._pending.pop(index, None)
        if self.positions is not None:
            self.positions = np.delete(self.positions, k, axis=0)

    def enforce(self, pos: np.ndarray, vel: np.ndarray, n: int) -> None:
        if not self.indices:
            return
        P = as_rows(pos, n)
        V = as_rows(vel, n)
        idx = np.asarray(self.indices, dtype=int)
        if not self.initialized:
            self.positions = P[idx].copy()
            for row, i in enumerate(self.indices):
                if i in self._pending:
                    self.positions[row] = self._pending[i]
            self._pending.clear()
            self.initialized = True
            logger.debug("PinConstraint: snapshotted %d vertices.", idx.size)
        else:
            fresh = np.isnan(self.positions).any(axis=1)
            if fresh.any():
                self.positions[fresh] = P[idx[fresh]]
        P[idx] = self.positions
        V[idx] = 0.0


def build_constraint(options, resolver) -> PinConstraint:
    """Pin from a scene entry: ``indices`` and optional ``positions``."""
    indices = options.get("indices")
    if indices is None:
        indices = [options["index"]]
    return PinConstraint(indices, options.get("positions"))


__all__ = ["PinConstraint", "build_constraint"]
