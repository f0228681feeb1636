# intrinsic.py
"""Intrinsic (reference) geometry of a mesh.

Combines the topology, one set of reference coordinates per vertex, and a
metric. Term builders read rest lengths and area elements from here once;
after that the embedding deforms freely and the reference is never touched.

``local_distance`` is only meaningful for topologically nearby vertices
(edges, quad diagonals, bend pairs): tensor metrics approximate the line
element at the midpoint, so this is not a general distance oracle.
"""

from __future__ import annotations

import numpy as np

from geometry.metrics import EuclideanMetric, Metric


class Geometry:
    def __init__(self, topology, coords, metric: Metric | None = None) -> None:
        self.topology = topology
        self.coords = coords
        self.metric = metric if metric is not None else EuclideanMetric()

    def local_distance(self, i: int, j: int) -> float:
        return self.metric.distance(self.coords[i], self.coords[j])

    def local_area(self, i: int, du: float, dv: float) -> float:
        return self.metric.local_area(self.coords[i], du, dv)

    @classmethod
    def euclidean(cls, topology, embedding) -> "Geometry":
        """Freeze the embedding's current positions as the reference."""
        coords = np.array(embedding.positions_view(), dtype=float, copy=True)
        return cls(topology, coords, EuclideanMetric())

    @classmethod
    def from_coords(cls, topology, coords, metric: Metric | None = None) -> "Geometry":
        return cls(topology, coords, metric)


__all__ = ["Geometry"]
