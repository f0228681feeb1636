# modules/energy/hinge_builder.py
"""Hinges from pairs of triangles sharing an interior edge."""

from __future__ import annotations

import logging
from typing import List

from geometry.triangle_ops import triangle_area_from_lengths
from modules.energy.hinge import Hinge

logger = logging.getLogger("mesh_embedding")


def _hinge_corners(topology, edge):
    """(a, b, c, d) for the half-edge a->b and its twin b->a."""
    edges = topology.edges
    a = edge.origin
    b = topology.dest(edge)
    c = edges[edges[edge.next].next].origin
    twin = edges[edge.twin]
    d = edges[edges[twin.next].next].origin
    return a, b, c, d


def face_area(face, geometry) -> float:
    """Heron area of a triangular face from intrinsic edge lengths."""
    v = face.vertices
    if len(v) != 3:
        logger.warning("face_area: face %d is not a triangle.", face.index)
        return 0.0
    a = geometry.local_distance(v[0], v[1])
    b = geometry.local_distance(v[1], v[2])
    c = geometry.local_distance(v[2], v[0])
    return triangle_area_from_lengths(a, b, c)


def bending_hinges(geometry, k: float) -> List[Hinge]:
    """One hinge of stiffness ``k`` per interior edge (triangle meshes)."""
    topo = geometry.topology
    return [
        Hinge(*_hinge_corners(topo, e), k)
        for e in topo.unique_edges
        if not e.is_boundary
    ]


def bending_hinges_discrete(geometry, k: float) -> List[Hinge]:
    """Hinges weighted as in Grinspun et al., "Discrete Shells" (2003).

    Stiffness ``k * |e|^2 / (A_left + A_right)`` with intrinsic edge length
    and face areas, so the discrete energy converges under refinement.
    Hinges whose two faces have (near) zero total area are dropped.
    """
    topo = geometry.topology
    hinges = []
    for e in topo.unique_edges:
        if e.is_boundary:
            continue
        a, b, c, d = _hinge_corners(topo, e)
        total_area = face_area(topo.faces[e.face], geometry) + face_area(
            topo.faces[topo.edges[e.twin].face], geometry
        )
        if total_area < 1e-10:
            continue
        length = geometry.local_distance(a, b)
        hinges.append(Hinge(a, b, c, d, k * length * length / total_area))
    return hinges


__all__ = ["face_area", "bending_hinges", "bending_hinges_discrete"]
