# modules/energy/builders.py
"""Build spring and charge terms from a mesh geometry.

All builders are pure: they read the topology and the reference
(intrinsic) geometry and return fresh term lists. Rest lengths are frozen
here and never recomputed from the deforming embedding.

Spring stiffness is ``k * rest``, i.e. scaled by the rest length, so that
refining a mesh does not make it stiffer.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Union

from modules.energy.charge import Charge
from modules.energy.spring import Spring

logger = logging.getLogger("mesh_embedding")

CellSize = Union[float, Callable[[int], float]]


def _spring(geometry, i: int, j: int, k: float) -> Spring:
    rest = geometry.local_distance(i, j)
    return Spring(i, j, k * rest, rest)


def stretch_springs(geometry, k: float) -> List[Spring]:
    """One spring per mesh edge."""
    topo = geometry.topology
    return [_spring(geometry, e.origin, topo.dest(e), k) for e in topo.unique_edges]


def shear_springs(geometry, k: float) -> List[Spring]:
    """Springs on both diagonals of every quad face.

    Non-quad faces are skipped with a warning.
    """
    springs = []
    skipped = 0
    for face in geometry.topology.faces:
        verts = face.vertices
        if len(verts) != 4:
            skipped += 1
            continue
        springs.append(_spring(geometry, verts[0], verts[2], k))
        springs.append(_spring(geometry, verts[1], verts[3], k))
    if skipped:
        logger.warning("shear_springs: skipped %d non-quad face(s).", skipped)
    return springs


def bend_springs(geometry, k: float) -> List[Spring]:
    """Springs reaching across an edge to the far vertex of the next face.

    For every half-edge whose ``next`` has a twin, connect its origin to the
    vertex two steps along the neighbouring face. A cheap linear alternative
    to :mod:`modules.energy.hinge`.
    """
    topo = geometry.topology
    edges = topo.edges
    springs = []
    for e in edges:
        nxt = edges[e.next]
        if nxt.is_boundary:
            continue
        far = edges[edges[edges[nxt.twin].next].next].origin
        springs.append(_spring(geometry, e.origin, far, k))
    return springs


def boundary_springs(geometry, k: float) -> List[Spring]:
    """Springs along boundary loops.

    Each boundary half-edge is tied from its origin to the end of the
    following boundary half-edge (two steps along the loop), which resists
    the boundary folding over.
    """
    topo = geometry.topology
    springs = []
    for e in topo.boundary_edges:
        following = topo.next_boundary_edge(e)
        springs.append(_spring(geometry, e.origin, topo.dest(following), k))
    return springs


def vertex_charges(topology, q: float) -> List[Charge]:
    """The same charge on every vertex."""
    return [Charge(v.index, q) for v in topology.vertices]


def _as_cell_size(value: CellSize) -> Callable[[int], float]:
    if callable(value):
        return value
    size = float(value)
    return lambda _i: size


def area_charges(geometry, q_density: float, du: CellSize, dv: CellSize) -> List[Charge]:
    """Charge = density x local area element.

    ``du``/``dv`` are the parameter cell sizes: constants for uniform grids,
    or functions of the vertex index otherwise.
    """
    get_du = _as_cell_size(du)
    get_dv = _as_cell_size(dv)
    charges = []
    for v in geometry.topology.vertices:
        i = v.index
        area = geometry.local_area(i, get_du(i), get_dv(i))
        charges.append(Charge(i, q_density * area))
    return charges


__all__ = [
    "stretch_springs",
    "shear_springs",
    "bend_springs",
    "boundary_springs",
    "vertex_charges",
    "area_charges",
]
