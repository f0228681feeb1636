# topology.py
"""Half-edge mesh connectivity.

Cells live in flat arenas (``vertices``, ``edges``, ``faces``) and refer to
each other by integer index. A missing link is stored as ``-1``: a half-edge
whose ``twin`` is ``-1`` lies on the boundary, a vertex whose ``edge`` is
``-1`` is isolated.

The structure is built once by :meth:`Topology.from_soup` and is treated as
immutable afterwards; energies and builders cache data derived from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

logger = logging.getLogger("mesh_embedding")

NO_INDEX = -1


@dataclass
class Vertex:
    index: int
    edge: int = NO_INDEX  # one outgoing half-edge


@dataclass
class HalfEdge:
    index: int
    origin: int
    twin: int = NO_INDEX
    next: int = NO_INDEX  # next half-edge around the same face (CCW)
    face: int = NO_INDEX

    @property
    def is_boundary(self) -> bool:
        return self.twin == NO_INDEX


@dataclass
class Face:
    index: int
    vertices: List[int] = field(default_factory=list)  # CCW
    marked_edge: int = NO_INDEX

    def __len__(self) -> int:
        return len(self.vertices)


class Topology:
    def __init__(
        self,
        vertices: List[Vertex],
        edges: List[HalfEdge],
        faces: List[Face],
    ) -> None:
        self.vertices = vertices
        self.edges = edges
        self.faces = faces

        # One half-edge per undirected edge: boundary half-edges once, interior
        # pairs through the twin whose origin has the lower index.
        self.unique_edges: List[HalfEdge] = []
        for e in self.edges:
            if e.twin == NO_INDEX:
                self.unique_edges.append(e)
            elif e.origin < self.edges[e.twin].origin:
                self.unique_edges.append(e)

        self.boundary_edges: List[HalfEdge] = [
            e for e in self.edges if e.twin == NO_INDEX
        ]

    def __repr__(self) -> str:
        return (
            f"Topology(V={len(self.vertices)}, E={len(self.unique_edges)}, "
            f"F={len(self.faces)}, boundary={len(self.boundary_edges)})"
        )

    @classmethod
    def from_soup(
        cls, vertex_count: int, faces: Iterable[Sequence[int]]
    ) -> "Topology":
        """Build the half-edge structure from a vertex count and face loops.

        Each face is a sequence of vertex indices in CCW order. Twins are
        matched by directed-edge key: a pending half-edge ``a -> b`` is paired
        as soon as ``b -> a`` shows up, and whatever is still pending at the
        end is a boundary half-edge.

        Non-manifold input is not detected. If a directed edge ``a -> b`` is
        registered while another ``a -> b`` is still pending, the later one
        replaces it and the earlier half-edge stays on the boundary.
        """
        vertices = [Vertex(i) for i in range(int(vertex_count))]
        face_cells: List[Face] = []
        edges: List[HalfEdge] = []

        for f_idx, loop in enumerate(faces):
            loop = [int(v) for v in loop]
            face = Face(f_idx, loop)
            first = len(edges)
            face.marked_edge = first
            n = len(loop)
            for local, v in enumerate(loop):
                edges.append(
                    HalfEdge(
                        index=first + local,
                        origin=v,
                        next=first + (local + 1) % n,
                        face=f_idx,
                    )
                )
                if vertices[v].edge == NO_INDEX:
                    vertices[v].edge = first + local
            face_cells.append(face)

        pending: dict[tuple[int, int], int] = {}
        for e in edges:
            a = e.origin
            b = edges[e.next].origin
            twin = pending.pop((b, a), None)
            if twin is not None:
                e.twin = twin
                edges[twin].twin = e.index
                continue
            if (a, b) in pending:
                logger.debug(
                    "Directed edge %d->%d registered twice; keeping half-edge %d.",
                    a,
                    b,
                    e.index,
                )
            pending[(a, b)] = e.index

        return cls(vertices, edges, face_cells)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def dest(self, edge: HalfEdge) -> int:
        """Vertex index the half-edge points to."""
        return self.edges[edge.next].origin

    def next_edge(self, edge: HalfEdge) -> HalfEdge:
        return self.edges[edge.next]

    def twin_edge(self, edge: HalfEdge) -> HalfEdge | None:
        if edge.twin == NO_INDEX:
            return None
        return self.edges[edge.twin]

    def face_edges(self, face: Face) -> List[HalfEdge]:
        """Half-edges around ``face`` starting at its marked edge."""
        ring = []
        start = face.marked_edge
        e = start
        while True:
            ring.append(self.edges[e])
            e = self.edges[e].next
            if e == start:
                return ring

    def neighboring_faces(self, face: Face) -> List[Face]:
        """Faces sharing an edge with ``face``, in edge-ring order."""
        seen: dict[int, None] = {}
        for e in self.face_edges(face):
            if e.twin == NO_INDEX:
                continue
            other = self.edges[e.twin].face
            if other != NO_INDEX:
                seen.setdefault(other, None)
        return [self.faces[f] for f in seen]

    def next_boundary_edge(self, edge: HalfEdge) -> HalfEdge:
        """Return the boundary half-edge following ``edge`` on its loop.

        Starting from ``edge.next`` we keep crossing interior edges
        (``twin.next``) around the shared vertex until we land on another
        boundary half-edge. For interior half-edges this is just
        ``edge.next``.
        """
        nxt = self.edges[edge.next]
        if edge.twin != NO_INDEX:
            return nxt
        while nxt.twin != NO_INDEX:
            nxt = self.edges[self.edges[nxt.twin].next]
        return nxt

    def boundary_loops(self) -> List[List[int]]:
        """Vertex loops of the boundary, each in source-to-target order."""
        loops = []
        visited: set[int] = set()
        for start in self.boundary_edges:
            if start.index in visited:
                continue
            loop = []
            e = start
            while e.index not in visited:
                visited.add(e.index)
                loop.append(e.origin)
                e = self.next_boundary_edge(e)
            loops.append(loop)
        return loops

    def outgoing_edges(self, vertex: int) -> List[HalfEdge]:
        return [e for e in self.edges if e.origin == vertex]

    def vertex_faces(self, vertex: int) -> List[Face]:
        return [f for f in self.faces if vertex in f.vertices]

    def vertex_neighbors(self, vertex: int) -> List[int]:
        """Vertices joined to ``vertex`` by an edge, in first-seen order."""
        seen: dict[int, None] = {}
        for e in self.edges:
            if e.origin == vertex:
                seen.setdefault(self.dest(e), None)
            elif self.dest(e) == vertex:
                seen.setdefault(e.origin, None)
        return list(seen)

    def is_closed(self) -> bool:
        return len(self.boundary_edges) == 0

    def euler_characteristic(self) -> int:
        return len(self.vertices) - len(self.unique_edges) + len(self.faces)


__all__ = ["NO_INDEX", "Vertex", "HalfEdge", "Face", "Topology"]
