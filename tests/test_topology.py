import logging
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from geometry.topology import NO_INDEX, Topology
from sample_meshes import icosahedron, quad_grid, triangle_grid, two_triangles


def test_icosahedron_counts():
    topo, _ = icosahedron()
    assert len(topo.vertices) == 12
    assert len(topo.faces) == 20
    assert len(topo.edges) == 60
    assert len(topo.unique_edges) == 30
    assert topo.boundary_edges == []
    assert topo.is_closed()
    assert topo.euler_characteristic() == 2


def test_twins_are_mutual_and_reversed():
    topo, _ = icosahedron()
    for e in topo.edges:
        twin = topo.edges[e.twin]
        assert topo.edges[twin.twin] is e
        assert twin.origin == topo.dest(e)
        assert topo.dest(twin) == e.origin


def test_next_cycles_close_around_each_face():
    topo, _ = quad_grid(3, 3)
    for face in topo.faces:
        ring = topo.face_edges(face)
        assert [e.origin for e in ring] == face.vertices
        assert all(e.face == face.index for e in ring)
        assert topo.next_edge(ring[-1]) is ring[0]


def test_vertex_edges_are_outgoing():
    topo, _ = triangle_grid(3, 3)
    for v in topo.vertices:
        assert v.edge != NO_INDEX
        assert topo.edges[v.edge].origin == v.index


def test_open_quad_grid_boundary():
    topo, _ = quad_grid(3, 3)
    assert len(topo.unique_edges) == 12
    assert len(topo.boundary_edges) == 8
    assert not topo.is_closed()
    assert topo.euler_characteristic() == 1

    loops = topo.boundary_loops()
    assert len(loops) == 1
    assert sorted(loops[0]) == [0, 1, 2, 3, 5, 6, 7, 8]


def test_next_boundary_edge_crosses_interior_edges():
    topo, _ = two_triangles()
    first = topo.boundary_edges[0]
    assert (first.origin, topo.dest(first)) == (0, 1)
    nxt = topo.next_boundary_edge(first)
    assert nxt.is_boundary
    assert nxt.origin == 1
    assert topo.boundary_loops() == [[0, 1, 2, 3]]


def test_next_boundary_edge_on_interior_edge_is_next():
    topo, _ = two_triangles()
    interior = next(e for e in topo.edges if not e.is_boundary)
    assert topo.next_boundary_edge(interior) is topo.next_edge(interior)


def test_neighboring_faces_are_distinct_and_ordered():
    topo, _ = quad_grid(3, 3)
    neighbors = [f.index for f in topo.neighboring_faces(topo.faces[0])]
    assert neighbors == [1, 2]
    center = [f.index for f in topo.neighboring_faces(topo.faces[3])]
    assert sorted(center) == [1, 2]


def test_vertex_neighbors_and_faces():
    topo, _ = two_triangles()
    assert topo.vertex_neighbors(0) == [1, 2, 3]
    assert [f.index for f in topo.vertex_faces(2)] == [0, 1]
    assert len(topo.outgoing_edges(0)) == 2


def test_non_manifold_edge_is_overwritten(caplog):
    caplog.set_level(logging.DEBUG, logger="mesh_embedding")
    # Both faces traverse 0 -> 1, so neither finds a twin for it.
    topo = Topology.from_soup(4, [[0, 1, 2], [0, 1, 3]])
    assert len(topo.boundary_edges) == 6
    assert "registered twice" in caplog.text
