import logging
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from modules.energy.hinge import HingeEnergy
from modules.energy.hinge_builder import bending_hinges, bending_hinges_discrete, face_area
from sample_meshes import (
    euclidean_geometry,
    icosahedron,
    quad_grid,
    triangle_grid,
    two_triangles,
)


def test_one_hinge_per_interior_edge():
    topo, emb = icosahedron()
    assert len(bending_hinges(euclidean_geometry(topo, emb), 1.0)) == 30

    topo, emb = triangle_grid(3, 3)
    assert len(bending_hinges(euclidean_geometry(topo, emb), 1.0)) == 8


def test_hinge_corners_and_flat_energy():
    topo, emb = two_triangles()
    hinges = bending_hinges(euclidean_geometry(topo, emb), 1.0)
    assert len(hinges) == 1
    h = hinges[0]
    assert (h.a, h.b, h.c, h.d) == (0, 2, 3, 1)
    assert HingeEnergy(hinges).value(emb) == pytest.approx(0.0, abs=1e-15)


def test_closed_surface_hinges_are_consistently_oriented():
    topo, emb = icosahedron()
    energy = HingeEnergy(bending_hinges(euclidean_geometry(topo, emb), 1.0))
    cosines = energy.dihedral_cosines(emb)
    # Convex: neighbouring outward normals all agree to the same angle.
    assert cosines.min() == pytest.approx(cosines.max())
    assert cosines.min() > 0.5


def test_discrete_stiffness_uses_edge_length_and_areas():
    topo, emb = two_triangles()
    geom = euclidean_geometry(topo, emb)
    (h,) = bending_hinges_discrete(geom, 3.0)
    # |e|^2 = 2, A_left + A_right = 1.
    assert h.k == pytest.approx(6.0)


def test_discrete_skips_degenerate_pairs():
    topo, emb = two_triangles()
    emb.pos[:] = 0.0
    assert bending_hinges_discrete(euclidean_geometry(topo, emb), 1.0) == []


def test_face_area_warns_on_non_triangles(caplog):
    topo, emb = quad_grid(2, 2)
    geom = euclidean_geometry(topo, emb)
    with caplog.at_level(logging.WARNING, logger="mesh_embedding"):
        assert face_area(topo.faces[0], geom) == 0.0
    assert "not a triangle" in caplog.text

    topo, emb = two_triangles()
    assert face_area(topo.faces[0], euclidean_geometry(topo, emb)) == pytest.approx(0.5)
