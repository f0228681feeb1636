import logging
import math
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from modules.energy import builders
from sample_meshes import euclidean_geometry, quad_grid, triangle_grid, two_triangles


def _grid_geometry():
    topo, emb = quad_grid(3, 3)
    return euclidean_geometry(topo, emb)


def test_stretch_springs_one_per_edge():
    springs = builders.stretch_springs(_grid_geometry(), 2.0)
    assert len(springs) == 12
    for s in springs:
        assert s.rest == pytest.approx(1.0)
        assert s.k == pytest.approx(2.0)


def test_shear_springs_on_quad_diagonals():
    springs = builders.shear_springs(_grid_geometry(), 0.5)
    assert len(springs) == 8
    assert {(s.i, s.j) for s in springs[:2]} == {(0, 4), (1, 3)}
    for s in springs:
        assert s.rest == pytest.approx(math.sqrt(2.0))
        assert s.k == pytest.approx(0.5 * math.sqrt(2.0))


def test_shear_springs_skip_triangles(caplog):
    topo, emb = triangle_grid(3, 3)
    with caplog.at_level(logging.WARNING, logger="mesh_embedding"):
        springs = builders.shear_springs(euclidean_geometry(topo, emb), 1.0)
    assert springs == []
    assert "non-quad" in caplog.text


def test_bend_springs_reach_across_edges():
    springs = builders.bend_springs(_grid_geometry(), 0.1)
    assert len(springs) == 8
    first = springs[0]
    assert (first.i, first.j) == (0, 2)
    assert first.rest == pytest.approx(2.0)
    assert first.k == pytest.approx(0.2)


def test_boundary_springs_skip_one_vertex():
    topo, emb = two_triangles()
    springs = builders.boundary_springs(euclidean_geometry(topo, emb), 1.0)
    assert sorted((s.i, s.j) for s in springs) == [(0, 2), (1, 3), (2, 0), (3, 1)]
    assert all(s.rest == pytest.approx(math.sqrt(2.0)) for s in springs)


def test_boundary_springs_on_grid():
    springs = builders.boundary_springs(_grid_geometry(), 1.0)
    assert len(springs) == 8


def test_vertex_charges():
    topo, _ = quad_grid(3, 3)
    charges = builders.vertex_charges(topo, 0.3)
    assert [c.i for c in charges] == list(range(9))
    assert all(c.q == 0.3 for c in charges)


def test_area_charges_with_constant_and_callable_cells():
    geom = _grid_geometry()
    uniform = builders.area_charges(geom, 2.0, 0.5, 0.5)
    assert all(c.q == pytest.approx(0.5) for c in uniform)

    varying = builders.area_charges(geom, 2.0, 0.5, lambda i: float(i))
    assert [c.q for c in varying] == pytest.approx([float(i) for i in range(9)])
