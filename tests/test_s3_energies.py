import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from geometry.embedding import EmbeddingS3
from modules.energy.charge import Charge, ChargeEnergyS3
from modules.energy.spring import Spring, SpringEnergy, SpringEnergyS3


def _clustered_points(n, spread=0.15, seed=0):
    rng = np.random.default_rng(seed)
    pts = np.array([1.0, 0.0, 0.0, 0.0]) + spread * rng.standard_normal((n, 4))
    return pts / np.linalg.norm(pts, axis=1)[:, None]


def _tangents(emb, seed=1):
    rng = np.random.default_rng(seed)
    P = emb.positions_view()
    T = rng.standard_normal(P.shape)
    T -= np.einsum("ij,ij->i", T, P)[:, None] * P
    return T.reshape(-1)


def _directional_difference(energy, emb, direction, eps=1e-6):
    base = emb.pos.copy()
    emb.pos[:] = base + eps * direction
    e_plus = energy.value(emb)
    emb.pos[:] = base - eps * direction
    e_minus = energy.value(emb)
    emb.pos[:] = base
    return (e_plus - e_minus) / (2.0 * eps)


def test_s3_spring_value_uses_geodesic_length():
    emb = EmbeddingS3(2, [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0]])
    energy = SpringEnergyS3([Spring(0, 1, 2.0, 1.0)])
    assert energy.value(emb) == pytest.approx(0.5 * 2.0 * (np.pi / 2 - 1.0) ** 2)


def test_s3_spring_gradient_is_tangent():
    emb = EmbeddingS3(4, _clustered_points(4))
    springs = [Spring(i, j, 1.0, 0.05) for i in range(4) for j in range(i + 1, 4)]
    energy = SpringEnergyS3(springs)
    grad = energy.gradient(emb, np.zeros_like(emb.pos)).reshape(4, 4)
    radial = np.einsum("ij,ij->i", grad, emb.positions_view())
    np.testing.assert_allclose(radial, 0.0, atol=1e-12)


def test_s3_spring_gradient_matches_tangent_differences():
    emb = EmbeddingS3(5, _clustered_points(5, seed=3))
    springs = [Spring(i, (i + 1) % 5, 1.5, 0.1) for i in range(5)]
    energy = SpringEnergyS3(springs)
    grad = energy.gradient(emb, np.zeros_like(emb.pos))
    for seed in range(3):
        t = _tangents(emb, seed)
        expected = _directional_difference(energy, emb, t)
        assert float(grad @ t) == pytest.approx(expected, rel=1e-5, abs=1e-9)


def test_s3_charge_value_is_cotangent():
    theta = 0.1
    emb = EmbeddingS3(2, [[1.0, 0.0, 0.0, 0.0], [np.cos(theta), np.sin(theta), 0.0, 0.0]])
    energy = ChargeEnergyS3([Charge(0, 1.0), Charge(1, 2.0)], kc=0.5)
    assert energy.value(emb) == pytest.approx(0.5 * 2.0 / np.tan(theta))


def test_s3_charge_cutoff_applies_to_value_and_gradient():
    theta = 0.5
    emb = EmbeddingS3(2, [[1.0, 0.0, 0.0, 0.0], [np.cos(theta), np.sin(theta), 0.0, 0.0]])
    energy = ChargeEnergyS3([Charge(0, 1.0), Charge(1, 1.0)], cutoff=0.2)
    assert energy.value(emb) == 0.0
    assert not energy.gradient(emb, np.zeros(8)).any()


def test_s3_charge_gradient_matches_tangent_differences():
    emb = EmbeddingS3(5, _clustered_points(5, spread=0.1, seed=5))
    energy = ChargeEnergyS3([Charge(i, 0.2) for i in range(5)], cutoff=1.0)
    grad = energy.gradient(emb, np.zeros_like(emb.pos))
    assert np.any(grad)
    for seed in range(3):
        t = _tangents(emb, seed)
        expected = _directional_difference(energy, emb, t)
        assert float(grad @ t) == pytest.approx(expected, rel=1e-5, abs=1e-9)


def test_chord_springs_on_s3_agree_term_by_term():
    emb = EmbeddingS3(2, [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0]])
    energy = SpringEnergy([Spring(0, 1, 1.0, 0.0)])
    # Chord length sqrt(2), not the geodesic pi/2.
    assert energy.term_value(0, emb) == pytest.approx(1.0)
    assert energy.local_value(emb, 0) == pytest.approx(1.0)
    assert energy.value(emb) == pytest.approx(1.0)


def test_s3_spring_local_value_is_sum_of_touching_terms():
    emb = EmbeddingS3(5, _clustered_points(5, seed=4))
    springs = [Spring(i, j, 1.0 + i, 0.05) for i in range(5) for j in range(i + 1, 5)]
    energy = SpringEnergyS3(springs)
    for v in range(5):
        expected = sum(
            energy.term_value(k, emb)
            for k in range(energy.term_count())
            if v in energy.term_vertices(k)
        )
        assert energy.local_value(emb, v) == pytest.approx(expected)
