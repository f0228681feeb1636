import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from geometry.embedding import Embedding
from modules.energy.spring import Spring, SpringEnergy
from runtime.gradient_check import (
    check_gradient,
    check_terms,
    numerical_gradient,
    relative_error,
)


class WrongSign(SpringEnergy):
    def accumulate_terms(self, emb, grad, terms=None):
        super().accumulate_terms(emb, grad, terms)
        grad *= -1.0

    def term_grad_accumulate(self, k, emb, grad):
        tmp = np.zeros_like(grad)
        super().term_grad_accumulate(k, emb, tmp)
        grad -= tmp


def _pair():
    emb = Embedding(2, [[0.0, 0.0, 0.0], [1.5, 0.5, -0.2]])
    return emb, [Spring(0, 1, 2.0, 1.0)]


def test_numerical_gradient_restores_positions():
    emb, springs = _pair()
    before = emb.pos.copy()
    grad = numerical_gradient(SpringEnergy(springs), emb)
    np.testing.assert_array_equal(emb.pos, before)
    np.testing.assert_allclose(grad[:3], -grad[3:], atol=1e-8)


def test_relative_error():
    assert relative_error(np.array([1.0, 2.0]), np.array([1.0, 2.2])) == pytest.approx(0.2 / 2.2)
    assert relative_error(np.array([]), np.array([])) == 0.0


def test_correct_gradient_passes():
    emb, springs = _pair()
    energy = SpringEnergy(springs)
    assert check_gradient(energy, emb) < 1e-6
    assert check_terms(energy, emb) < 1e-6


def test_wrong_gradient_is_flagged():
    emb, springs = _pair()
    energy = WrongSign(springs)
    assert check_gradient(energy, emb) > 1.0
    assert check_terms(energy, emb) > 1.0
