import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import EmbeddingShapeError, MeshEmbeddingError, UnknownModuleError


def test_shape_error_carries_shapes():
    err = EmbeddingShapeError("bad", expected=(2, 3), got=(3, 3))
    assert isinstance(err, MeshEmbeddingError)
    assert isinstance(err, ValueError)
    assert err.expected == (2, 3)
    assert err.got == (3, 3)
    assert str(err) == "bad"


def test_unknown_module_error_message():
    err = UnknownModuleError("energy", "gravity")
    assert isinstance(err, KeyError)
    assert isinstance(err, MeshEmbeddingError)
    assert str(err) == "Energy module 'gravity' not found."
    assert (err.kind, err.name) == ("energy", "gravity")


def test_catching_the_base_class():
    with pytest.raises(MeshEmbeddingError):
        raise UnknownModuleError("constraint", "wall")
