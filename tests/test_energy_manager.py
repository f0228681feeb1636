import os
import sys
from unittest.mock import MagicMock

import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import UnknownModuleError
from core.parameters.global_parameters import GlobalParameters
from core.parameters.resolver import ParameterResolver
from modules.energy import builders
from modules.energy.spring import SpringEnergy
from runtime.energy_manager import EnergyModuleManager
from sample_meshes import euclidean_geometry, jitter, quad_grid


@pytest.fixture
def mocked_manager():
    with pytest.MonkeyPatch.context() as m:
        spring_mod = MagicMock()
        spring_mod.build_energy = MagicMock(return_value="springs")

        def mock_import(name):
            if name.endswith("spring"):
                return spring_mod
            raise ImportError(f"No module named {name}")

        m.setattr("importlib.import_module", mock_import)
        manager = EnergyModuleManager(["spring", "spring"])
        yield manager, spring_mod


def test_load_modules(mocked_manager):
    manager, spring_mod = mocked_manager
    assert "spring" in manager
    assert manager.get_module("spring") is spring_mod


def test_build_energy_passes_entry_and_resolver(mocked_manager):
    manager, spring_mod = mocked_manager
    resolver = ParameterResolver()
    entry = {"module": "spring", "kinds": ["stretch"]}
    assert manager.build_energy(entry, "geometry", resolver) == "springs"
    spring_mod.build_energy.assert_called_once_with("geometry", entry, resolver)


def test_missing_module_raises(mocked_manager):
    manager, _ = mocked_manager
    with pytest.raises(UnknownModuleError):
        manager.get_module("gravity")
    with pytest.raises(KeyError):
        manager.get_module("gravity")


def test_unknown_module_at_construction():
    with pytest.raises(UnknownModuleError):
        EnergyModuleManager(["does_not_exist"])


def test_module_without_builder_is_rejected():
    # ``base`` is an energy module but not a scene-buildable one.
    with pytest.raises(UnknownModuleError):
        EnergyModuleManager().get_module("base")


def test_build_total_matches_hand_built_energy():
    topo, emb = quad_grid(3, 3)
    geom = euclidean_geometry(topo, emb)
    gp = GlobalParameters({"stretch_stiffness": 3.0, "bend_spring_stiffness": 0.2})
    entries = [
        {"module": "spring", "kinds": ["stretch", "bend"], "weight": 0.5},
        {"module": "charge", "weight": 2.0},
    ]
    total = EnergyModuleManager().build_total(entries, geom, ParameterResolver(gp))

    manual = SpringEnergy(builders.stretch_springs(geom, 3.0) + builders.bend_springs(geom, 0.2))
    jitter(emb, 0.1)
    assert total.terms[0][1] == 0.5
    assert total.terms[0][0].value(emb) == pytest.approx(manual.value(emb))
    np.testing.assert_allclose(
        total.terms[0][0].gradient(emb, np.zeros_like(emb.pos)),
        manual.gradient(emb, np.zeros_like(emb.pos)),
    )
    assert total.terms[1][1] == 2.0


def test_unknown_spring_kind():
    topo, emb = quad_grid(2, 2)
    manager = EnergyModuleManager(["spring"])
    with pytest.raises(ValueError):
        manager.build_energy(
            {"module": "spring", "kinds": ["twist"]},
            euclidean_geometry(topo, emb),
            ParameterResolver(),
        )
