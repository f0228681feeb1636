# geom_io.py
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
import yaml

from core.parameters.global_parameters import GlobalParameters
from core.parameters.resolver import ParameterResolver
from geometry.embedding import Embedding, EmbeddingS3
from geometry.intrinsic import Geometry
from geometry.metrics import FunctionMetric
from geometry.topology import Topology

logger = logging.getLogger("mesh_embedding")


def load_data(filename):
    """Load a scene description from a YAML or JSON file.

    Expected format:
    {
        "vertices": [[x, y, z], ...],
        "faces": [[i, j, k, ...], ...],
        "global_parameters": {...},
        "energies": [{"module": "spring", "kinds": ["stretch"], "weight": 1.0}, ...],
        "constraints": [{"module": "plane", "floor": 0.0}, ...]
    }"""
    filename_str = str(filename)
    with open(filename_str, "r") as f:
        if filename_str.endswith((".yaml", ".yml")):
            data = yaml.safe_load(f)
        elif filename_str.endswith(".json"):
            data = json.load(f)
        else:
            logger.error(f"Unsupported file format for: {filename_str}")
            raise ValueError(f"Unsupported file format for: {filename_str}")

    return data


def _s3_geodesic(a, b) -> float:
    return float(np.arccos(np.clip(np.dot(a, b), -1.0, 1.0)))


@dataclass
class Scene:
    topology: Topology
    embedding: Embedding
    geometry: Geometry
    global_parameters: GlobalParameters
    energies: List[Dict[str, Any]] = field(default_factory=list)
    constraints: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def resolver(self) -> ParameterResolver:
        return ParameterResolver(self.global_parameters)

    def build_total_energy(self, manager=None):
        """Instantiate the scene's energy entries as one TotalEnergy."""
        from runtime.energy_manager import EnergyModuleManager

        manager = manager or EnergyModuleManager()
        return manager.build_total(self.energies, self.geometry, self.resolver)

    def build_constraints(self, manager=None):
        """Return a constraint manager holding the scene's constraints."""
        from runtime.constraint_manager import ConstraintModuleManager

        manager = manager or ConstraintModuleManager()
        manager.build_constraints(self.constraints, self.resolver)
        return manager


def parse_geometry(data: dict) -> Scene:
    gp = GlobalParameters()
    gp.update(data.get("global_parameters") or {})

    vertices = np.asarray(data.get("vertices", []), dtype=float)
    if vertices.ndim != 2 or vertices.shape[0] == 0:
        raise ValueError("Scene needs a non-empty 'vertices' list of coordinate rows.")
    faces = [list(map(int, face)) for face in data.get("faces", [])]
    n = vertices.shape[0]
    for face in faces:
        bad = [i for i in face if i < 0 or i >= n]
        if bad:
            raise ValueError(f"Face {face} references missing vertices {bad}.")

    topology = Topology.from_soup(n, faces)

    spherical = data.get("embedding") == "s3" or vertices.shape[1] == 4
    if spherical:
        embedding = EmbeddingS3(n, vertices)
        embedding.reproject()
        metric = FunctionMetric(_s3_geodesic)
    else:
        embedding = Embedding(n, vertices, dim=vertices.shape[1])
        metric = None

    reference = data.get("reference")
    if reference is not None:
        coords = np.asarray(reference, dtype=float)
    else:
        coords = embedding.positions_view().copy()
    geometry = Geometry.from_coords(topology, coords, metric)

    energies = [dict(e) for e in data.get("energies") or []]
    constraints = [dict(c) for c in data.get("constraints") or []]
    for entry in energies + constraints:
        if "module" not in entry:
            raise ValueError(f"Entry {entry!r} has no 'module' key.")
    if spherical:
        for entry in energies:
            if entry["module"] in ("spring", "charge"):
                entry.setdefault("spherical", True)

    logger.info(
        "Parsed scene: %d vertices, %d faces, %d energies, %d constraints",
        n,
        len(faces),
        len(energies),
        len(constraints),
    )
    return Scene(topology, embedding, geometry, gp, energies, constraints)


def save_geometry(scene: Scene, path: str, *, compact: bool = False) -> None:
    """Write the scene's current positions and description back to disk.

    The format follows the file suffix; indices are the in-memory ones, so
    ``parse_geometry(load_data(path))`` rebuilds the same topology. The
    reference coordinates are written too, so rest lengths survive a reload.
    """
    path_str = str(path)
    if not path_str.endswith((".yaml", ".yml", ".json")):
        logger.error(f"Unsupported file format for: {path_str}")
        raise ValueError(f"Unsupported file format for: {path_str}")

    data = {
        "vertices": scene.embedding.positions_view().tolist(),
        "reference": np.asarray(scene.geometry.coords, dtype=float).tolist(),
        "faces": [list(face.vertices) for face in scene.topology.faces],
        "global_parameters": scene.global_parameters.to_dict(),
        "energies": scene.energies,
        "constraints": scene.constraints,
    }
    if isinstance(scene.embedding, EmbeddingS3):
        data["embedding"] = "s3"

    with open(path_str, "w") as f:
        if path_str.endswith(".json"):
            json.dump(data, f, indent=None if compact else 2)
        else:
            yaml.safe_dump(data, f, default_flow_style=compact, sort_keys=False)
    logger.info("Saved scene to %s", path_str)
