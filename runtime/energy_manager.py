# runtime/energy_manager.py

import importlib
import logging
from collections import Counter

from core.exceptions import UnknownModuleError
from modules.energy.total import TotalEnergy

logger = logging.getLogger("mesh_embedding")


class EnergyModuleManager:
    def __init__(self, module_names=()):
        self.modules = {}
        counted = Counter(module_names)
        for name, count in counted.items():
            if count > 1:
                logger.debug(f"Energy module '{name}' listed {count} times.")
            self._load(name)

    def _load(self, name):
        try:
            module = importlib.import_module(f"modules.energy.{name}")
        except ImportError as e:
            logger.error(f"Could not load energy module '{name}': {e}")
            raise UnknownModuleError("energy", name) from e
        if not hasattr(module, "build_energy"):
            raise UnknownModuleError("energy", name)
        self.modules[name] = module
        logger.info(f"Loaded energy module: {name}")
        return module

    def get_module(self, mod):
        """
        Retrieve an energy module by name, importing it on first use.
        """
        if mod in self.modules:
            return self.modules[mod]
        return self._load(mod)

    def __contains__(self, name):
        return name in self.modules

    def build_energy(self, entry, geometry, resolver):
        """Build one energy from a scene entry ``{module: name, ...}``."""
        module = self.get_module(entry["module"])
        return module.build_energy(geometry, entry, resolver)

    def build_total(self, entries, geometry, resolver):
        """Combine scene entries into a :class:`TotalEnergy`.

        Each entry's ``weight`` (default 1) scales its energy.
        """
        total = TotalEnergy()
        for entry in entries:
            energy = self.build_energy(entry, geometry, resolver)
            weight = float(entry.get("weight", 1.0))
            logger.debug(f"Energy {entry['module']}: {energy!r} x {weight:g}")
            total.add(energy, weight)
        return total
