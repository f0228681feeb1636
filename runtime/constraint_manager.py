# runtime/constraint_manager.py

import importlib
import logging

from core.exceptions import UnknownModuleError

logger = logging.getLogger("mesh_embedding")


class ConstraintModuleManager:
    def __init__(self, module_names=()):
        self.modules = {}
        self.constraints = []
        for name in module_names:
            self._load(name)

    def _load(self, name):
        try:
            module = importlib.import_module(f"modules.constraints.{name}")
        except ImportError as e:
            logger.error(f"Could not load constraint module '{name}': {e}")
            raise UnknownModuleError("constraint", name) from e
        if not hasattr(module, "build_constraint"):
            raise UnknownModuleError("constraint", name)
        self.modules[name] = module
        logger.info("Loaded constraint module: %s", name)
        return module

    def get_module(self, mod):
        """
        Retrieve a constraint module by name, importing it on first use.
        """
        if mod in self.modules:
            return self.modules[mod]
        return self._load(mod)

    def add(self, constraint):
        self.constraints.append(constraint)
        return constraint

    def build_constraints(self, entries, resolver):
        """Instantiate scene entries ``{module: name, ...}`` and keep them."""
        built = []
        for entry in entries:
            module = self.get_module(entry["module"])
            built.append(self.add(module.build_constraint(entry, resolver)))
        return built

    def enforce_all(self, pos, vel, n):
        """Apply every constraint in insertion order."""
        for constraint in self.constraints:
            logger.debug("Enforcing constraint: %r", constraint)
            constraint.enforce(pos, vel, n)

    def __contains__(self, name):
        return name in self.modules

    def __getitem__(self, name):
        return self.modules[name]

    def __len__(self):
        return len(self.constraints)
