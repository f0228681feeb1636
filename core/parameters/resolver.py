"""Utility for resolving per-entry parameters.

Energy and constraint entries in a scene description may carry their own
values (``{"module": "spring", "stretch_stiffness": 2.0}``); anything they do
not set falls back to the global parameters.
"""

from __future__ import annotations

from core.parameters.global_parameters import GlobalParameters


class ParameterResolver:
    """Resolve parameters with optional per-entry overrides."""

    def __init__(self, global_params: GlobalParameters | None = None):
        self.global_params = global_params or GlobalParameters()

    def get(self, options, name: str, default=None):
        """Return parameter ``name`` from ``options`` or the global default."""
        if options and options.get(name) is not None:
            return options[name]
        value = self.global_params.get(name)
        return default if value is None else value

    def get_float(self, options, name: str, default: float = 0.0) -> float:
        return float(self.get(options, name, default))
