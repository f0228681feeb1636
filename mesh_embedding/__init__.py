"""Package utilities for mesh-embedding.

The kernel lives in top-level packages like `geometry/`, `modules/`, and
`runtime/`. This package carries the installed version string.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mesh-embedding")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
