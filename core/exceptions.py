"""Custom exception types for the mesh embedding kernel."""

from __future__ import annotations


class MeshEmbeddingError(Exception):
    """Base class for domain-specific errors."""


class EmbeddingShapeError(MeshEmbeddingError, ValueError):
    """Raised when a position array does not match the embedding layout."""

    def __init__(
        self,
        message: str,
        *,
        expected: tuple[int, ...] | None = None,
        got: tuple[int, ...] | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.got = got


class UnknownModuleError(MeshEmbeddingError, KeyError):
    """Raised when an energy or constraint module name cannot be resolved."""

    def __init__(self, kind: str, name: str) -> None:
        message = f"{kind.capitalize()} module '{name}' not found."
        super().__init__(message)
        self.kind = kind
        self.name = name

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])


__all__ = ["MeshEmbeddingError", "EmbeddingShapeError", "UnknownModuleError"]
