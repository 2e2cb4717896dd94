"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from pathlib import Path

    from lob.core.models import CacheStats, ToolchainHandle

CandidateRootProvider = Callable[[], Iterable["Path"]]
"""Yields directories that may hold the prebuilt support libraries."""


@runtime_checkable
class CachePort(Protocol):
    """Content-addressed store for generated sources and compiled binaries."""

    def hash_source(self, source: str) -> str:
        """Return the cache key for a generated source."""
        ...

    def get_binary(self, key: str) -> Path | None:
        """Return the cached binary for key, or None if not cached."""
        ...

    def store_source(self, key: str, source: str) -> Path:
        """Write the generated source for key and return its path."""
        ...

    def binary_path(self, key: str) -> Path:
        """Return where the binary for key lives (existence not implied)."""
        ...

    def staging_binary(self, key: str) -> AbstractContextManager[Path]:
        """Yield a temporary output path that is moved into place on success.

        Args:
            key: Cache key of the binary being produced.

        Returns:
            Context manager yielding the path the compiler should write to.
        """
        ...

    def clear(self) -> None:
        """Remove every cached source and binary."""
        ...

    def stats(self) -> CacheStats:
        """Count cached binaries and their total size."""
        ...


@runtime_checkable
class ToolchainPort(Protocol):
    """Locates a usable compiler."""

    def resolve(self) -> ToolchainHandle:
        """Return a handle to a usable compiler.

        Raises:
            ToolchainError: If no compiler can be found.
        """
        ...


@runtime_checkable
class CompilerPort(Protocol):
    """Turns a generated source file into an executable."""

    def compile(
        self,
        source_path: Path,
        output_path: Path,
        expression: str | None = None,
    ) -> None:
        """Compile source_path into output_path.

        Args:
            source_path: Generated program to compile.
            output_path: Where the executable must be written.
            expression: User expression, echoed in error reports.

        Raises:
            CompilationError: If the compiler rejects the program.
        """
        ...


CompilerFactory = Callable[["ToolchainHandle"], CompilerPort]
