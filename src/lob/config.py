"""Configuration utilities for lob.

This module resolves where lob keeps its persistent state. The resolved
values are threaded explicitly into the cache and toolchain adapters, so
tests can point a whole pipeline at a temporary directory.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from lob.core.exceptions import CacheError


APP_NAME = "lob"
CACHE_DIR_ENV = "LOB_CACHE_DIR"
RUSTC_ENV = "LOB_RUSTC"
ARCHIVE_NAME = "toolchain.tar.xz"


def platform_cache_dir() -> Path:
    """Return the per-user cache directory for the current platform.

    Resolution order:
    1. Windows - %LOCALAPPDATA%
    2. macOS - ~/Library/Caches
    3. Other - $XDG_CACHE_HOME, then ~/.cache

    Raises:
        CacheError: If no cache location can be determined.
    """
    try:
        if sys.platform == "win32":
            local = os.environ.get("LOCALAPPDATA")
            if not local:
                raise CacheError("No cache directory found: LOCALAPPDATA is not set")
            return Path(local)
        if sys.platform == "darwin":
            return Path.home() / "Library" / "Caches"
        xdg = os.environ.get("XDG_CACHE_HOME")
        if xdg and Path(xdg).is_absolute():
            return Path(xdg)
        return Path.home() / ".cache"
    except RuntimeError as e:
        raise CacheError(f"No cache directory found: {e}") from e


def embedded_archive() -> Path:
    """Return the path of the toolchain archive shipped with the package."""
    return Path(str(resources.files("lob") / "data" / ARCHIVE_NAME))


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved locations and names used by one lob invocation.

    Attributes:
        cache_dir: Root holding the ``sources/`` and ``binaries/`` caches.
        toolchain_dir: Where the embedded toolchain is extracted.
        archive: Embedded toolchain archive (may be an empty placeholder).
        compiler_name: Compiler looked up on PATH for the system toolchain.

    Example:
        >>> settings = Settings.for_cache_dir(Path("/tmp/lob-cache"))
        >>> settings.toolchain_dir
        PosixPath('/tmp/lob-cache/toolchain')
    """

    cache_dir: Path
    toolchain_dir: Path
    archive: Path
    compiler_name: str = "rustc"

    @classmethod
    def for_cache_dir(
        cls,
        cache_dir: Path,
        archive: Path | None = None,
        compiler_name: str = "rustc",
    ) -> Settings:
        """Derive settings rooted at an explicit cache directory."""
        return cls(
            cache_dir=cache_dir,
            toolchain_dir=cache_dir / "toolchain",
            archive=archive if archive is not None else embedded_archive(),
            compiler_name=compiler_name,
        )

    @classmethod
    def from_env(cls) -> Settings:
        """Resolve settings from the environment.

        ``LOB_CACHE_DIR`` overrides the cache root and ``LOB_RUSTC`` the
        system compiler name.

        Raises:
            CacheError: If no cache root can be determined.
        """
        override = os.environ.get(CACHE_DIR_ENV)
        cache_dir = Path(override) if override else platform_cache_dir() / APP_NAME
        compiler_name = os.environ.get(RUSTC_ENV) or "rustc"
        return cls.for_cache_dir(cache_dir.expanduser(), compiler_name=compiler_name)
