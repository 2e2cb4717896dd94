"""Content-addressed cache adapter implementing CachePort."""

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

from lob.core.exceptions import LobIOError
from lob.core.models import CacheStats


logger = logging.getLogger(__name__)

BINARIES_DIR = "binaries"
SOURCES_DIR = "sources"
SOURCE_SUFFIX = ".rs"


class BinaryCache:
    """Compiled-binary cache keyed by the hash of the generated source.

    Stores each generated program as ``sources/<key>.rs`` and its
    executable as ``binaries/<key>``. Entries are never modified once
    written. Every write goes to a temporary file in the target directory
    and is renamed into place, so concurrent lob processes racing on one
    key only ever observe a missing or a complete file.

    Attributes:
        cache_dir: Root directory of the cache.
    """

    def __init__(self, cache_dir: Path) -> None:
        """Initialize the cache, creating its directories.

        Args:
            cache_dir: Root directory for cached sources and binaries.

        Raises:
            LobIOError: If the directories cannot be created.
        """
        self.cache_dir = cache_dir
        self._ensure_dirs()

    @property
    def binaries_dir(self) -> Path:
        """Directory holding compiled binaries."""
        return self.cache_dir / BINARIES_DIR

    @property
    def sources_dir(self) -> Path:
        """Directory holding generated sources."""
        return self.cache_dir / SOURCES_DIR

    def _ensure_dirs(self) -> None:
        try:
            self.binaries_dir.mkdir(parents=True, exist_ok=True)
            self.sources_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LobIOError(
                f"Cannot create cache directory {self.cache_dir}: {e}",
                path=self.cache_dir,
                cause=e,
            ) from e

    def hash_source(self, source: str) -> str:
        """Hash generated source into a cache key.

        Args:
            source: Generated program text.

        Returns:
            Lowercase hex SHA-256 digest of the UTF-8 encoded source.
        """
        return hashlib.sha256(source.encode("utf-8")).hexdigest()

    def get_binary(self, key: str) -> Path | None:
        """Get the cached binary for key, or None if not cached.

        Only checks existence; the binary is not opened.
        """
        path = self.binary_path(key)
        return path if path.exists() else None

    def binary_path(self, key: str) -> Path:
        """Get the binary path for key, whether it exists or not."""
        return self.binaries_dir / key

    def source_path(self, key: str) -> Path:
        """Get the source path for key, whether it exists or not."""
        return self.sources_dir / f"{key}{SOURCE_SUFFIX}"

    def store_source(self, key: str, source: str) -> Path:
        """Store generated source in the cache.

        Args:
            key: Cache key of the source.
            source: Generated program text.

        Returns:
            Path of the stored source file.

        Raises:
            LobIOError: If the file cannot be written.
        """
        path = self.source_path(key)
        self.sources_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", dir=self.sources_dir)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(source)
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise LobIOError(
                f"Cannot write cached source {path}: {e}", path=path, cause=e
            ) from e
        return path

    @contextlib.contextmanager
    def staging_binary(self, key: str) -> Iterator[Path]:
        """Yield a temporary output path for the binary of key.

        The caller writes the binary to the yielded path. On normal exit the
        file is renamed onto binary_path(key); if the block raises, the
        temporary file is removed and nothing is cached.

        Args:
            key: Cache key of the binary being produced.

        Yields:
            Temporary path inside the binaries directory.
        """
        self.binaries_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.binaries_dir / f".{key}.{os.getpid()}.tmp"
        try:
            yield tmp
            if tmp.exists():
                os.replace(tmp, self.binary_path(key))
        finally:
            tmp.unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove all cached sources and binaries.

        Safe to call when the directories are already absent.

        Raises:
            LobIOError: If a directory cannot be removed or recreated.
        """
        for directory in (self.binaries_dir, self.sources_dir):
            try:
                if directory.exists():
                    shutil.rmtree(directory)
            except OSError as e:
                raise LobIOError(
                    f"Cannot clear cache directory {directory}: {e}",
                    path=directory,
                    cause=e,
                ) from e
        self._ensure_dirs()
        logger.info("Cleared cache at %s", self.cache_dir)

    def stats(self) -> CacheStats:
        """Get statistics over cached binaries.

        Temporary staging files are not counted.

        Returns:
            CacheStats with the binary count and their total size in bytes.
        """
        if not self.binaries_dir.exists():
            return CacheStats()

        binary_count = 0
        total_size = 0
        for path in self.binaries_dir.iterdir():
            if path.name.startswith(".") or not path.is_file():
                continue
            with contextlib.suppress(OSError):
                total_size += path.stat().st_size
                binary_count += 1

        return CacheStats(binary_count=binary_count, total_size=total_size)
