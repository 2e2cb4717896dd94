"""Embedded Rust toolchain extraction and management."""

from __future__ import annotations

import logging
import shutil
import sys
import tarfile
import tempfile
from pathlib import Path

from lob.core.exceptions import ToolchainError
from lob.core.models import ToolchainHandle, ToolchainKind


logger = logging.getLogger(__name__)


def compiler_relpath() -> Path:
    """Location of the compiler executable inside an extracted toolchain."""
    name = "rustc.exe" if sys.platform == "win32" else "rustc"
    return Path("bin") / name


class EmbeddedToolchain:
    """A Rust toolchain shipped inside the lob package as an archive.

    The archive is extracted once into ``toolchain_dir`` and reused by later
    runs. Builds without a bundled toolchain ship an empty placeholder
    archive, which is reported as "not available" rather than as corrupt.

    A directory only counts as extracted when the compiler executable is
    present inside it. A leftover directory from an interrupted extraction
    is removed and extracted again.

    Attributes:
        toolchain_dir: Extraction directory.
        archive: Path to the (possibly empty) toolchain archive.
    """

    def __init__(self, toolchain_dir: Path, archive: Path) -> None:
        self.toolchain_dir = toolchain_dir
        self.archive = archive

    @property
    def compiler_path(self) -> Path:
        """Path to the extracted compiler executable."""
        return self.toolchain_dir / compiler_relpath()

    def handle(self) -> ToolchainHandle:
        """Handle for the extracted toolchain, valid or not."""
        return ToolchainHandle(
            compiler=self.compiler_path,
            kind=ToolchainKind.EMBEDDED,
            sysroot=self.toolchain_dir,
        )

    def is_extracted(self) -> bool:
        """Check whether a usable extraction already exists."""
        return self.toolchain_dir.is_dir() and self.compiler_path.exists()

    def ensure_extracted(self) -> ToolchainHandle:
        """Extract the toolchain if needed and return its handle.

        Returns:
            Handle pointing at the extracted compiler, with the extraction
            directory as sysroot.

        Raises:
            ToolchainError: If no toolchain is embedded or extraction fails.
        """
        if not self.is_extracted():
            if self.toolchain_dir.exists():
                logger.warning(
                    "Toolchain directory %s is incomplete, extracting again",
                    self.toolchain_dir,
                )
            self._check_archive()
            logger.warning("First run: extracting embedded Rust toolchain...")
            self._extract()
            logger.warning("Toolchain ready!")
        return self.handle()

    def _check_archive(self) -> None:
        try:
            size = self.archive.stat().st_size
        except OSError:
            size = 0
        if size == 0:
            raise ToolchainError(
                "No embedded toolchain available. "
                "This package was built without an embedded toolchain."
            )

    def _extract(self) -> None:
        parent = self.toolchain_dir.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=".toolchain-", dir=parent))
        except OSError as e:
            raise ToolchainError(f"Failed to create toolchain directory: {e}") from e

        try:
            with tarfile.open(self.archive, mode="r:*") as archive:
                archive.extractall(staging, filter="data")
            self._make_executable(staging / compiler_relpath())
            if self.toolchain_dir.exists():
                shutil.rmtree(self.toolchain_dir)
            staging.rename(self.toolchain_dir)
        except (tarfile.TarError, OSError) as e:
            raise ToolchainError(f"Failed to extract toolchain: {e}") from e
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)

    @staticmethod
    def _make_executable(compiler: Path) -> None:
        if sys.platform == "win32" or not compiler.exists():
            return
        compiler.chmod(0o755)
