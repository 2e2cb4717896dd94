"""System-installed Rust compiler lookup."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from lob.core.exceptions import ToolchainError
from lob.core.models import ToolchainHandle, ToolchainKind


logger = logging.getLogger(__name__)


class SystemToolchain:
    """The compiler found on PATH.

    Attributes:
        compiler_name: Executable name (or path) to look up.
    """

    def __init__(self, compiler_name: str = "rustc") -> None:
        self.compiler_name = compiler_name

    def resolve(self) -> ToolchainHandle:
        """Locate the compiler and check that it runs.

        Returns:
            Handle with the absolute compiler path and no sysroot override.

        Raises:
            ToolchainError: If the compiler is missing or its version probe
                fails.
        """
        found = shutil.which(self.compiler_name)
        if found is None:
            raise ToolchainError(
                f"{self.compiler_name} not found. "
                "Please install Rust from https://rustup.rs/"
            )

        try:
            probe = subprocess.run(
                [found, "--version"],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise ToolchainError(
                f"{self.compiler_name} not found. "
                "Please install Rust from https://rustup.rs/"
            ) from e

        if probe.returncode != 0:
            raise ToolchainError(f"{self.compiler_name} not working properly")

        logger.debug("System compiler: %s", probe.stdout.strip())
        return ToolchainHandle(compiler=Path(found), kind=ToolchainKind.SYSTEM)
