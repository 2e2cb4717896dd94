"""Compiler adapter invoking rustc as a subprocess."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import TYPE_CHECKING

from lob.adapters.compiler.artifacts import (
    CORE_CRATE,
    PRELUDE_CRATE,
    find_library_artifacts,
)
from lob.core.diagnostics import format_compilation_error
from lob.core.exceptions import CompilationError, LobIOError


if TYPE_CHECKING:
    from pathlib import Path

    from lob.core.models import LibraryArtifacts, ToolchainHandle
    from lob.core.ports import CandidateRootProvider


logger = logging.getLogger(__name__)

EDITION = "2021"
OPT_LEVEL = "3"


class RustcCompiler:
    """Implements CompilerPort by running rustc once per program.

    Attributes:
        toolchain: Resolved compiler and optional sysroot.
    """

    def __init__(
        self,
        toolchain: ToolchainHandle,
        providers: Sequence[CandidateRootProvider] | None = None,
    ) -> None:
        """Initialize the compiler.

        Args:
            toolchain: Compiler to invoke.
            providers: Candidate-root providers for the support libraries.
                Defaults to the standard search order.
        """
        self.toolchain = toolchain
        self._providers = providers

    def build_command(
        self,
        source_path: Path,
        output_path: Path,
        artifacts: LibraryArtifacts | None,
    ) -> list[str]:
        """Assemble the compiler command line.

        Args:
            source_path: Program to compile.
            output_path: Executable to produce.
            artifacts: Support libraries to link, if found.

        Returns:
            Argument list starting with the compiler path.
        """
        cmd = [
            str(self.toolchain.compiler),
            f"--edition={EDITION}",
            "-C",
            f"opt-level={OPT_LEVEL}",
            "--crate-type",
            "bin",
            "-o",
            str(output_path),
            str(source_path),
        ]
        if artifacts is not None:
            cmd += [
                "--extern",
                f"{PRELUDE_CRATE}={artifacts.prelude}",
                "--extern",
                f"{CORE_CRATE}={artifacts.core}",
                "-L",
                f"dependency={artifacts.deps_dir}",
            ]
        if self.toolchain.sysroot is not None:
            cmd += ["--sysroot", str(self.toolchain.sysroot)]
        return cmd

    def compile(
        self,
        source_path: Path,
        output_path: Path,
        expression: str | None = None,
    ) -> None:
        """Compile source_path into output_path.

        Raises:
            LobIOError: If the compiler cannot be started.
            CompilationError: If the compiler exits with a non-zero status.
        """
        artifacts = find_library_artifacts(self._providers)
        cmd = self.build_command(source_path, output_path, artifacts)
        logger.debug("Running %s", " ".join(cmd))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise LobIOError(
                f"Failed to run rustc: {e}",
                path=self.toolchain.compiler,
                cause=e,
            ) from e

        if proc.returncode != 0:
            raise CompilationError(format_compilation_error(proc.stderr, expression))
