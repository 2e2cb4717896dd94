"""Core domain services for lob."""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path
from typing import TYPE_CHECKING

from lob.core.exceptions import ExecutionError, LobIOError
from lob.core.models import CompileResult, InputSource, OutputFormat, RunReport
from lob.core.synthesis import synthesize


if TYPE_CHECKING:
    from lob.config import Settings
    from lob.core.ports import CachePort, CompilerFactory, ToolchainPort


logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates synthesis, cached compilation and execution."""

    def __init__(
        self,
        cache: CachePort,
        toolchain: ToolchainPort,
        compiler_factory: CompilerFactory,
    ) -> None:
        self._cache = cache
        self._toolchain = toolchain
        self._compiler_factory = compiler_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> Pipeline:
        """Create a Pipeline with the default adapters.

        Args:
            settings: Resolved cache and compiler locations.

        Returns:
            Pipeline backed by BinaryCache, ToolchainResolver and
            RustcCompiler.
        """
        from lob.adapters.cache import BinaryCache
        from lob.adapters.compiler import RustcCompiler
        from lob.adapters.toolchain import ToolchainResolver

        return cls(
            cache=BinaryCache(settings.cache_dir),
            toolchain=ToolchainResolver.from_settings(settings),
            compiler_factory=RustcCompiler,
        )

    @property
    def cache(self) -> CachePort:
        """The cache backing this pipeline."""
        return self._cache

    def generate(
        self,
        expression: str,
        input_source: InputSource,
        output_format: OutputFormat,
    ) -> str:
        """Generate the program source for an expression."""
        return synthesize(expression, input_source, output_format)

    def compile(self, source: str, expression: str | None = None) -> CompileResult:
        """Return a binary for source, compiling it only on a cache miss.

        The toolchain is resolved only when a compilation is needed, so a
        cache hit works without any compiler installed.

        Args:
            source: Generated program text.
            expression: User expression, echoed in compilation reports.

        Returns:
            CompileResult with the binary path and whether it was cached.

        Raises:
            ToolchainError: If a compilation is needed and no compiler is
                available.
            CompilationError: If the compiler rejects the program. Nothing
                is cached in that case.
            LobIOError: If the cache cannot be written.
        """
        key = self._cache.hash_source(source)
        cached = self._cache.get_binary(key)
        if cached is not None:
            logger.info("Cache hit: true")
            return CompileResult(binary_path=cached, cache_hit=True)

        logger.info("Cache hit: false")
        compiler = self._compiler_factory(self._toolchain.resolve())
        source_path = self._cache.store_source(key, source)
        with self._cache.staging_binary(key) as staging:
            compiler.compile(source_path, staging, expression)
        return CompileResult(binary_path=self._cache.binary_path(key), cache_hit=False)

    def execute(self, binary_path: Path, input_source: InputSource) -> None:
        """Run a compiled program attached to the caller's streams.

        Input files are passed as command-line arguments; the program
        itself opens and reads them. Nothing is captured.

        Raises:
            LobIOError: If the program cannot be started.
            ExecutionError: If the program exits with a non-zero status.
        """
        cmd = [str(binary_path), *(str(path) for path in input_source.files)]
        try:
            proc = subprocess.run(cmd, check=False)
        except OSError as e:
            raise LobIOError(
                f"Failed to execute binary: {e}", path=binary_path, cause=e
            ) from e
        if proc.returncode != 0:
            raise ExecutionError(proc.returncode)

    def run(
        self,
        expression: str,
        input_source: InputSource,
        output_format: OutputFormat,
    ) -> RunReport:
        """Generate, compile (or reuse) and execute an expression.

        Args:
            expression: The user expression.
            input_source: Where the program reads its input.
            output_format: How the program prints its results.

        Returns:
            RunReport with the compile result and phase timings.

        Raises:
            LobError: Any failure of the individual phases.
        """
        input_source.validate()
        start = time.perf_counter()

        logger.info("Compiling expression...")
        source = self.generate(expression, input_source, output_format)
        result = self.compile(source, expression)
        compiled = time.perf_counter()

        logger.info("Executing...")
        self.execute(result.binary_path, input_source)
        finished = time.perf_counter()

        return RunReport(
            compile_result=result,
            compile_seconds=compiled - start,
            execute_seconds=finished - compiled,
            total_seconds=finished - start,
        )
