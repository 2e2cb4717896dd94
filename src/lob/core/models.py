"""Core domain models for lob.

These models are pure Python dataclasses and enums with no I/O
dependencies beyond path existence checks. They represent the values that
flow through the synthesize, compile, cache and execute pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Self

from lob.core.exceptions import LobIOError


class InputFormat(Enum):
    """How the generated program parses its input."""

    LINES = "lines"
    CSV = "csv"
    TSV = "tsv"
    JSON_LINES = "json"


class OutputFormat(str, Enum):
    """How the generated program prints its results."""

    DEBUG = "debug"
    JSON = "json"
    JSON_LINES = "jsonl"
    CSV = "csv"
    TABLE = "table"

    @classmethod
    def from_name(cls, name: str) -> OutputFormat | None:
        """Parse a format name, accepting the ``jsonlines`` alias.

        Args:
            name: Format name as typed by the user.

        Returns:
            The matching format, or None if the name is unknown.
        """
        if name == "jsonlines":
            return cls.JSON_LINES
        try:
            return cls(name)
        except ValueError:
            return None

    @classmethod
    def default_for(cls, is_terminal: bool) -> OutputFormat:
        """Pick the default format for the current output stream.

        Debug output reads best on an interactive terminal; JSON lines are
        the friendlier format when piping into other tools.
        """
        return cls.DEBUG if is_terminal else cls.JSON_LINES

    @property
    def needs_json(self) -> bool:
        """Whether the output stage serializes through serde_json."""
        return self is not OutputFormat.DEBUG

    @property
    def materializes(self) -> bool:
        """Whether the output stage collects rows before printing them."""
        return self in (OutputFormat.CSV, OutputFormat.TABLE)


@dataclass(frozen=True, slots=True)
class InputSource:
    """Where and how the generated program reads its input sequence.

    Attributes:
        files: Files to read, in order. Empty means standard input.
        format: Parsing applied to each record.

    Example:
        >>> source = InputSource(files=(), format=InputFormat.LINES)
        >>> source.is_stdin
        True
    """

    files: tuple[Path, ...] = ()
    format: InputFormat = InputFormat.LINES

    @classmethod
    def from_paths(cls, paths: list[Path] | None, input_format: InputFormat) -> Self:
        """Build an input source from CLI path arguments."""
        return cls(files=tuple(paths or ()), format=input_format)

    @property
    def is_stdin(self) -> bool:
        """True when the program reads standard input."""
        return not self.files

    def validate(self) -> None:
        """Check that every input file exists.

        Raises:
            LobIOError: If any file is missing.
        """
        for path in self.files:
            if not path.exists():
                raise LobIOError(f"File not found: {path}", path=path)


class ToolchainKind(Enum):
    """Where a resolved compiler came from."""

    EMBEDDED = "embedded"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class ToolchainHandle:
    """A resolved compiler executable.

    Attributes:
        compiler: Path to the compiler executable.
        kind: Whether the compiler was extracted from the embedded archive
            or found on PATH.
        sysroot: Standard-library root to pass to the compiler, if any.
    """

    compiler: Path
    kind: ToolchainKind
    sysroot: Path | None = None

    def is_valid(self) -> bool:
        """Check that the compiler executable is present."""
        return self.compiler.exists()


@dataclass(frozen=True, slots=True)
class LibraryArtifacts:
    """Precompiled support libraries linked into every generated program.

    Attributes:
        prelude: Path to the lob_prelude rlib.
        core: Path to the lob_core rlib.
        deps_dir: Directory searched for the libraries' own dependencies.
    """

    prelude: Path
    core: Path
    deps_dir: Path


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Outcome of a compile request.

    Attributes:
        binary_path: Path of the executable to run.
        cache_hit: True if the binary was reused from the cache.
    """

    binary_path: Path
    cache_hit: bool


@dataclass(frozen=True, slots=True)
class RunReport:
    """Timings for one run of the pipeline, in seconds."""

    compile_result: CompileResult
    compile_seconds: float
    execute_seconds: float
    total_seconds: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Summary of the compiled-binary cache.

    Attributes:
        binary_count: Number of cached binaries.
        total_size: Total size of cached binaries in bytes.
    """

    binary_count: int = 0
    total_size: int = 0

    def format_size(self) -> str:
        """Format total_size in human-readable binary units."""
        if self.total_size < 1024:
            return f"{self.total_size} B"
        size = float(self.total_size)
        for unit in ["KB", "MB"]:
            size /= 1024.0
            if size < 1024.0:
                return f"{size:.2f} {unit}"
        return f"{size / 1024.0:.2f} GB"


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A remediation proposal for a recognised compiler error.

    Attributes:
        problem: One-line description of what went wrong.
        fixes: Suggested fixes, most likely first.
    """

    problem: str
    fixes: tuple[str, ...] = field(default_factory=tuple)


class LineKind(Enum):
    """Presentation category of one line of compiler output."""

    ERROR = "error"
    WARNING = "warning"
    LOCATION = "location"
    SOURCE = "source"
    ANNOTATION = "annotation"
    CARET = "caret"
    HELP = "help"
    NOTE = "note"
    SUMMARY = "summary"
    OTHER = "other"
    BLANK = "blank"
