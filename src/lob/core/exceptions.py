"""Domain exceptions for lob.

All tool errors inherit from LobError, allowing callers to catch any
failure of the pipeline with a single except clause. Each exception
provides a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pathlib import Path

    from rich.text import Text


class LobError(Exception):
    """Base class for all lob exceptions.

    Catch this to handle any error from the pipeline.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class LobIOError(LobError):
    """Raised when a filesystem or process-start operation fails.

    Attributes:
        path: The path involved in the failure, if any.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.path = path
        self.cause = cause
        super().__init__(message)


class CacheError(LobError):
    """Raised when no usable cache directory can be determined."""

    @property
    def recovery_hint(self) -> str:
        """Suggest pointing the cache at a writable directory."""
        return "Set LOB_CACHE_DIR to a writable directory"


class ToolchainError(LobError):
    """Raised when no usable compiler is available."""

    @property
    def recovery_hint(self) -> str:
        """Suggest installing a compiler."""
        return "Install Rust from https://rustup.rs/ or set LOB_RUSTC"


class CompilationError(LobError):
    """Raised when the compiler rejects a generated program.

    The error carries a display-ready report, never the raw compiler
    output.

    Attributes:
        report: Styled report produced by the diagnostic translator.
    """

    def __init__(self, report: Text) -> None:
        self.report = report
        super().__init__(report.plain)


class InvalidExpressionError(LobError):
    """Raised when the command line does not describe a runnable expression."""

    pass


class ExecutionError(LobError):
    """Raised when a compiled program exits with a non-zero status.

    Attributes:
        returncode: Exit status reported for the child process. Negative
            values mean the child was terminated by that signal.
    """

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"Execution failed with status: {returncode}")

    @property
    def exit_code(self) -> int:
        """Exit status to propagate from the tool itself."""
        return self.returncode if self.returncode > 0 else 1
