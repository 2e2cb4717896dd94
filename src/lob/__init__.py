"""lob - Run Rust data pipeline one-liners.

An expression such as ``_.filter(|x| x.len() > 3).count()`` is wrapped in
a complete Rust program, compiled once and cached by the hash of the
generated source, then executed over standard input or a list of files.

Example:
    >>> from lob import InputSource, OutputFormat, Pipeline, Settings
    >>> pipeline = Pipeline.from_settings(Settings.from_env())
    >>> source = pipeline.generate("_.count()", InputSource(), OutputFormat.DEBUG)
    >>> result = pipeline.compile(source)  # Compiles only on a cache miss
"""

from lob.adapters.cache import BinaryCache
from lob.adapters.compiler import RustcCompiler, find_library_artifacts
from lob.adapters.toolchain import (
    EmbeddedToolchain,
    SystemToolchain,
    ToolchainResolver,
)
from lob.config import Settings
from lob.core.diagnostics import format_compilation_error, get_suggestion
from lob.core.exceptions import (
    CacheError,
    CompilationError,
    ExecutionError,
    InvalidExpressionError,
    LobError,
    LobIOError,
    ToolchainError,
)
from lob.core.models import (
    CacheStats,
    CompileResult,
    InputFormat,
    InputSource,
    OutputFormat,
    RunReport,
    ToolchainHandle,
)
from lob.core.ports import CachePort, CompilerPort, ToolchainPort
from lob.core.services import Pipeline
from lob.core.synthesis import synthesize


__version__ = "0.3.0"

__all__ = [
    "BinaryCache",
    "CacheError",
    "CachePort",
    "CacheStats",
    "CompilationError",
    "CompileResult",
    "CompilerPort",
    "EmbeddedToolchain",
    "ExecutionError",
    "InputFormat",
    "InputSource",
    "InvalidExpressionError",
    "LobError",
    "LobIOError",
    "OutputFormat",
    "Pipeline",
    "RunReport",
    "RustcCompiler",
    "Settings",
    "SystemToolchain",
    "ToolchainError",
    "ToolchainHandle",
    "ToolchainPort",
    "ToolchainResolver",
    "__version__",
    "find_library_artifacts",
    "format_compilation_error",
    "get_suggestion",
    "synthesize",
]
