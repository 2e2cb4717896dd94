"""Compiler adapters."""

from lob.adapters.compiler.artifacts import find_library_artifacts
from lob.adapters.compiler.rustc import RustcCompiler


__all__ = ["RustcCompiler", "find_library_artifacts"]
