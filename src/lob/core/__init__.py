"""Core domain module for lob.

This module contains the domain models, port definitions and the pure
program synthesis and diagnostic translation logic. Subprocess and
filesystem work lives in the adapters.
"""

from lob.core.models import InputFormat, InputSource, OutputFormat
from lob.core.ports import CachePort, CompilerPort, ToolchainPort


__all__ = [
    "CachePort",
    "CompilerPort",
    "InputFormat",
    "InputSource",
    "OutputFormat",
    "ToolchainPort",
]
