"""Toolchain adapters."""

from lob.adapters.toolchain.embedded import EmbeddedToolchain
from lob.adapters.toolchain.resolver import ToolchainResolver
from lob.adapters.toolchain.system import SystemToolchain


__all__ = ["EmbeddedToolchain", "SystemToolchain", "ToolchainResolver"]
