"""Toolchain resolution: embedded first, system compiler as fallback."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lob.adapters.toolchain.embedded import EmbeddedToolchain
from lob.adapters.toolchain.system import SystemToolchain
from lob.core.exceptions import ToolchainError


if TYPE_CHECKING:
    from lob.config import Settings
    from lob.core.models import ToolchainHandle


logger = logging.getLogger(__name__)


class ToolchainResolver:
    """Implements ToolchainPort over the embedded and system toolchains."""

    def __init__(self, embedded: EmbeddedToolchain, system: SystemToolchain) -> None:
        self._embedded = embedded
        self._system = system

    @classmethod
    def from_settings(cls, settings: Settings) -> ToolchainResolver:
        """Create a resolver for the configured cache and compiler name."""
        return cls(
            embedded=EmbeddedToolchain(settings.toolchain_dir, settings.archive),
            system=SystemToolchain(settings.compiler_name),
        )

    def resolve(self) -> ToolchainHandle:
        """Return the embedded toolchain if usable, else the system compiler.

        Raises:
            ToolchainError: If neither toolchain is usable. The error is the
                one raised by the system lookup.
        """
        try:
            handle = self._embedded.ensure_extracted()
        except ToolchainError as e:
            logger.info("Embedded toolchain not available: %s", e)
            logger.info("Falling back to system rustc")
        else:
            if handle.is_valid():
                logger.info("Using embedded Rust toolchain")
                return handle
            logger.info("Embedded toolchain invalid, falling back to system rustc")

        return self._system.resolve()
