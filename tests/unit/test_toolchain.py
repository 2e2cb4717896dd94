"""Unit tests for the embedded and system toolchains and their resolver."""

from __future__ import annotations

import logging
import os
import sys
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

from lob.config import Settings


ScriptWriter = Callable[[Path, str], Path]

posix_only = pytest.mark.skipif(
    sys.platform == "win32", reason="uses POSIX shell scripts as executables"
)


def make_archive(tmp_path: Path, write_script: ScriptWriter) -> Path:
    """Build a small xz-compressed toolchain archive with bin/rustc and lib/."""
    payload = tmp_path / "payload"
    write_script(payload / "bin" / "rustc", 'echo "rustc 1.80.0 (embedded)"\n')
    (payload / "lib" / "rustlib").mkdir(parents=True)
    (payload / "lib" / "rustlib" / "marker.txt").write_text("std")

    archive = tmp_path / "embedded.tar.xz"
    with tarfile.open(archive, "w:xz") as tar:
        tar.add(payload / "bin", arcname="bin")
        tar.add(payload / "lib", arcname="lib")
    return archive


@pytest.mark.toolchain
@pytest.mark.tier(1)
@posix_only
class TestEmbeddedToolchain:
    """Tests for EmbeddedToolchain.ensure_extracted()."""

    def test_empty_archive_is_unavailable(
        self, tmp_path: Path, empty_archive: Path
    ) -> None:
        """A zero-byte placeholder means no toolchain was bundled."""
        from lob.adapters.toolchain import EmbeddedToolchain
        from lob.core.exceptions import ToolchainError

        embedded = EmbeddedToolchain(tmp_path / "toolchain", empty_archive)

        with pytest.raises(ToolchainError, match="No embedded toolchain available"):
            embedded.ensure_extracted()
        assert not (tmp_path / "toolchain").exists()

    def test_missing_archive_is_unavailable(self, tmp_path: Path) -> None:
        """An absent archive is treated like an empty one."""
        from lob.adapters.toolchain import EmbeddedToolchain
        from lob.core.exceptions import ToolchainError

        embedded = EmbeddedToolchain(tmp_path / "toolchain", tmp_path / "nope.tar.xz")

        with pytest.raises(ToolchainError, match="No embedded toolchain available"):
            embedded.ensure_extracted()

    def test_extracts_on_first_use(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        """The archive is unpacked and the compiler made executable."""
        from lob.adapters.toolchain import EmbeddedToolchain
        from lob.core.models import ToolchainKind

        archive = make_archive(tmp_path, write_script)
        toolchain_dir = tmp_path / "cache" / "toolchain"

        handle = EmbeddedToolchain(toolchain_dir, archive).ensure_extracted()

        assert handle.kind is ToolchainKind.EMBEDDED
        assert handle.compiler == toolchain_dir / "bin" / "rustc"
        assert handle.sysroot == toolchain_dir
        assert handle.is_valid()
        assert os.access(handle.compiler, os.X_OK)
        assert (toolchain_dir / "lib" / "rustlib" / "marker.txt").read_text() == "std"

    def test_extraction_leaves_no_staging_dirs(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        """Only the final toolchain directory remains next to it."""
        from lob.adapters.toolchain import EmbeddedToolchain

        archive = make_archive(tmp_path, write_script)
        cache = tmp_path / "cache"

        EmbeddedToolchain(cache / "toolchain", archive).ensure_extracted()

        assert [p.name for p in cache.iterdir()] == ["toolchain"]

    def test_reuses_existing_extraction(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        """A complete extraction is not redone."""
        from lob.adapters.toolchain import EmbeddedToolchain

        archive = make_archive(tmp_path, write_script)
        embedded = EmbeddedToolchain(tmp_path / "toolchain", archive)
        embedded.ensure_extracted()
        archive.unlink()

        handle = embedded.ensure_extracted()

        assert handle.is_valid()

    def test_incomplete_directory_is_extracted_again(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        """A directory without the compiler is replaced by a fresh extraction."""
        from lob.adapters.toolchain import EmbeddedToolchain

        archive = make_archive(tmp_path, write_script)
        toolchain_dir = tmp_path / "toolchain"
        (toolchain_dir / "lib").mkdir(parents=True)
        (toolchain_dir / "lib" / "leftover").write_text("partial")

        handle = EmbeddedToolchain(toolchain_dir, archive).ensure_extracted()

        assert handle.is_valid()
        assert not (toolchain_dir / "lib" / "leftover").exists()

    def test_corrupt_archive_raises(self, tmp_path: Path) -> None:
        """Unreadable archives surface as ToolchainError and leave nothing behind."""
        from lob.adapters.toolchain import EmbeddedToolchain
        from lob.core.exceptions import ToolchainError

        archive = tmp_path / "broken.tar.xz"
        archive.write_bytes(b"definitely not a tarball")
        cache = tmp_path / "cache"

        with pytest.raises(ToolchainError, match="Failed to extract toolchain"):
            EmbeddedToolchain(cache / "toolchain", archive).ensure_extracted()
        assert list(cache.iterdir()) == []

    def test_first_run_notice_is_logged(
        self,
        tmp_path: Path,
        write_script: ScriptWriter,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Extraction announces itself at WARNING level."""
        from lob.adapters.toolchain import EmbeddedToolchain

        archive = make_archive(tmp_path, write_script)
        caplog.set_level(logging.WARNING, logger="lob")

        EmbeddedToolchain(tmp_path / "toolchain", archive).ensure_extracted()

        assert "First run: extracting embedded Rust toolchain..." in caplog.messages


@pytest.mark.toolchain
@pytest.mark.tier(1)
@posix_only
class TestSystemToolchain:
    """Tests for SystemToolchain.resolve()."""

    def test_missing_compiler(self, tmp_path: Path) -> None:
        """A name that is not on PATH is reported with install guidance."""
        from lob.adapters.toolchain import SystemToolchain
        from lob.core.exceptions import ToolchainError

        system = SystemToolchain(str(tmp_path / "no-such-rustc"))

        with pytest.raises(ToolchainError, match="https://rustup.rs/"):
            system.resolve()

    def test_working_compiler(self, fake_rustc: Path) -> None:
        """A compiler whose version probe succeeds is returned as SYSTEM."""
        from lob.adapters.toolchain import SystemToolchain
        from lob.core.models import ToolchainKind

        handle = SystemToolchain(str(fake_rustc)).resolve()

        assert handle.kind is ToolchainKind.SYSTEM
        assert handle.compiler == fake_rustc
        assert handle.sysroot is None

    def test_found_on_path(
        self, fake_rustc: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A bare name is looked up on PATH."""
        from lob.adapters.toolchain import SystemToolchain

        monkeypatch.setenv("PATH", str(fake_rustc.parent))

        assert SystemToolchain("rustc").resolve().compiler == fake_rustc

    def test_broken_compiler(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        """A failing version probe is reported as not working."""
        from lob.adapters.toolchain import SystemToolchain
        from lob.core.exceptions import ToolchainError

        broken = write_script(tmp_path / "rustc", "exit 1\n")

        with pytest.raises(ToolchainError, match="not working properly"):
            SystemToolchain(str(broken)).resolve()

    def test_undecodable_version_output(
        self, tmp_path: Path, write_script: ScriptWriter
    ) -> None:
        """Version output that is not valid UTF-8 is still accepted."""
        from lob.adapters.toolchain import SystemToolchain
        from lob.core.models import ToolchainKind

        rustc = write_script(tmp_path / "rustc", "printf 'rustc 1.80.0 \\377\\n'\n")

        assert SystemToolchain(str(rustc)).resolve().kind is ToolchainKind.SYSTEM


@pytest.mark.toolchain
@pytest.mark.tier(1)
@posix_only
class TestToolchainResolver:
    """Tests for ToolchainResolver.resolve()."""

    def test_prefers_embedded(self, tmp_path: Path, write_script: ScriptWriter) -> None:
        """A usable embedded toolchain wins over the system compiler."""
        from lob.adapters.toolchain import (
            EmbeddedToolchain,
            SystemToolchain,
            ToolchainResolver,
        )
        from lob.core.models import ToolchainKind

        archive = make_archive(tmp_path, write_script)
        resolver = ToolchainResolver(
            EmbeddedToolchain(tmp_path / "toolchain", archive),
            SystemToolchain(str(tmp_path / "no-such-rustc")),
        )

        handle = resolver.resolve()

        assert handle.kind is ToolchainKind.EMBEDDED
        assert handle.sysroot == tmp_path / "toolchain"

    def test_falls_back_to_system(
        self,
        tmp_path: Path,
        empty_archive: Path,
        fake_rustc: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """An empty embedded archive falls back to the system compiler."""
        from lob.adapters.toolchain import (
            EmbeddedToolchain,
            SystemToolchain,
            ToolchainResolver,
        )
        from lob.core.models import ToolchainKind

        caplog.set_level(logging.INFO, logger="lob")
        resolver = ToolchainResolver(
            EmbeddedToolchain(tmp_path / "toolchain", empty_archive),
            SystemToolchain(str(fake_rustc)),
        )

        handle = resolver.resolve()

        assert handle.kind is ToolchainKind.SYSTEM
        assert handle.compiler == fake_rustc
        assert "Falling back to system rustc" in caplog.messages

    def test_no_toolchain_at_all(self, tmp_path: Path, empty_archive: Path) -> None:
        """With neither toolchain usable, the system error is raised."""
        from lob.adapters.toolchain import (
            EmbeddedToolchain,
            SystemToolchain,
            ToolchainResolver,
        )
        from lob.core.exceptions import ToolchainError

        resolver = ToolchainResolver(
            EmbeddedToolchain(tmp_path / "toolchain", empty_archive),
            SystemToolchain(str(tmp_path / "no-such-rustc")),
        )

        with pytest.raises(ToolchainError, match="not found"):
            resolver.resolve()

    def test_from_settings_uses_configured_locations(
        self, settings: Settings, fake_rustc: Path
    ) -> None:
        """from_settings wires the cache's toolchain dir and compiler name."""
        from dataclasses import replace

        from lob.adapters.toolchain import ToolchainResolver

        resolver = ToolchainResolver.from_settings(
            replace(settings, compiler_name=str(fake_rustc))
        )

        assert resolver.resolve().compiler == fake_rustc
        assert not settings.toolchain_dir.exists()
