"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
shared fixtures for the test suite: isolated settings, pure Python fakes
for the toolchain and compiler ports, and a helper for writing small
shell scripts that stand in for rustc and for compiled programs.
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from lob.config import Settings
from lob.core.models import ToolchainHandle, ToolchainKind


ScriptWriter = Callable[[Path, str], Path]


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, synthesis, and services")
    config.addinivalue_line("markers", "cache: Binary cache adapter")
    config.addinivalue_line("markers", "toolchain: Embedded and system toolchains")
    config.addinivalue_line("markers", "compiler: rustc invocation and artifacts")
    config.addinivalue_line("markers", "diagnostics: Compiler error translation")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests needing rustc")
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


@pytest.fixture(autouse=True)
def reset_lob_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog sees records in later tests."""
    yield
    logger = logging.getLogger("lob")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def write_script() -> ScriptWriter:
    """Write an executable ``/bin/sh`` script and return its path."""

    def _write(path: Path, body: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def empty_archive(tmp_path: Path) -> Path:
    """Zero-byte placeholder toolchain archive."""
    archive = tmp_path / "toolchain.tar.xz"
    archive.write_bytes(b"")
    return archive


@pytest.fixture
def settings(tmp_path: Path, empty_archive: Path) -> Settings:
    """Settings rooted in a temporary cache directory with no embedded toolchain."""
    return Settings.for_cache_dir(tmp_path / "cache", archive=empty_archive)


@pytest.fixture
def fake_rustc(tmp_path: Path, write_script: ScriptWriter) -> Path:
    """A stand-in rustc that logs its arguments and emits a runnable program.

    Each argument is appended to ``rustc-args.log`` next to the script, one
    per line. The program written to the ``-o`` path echoes
    ``compiled program`` followed by its own arguments.
    """
    log = tmp_path / "bin" / "rustc-args.log"
    return write_script(
        tmp_path / "bin" / "rustc",
        f"""\
if [ "$1" = "--version" ]; then
    echo "rustc 1.80.0 (fake)"
    exit 0
fi
printf '%s\\n' "$@" >> "{log}"
out=""
prev=""
for arg in "$@"; do
    if [ "$prev" = "-o" ]; then
        out="$arg"
    fi
    prev="$arg"
done
printf '#!/bin/sh\\necho compiled program "$@"\\n' > "$out"
chmod +x "$out"
""",
    )


@pytest.fixture
def failing_rustc(tmp_path: Path, write_script: ScriptWriter) -> Path:
    """A stand-in rustc that rejects every program with a resolve error."""
    return write_script(
        tmp_path / "bin" / "rustc",
        """\
if [ "$1" = "--version" ]; then
    echo "rustc 1.80.0 (fake)"
    exit 0
fi
cat >&2 <<'EOF'
error[E0425]: cannot find function `frobnicate` in this scope
 --> /tmp/lob/sources/abc.rs:4:18
  |
4 |     let result = frobnicate(stdin_data);
  |                  ^^^^^^^^^^ not found in this scope

error: aborting due to 1 previous error
EOF
exit 1
""",
    )


class FakeToolchain:
    """ToolchainPort fake that counts resolutions."""

    def __init__(self, compiler: Path | None = None) -> None:
        self.compiler = compiler or Path("/usr/bin/rustc")
        self.resolve_count = 0

    def resolve(self) -> ToolchainHandle:
        self.resolve_count += 1
        return ToolchainHandle(compiler=self.compiler, kind=ToolchainKind.SYSTEM)


class FakeCompiler:
    """CompilerPort fake that writes a shell script as the program.

    Attributes:
        calls: (source_path, output_path, expression) for each compile.
        body: Shell body of every program produced.
    """

    def __init__(self, body: str = 'echo "fake program" "$@"\n') -> None:
        self.calls: list[tuple[Path, Path, str | None]] = []
        self.body = body

    def compile(
        self,
        source_path: Path,
        output_path: Path,
        expression: str | None = None,
    ) -> None:
        self.calls.append((source_path, output_path, expression))
        output_path.write_text("#!/bin/sh\n" + self.body)
        output_path.chmod(0o755)


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    """Reusable fake toolchain resolver."""
    return FakeToolchain()


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    """Reusable fake compiler."""
    return FakeCompiler()
