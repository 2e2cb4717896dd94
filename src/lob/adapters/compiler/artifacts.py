"""Discovery of the precompiled support libraries.

Generated programs link against two prebuilt crates, ``lob_prelude`` and
``lob_core``. Their location depends on how lob was installed, so the
search walks an ordered list of candidate roots. Each root is produced by
a provider: a zero-argument callable yielding directories.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from lob.core.models import LibraryArtifacts


if TYPE_CHECKING:
    from lob.core.ports import CandidateRootProvider


logger = logging.getLogger(__name__)

PRELUDE_CRATE = "lob_prelude"
CORE_CRATE = "lob_core"
PROFILES = ("debug", "release")


def _profile_dirs(target: Path) -> Iterator[Path]:
    for profile in PROFILES:
        yield target / profile


def manifest_dir_roots() -> Iterator[Path]:
    """Build directories above ``CARGO_MANIFEST_DIR``, nearest first."""
    manifest = os.environ.get("CARGO_MANIFEST_DIR")
    if not manifest:
        return
    start = Path(manifest)
    for directory in (start, *start.parents):
        yield from _profile_dirs(directory / "target")


def executable_roots() -> Iterator[Path]:
    """Build directories relative to the running executable."""
    if not sys.argv or not sys.argv[0]:
        return
    exe_dir = Path(sys.argv[0]).resolve().parent
    if exe_dir.name == "deps":
        yield exe_dir.parent
    yield exe_dir.parent / "debug"
    yield exe_dir.parent / "release"
    yield exe_dir


def cwd_roots() -> Iterator[Path]:
    """Build directories under the working directory."""
    yield from _profile_dirs(Path.cwd() / "target")


def cwd_ancestor_roots() -> Iterator[Path]:
    """Build directories under every ancestor of the working directory."""
    for directory in Path.cwd().parents:
        yield from _profile_dirs(directory / "target")


DEFAULT_PROVIDERS: tuple[CandidateRootProvider, ...] = (
    manifest_dir_roots,
    executable_roots,
    cwd_roots,
    cwd_ancestor_roots,
)


def _newest(paths: Iterable[Path]) -> Path | None:
    newest: Path | None = None
    newest_mtime = -1.0
    for path in paths:
        try:
            mtime = path.stat().st_mtime
        except OSError:
            continue
        if mtime > newest_mtime:
            newest, newest_mtime = path, mtime
    return newest


def find_crate(root: Path, crate: str) -> Path | None:
    """Find the rlib of crate under root.

    Checks ``<root>/lib<crate>.rlib`` first, then the hash-suffixed
    ``<root>/deps/lib<crate>-*.rlib`` files cargo leaves behind, picking the
    most recently modified one.

    Args:
        root: Candidate build directory.
        crate: Crate name, e.g. ``lob_prelude``.

    Returns:
        Path to the rlib, or None if the crate is not built there.
    """
    direct = root / f"lib{crate}.rlib"
    if direct.is_file():
        return direct
    deps = root / "deps"
    if not deps.is_dir():
        return None
    return _newest(deps.glob(f"lib{crate}-*.rlib"))


def artifacts_in(root: Path) -> LibraryArtifacts | None:
    """Return the support libraries under root if both are present."""
    prelude = find_crate(root, PRELUDE_CRATE)
    if prelude is None:
        return None
    core = find_crate(root, CORE_CRATE)
    if core is None:
        return None
    return LibraryArtifacts(prelude=prelude, core=core, deps_dir=root / "deps")


def find_library_artifacts(
    providers: Sequence[CandidateRootProvider] | None = None,
) -> LibraryArtifacts | None:
    """Search the candidate roots for the support libraries.

    Args:
        providers: Candidate-root providers, searched in order. Defaults to
            DEFAULT_PROVIDERS.

    Returns:
        The artifacts from the first root holding both crates, or None.
    """
    for provider in providers if providers is not None else DEFAULT_PROVIDERS:
        for root in provider():
            found = artifacts_in(root)
            if found is not None:
                logger.debug("Support libraries found in %s", root)
                return found
    logger.debug("Support libraries not found; compiling without them")
    return None
