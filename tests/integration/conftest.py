"""Shared fixtures for integration tests.

These tests drive a real rustc. They are skipped when no compiler is on
PATH, and the prelude-dependent ones when the lob support crates have not
been built.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from lob.adapters.compiler import find_library_artifacts
from lob.config import Settings
from lob.core.models import LibraryArtifacts
from lob.core.services import Pipeline


@pytest.fixture
def system_rustc() -> Path:
    """Path of the rustc on PATH, skipping the test when there is none."""
    found = shutil.which("rustc")
    if found is None:
        pytest.skip("rustc not installed")
    return Path(found)


@pytest.fixture
def prelude_artifacts(system_rustc: Path) -> LibraryArtifacts:
    """Prebuilt lob_prelude and lob_core, skipping the test when absent."""
    artifacts = find_library_artifacts()
    if artifacts is None:
        pytest.skip("lob_prelude and lob_core have not been built")
    return artifacts


@pytest.fixture
def real_pipeline(
    tmp_path: Path, empty_archive: Path, system_rustc: Path
) -> Pipeline:
    """Pipeline with a temporary cache that compiles with the system rustc."""
    settings = Settings.for_cache_dir(
        tmp_path / "cache", archive=empty_archive, compiler_name=str(system_rustc)
    )
    return Pipeline.from_settings(settings)
