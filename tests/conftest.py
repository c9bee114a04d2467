"""Shared test fixtures."""

import os
import tempfile
from pathlib import Path

import pytest

from tree_sync.models import CopyFailure, ErrorKind, SyncResult


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_tree(temp_dir):
    """Create a source tree with files, a subfolder and links."""
    source = temp_dir / "root"
    destination = temp_dir / "dest"

    source.mkdir()
    (source / "a.txt").write_text("alpha")
    (source / "sub").mkdir()
    (source / "sub" / "b.txt").write_text("bravo")
    (source / "sub" / "deeper").mkdir()
    (source / "sub" / "deeper" / "c.bin").write_bytes(bytes(range(256)))
    (source / "empty").mkdir()
    os.symlink("a.txt", source / "link")

    return source, destination


@pytest.fixture
def hardlinked_tree(temp_dir):
    """Create a source tree where two paths share one inode."""
    source = temp_dir / "root"
    destination = temp_dir / "dest"

    source.mkdir()
    (source / "sub").mkdir()
    (source / "original.txt").write_text("shared data")
    os.link(source / "original.txt", source / "sub" / "alias.txt")

    return source, destination


@pytest.fixture
def sample_failure():
    """Create a sample CopyFailure for testing."""
    return CopyFailure(
        path="/src/broken.txt",
        kind=ErrorKind.IO_FAILURE,
        error="Permission denied"
    )


@pytest.fixture
def sample_result(sample_failure):
    """Create a SyncResult with one failure."""
    return SyncResult(
        source="/src",
        destination="/dst",
        directories=2,
        files=3,
        symlinks=1,
        hardlinks=0,
        skipped=0,
        failures=[sample_failure]
    )
