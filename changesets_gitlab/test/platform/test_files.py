"""Tests for changesets_gitlab.platform.files module."""

from __future__ import annotations

from pathlib import Path

from changesets_gitlab.platform.files import (
    FileStore,
    LocalFileStore,
    MockFileStore,
    atomic_write_text,
)


def test_atomic_write_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / ".npmrc"

    atomic_write_text(target, "//registry.npmjs.org/:_authToken=abc")

    assert target.read_text(encoding="utf-8") == "//registry.npmjs.org/:_authToken=abc"
    assert [p.name for p in target.parent.iterdir()] == [".npmrc"]


def test_local_file_store(tmp_path: Path) -> None:
    store = LocalFileStore()
    target = tmp_path / ".npmrc"

    assert isinstance(store, FileStore)
    assert store.exists(target) is False
    store.write(target, "content")
    assert store.exists(target) is True


def test_mock_file_store_records_writes() -> None:
    store = MockFileStore(files={Path("/home/ci/.profile"): ""})

    assert isinstance(store, FileStore)
    assert store.exists(Path("/home/ci/.profile"))
    store.write(Path("/home/ci/.npmrc"), "x")
    assert store.writes == [Path("/home/ci/.npmrc")]
    assert store.files[Path("/home/ci/.npmrc")] == "x"
