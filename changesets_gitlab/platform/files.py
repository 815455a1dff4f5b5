"""Filesystem helpers.

``FileStore`` is the narrow capability used for the registry credentials file:
the publish step only ever asks whether ``~/.npmrc`` exists and, if not,
writes it once.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

__all__ = ["FileStore", "LocalFileStore", "MockFileStore", "atomic_write_text"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


@runtime_checkable
class FileStore(Protocol):
    def exists(self, path: Path) -> bool: ...

    def write(self, path: Path, content: str) -> None: ...


class LocalFileStore:
    """FileStore backed by the local filesystem."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def write(self, path: Path, content: str) -> None:
        atomic_write_text(path, content)


def _empty_files() -> dict[Path, str]:
    return {}


def _empty_writes() -> list[Path]:
    return []


@dataclass
class MockFileStore:
    """In-memory FileStore for tests.

    Attributes:
        files: Current file contents by path
        writes: Paths passed to ``write``, in call order
    """

    files: dict[Path, str] = field(default_factory=_empty_files)
    writes: list[Path] = field(default_factory=_empty_writes)

    def exists(self, path: Path) -> bool:
        return path in self.files

    def write(self, path: Path, content: str) -> None:
        self.writes.append(path)
        self.files[path] = content
