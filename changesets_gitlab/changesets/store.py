"""Pending changeset reader.

Changesets are markdown files under ``.changeset/`` with a front matter block
naming the packages they bump:

    ---
    "@scope/pkg-a": minor
    pkg-b: patch
    ---

    Add the frobnicate option.

The release engine only needs how many are pending (and their summaries for
the merge request body). The state is read once per run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.core.structured import as_str_dict, get_str, get_str_list

__all__ = [
    "CHANGESET_DIR",
    "Changeset",
    "ChangesetError",
    "ChangesetState",
    "PreState",
    "parse_changeset",
    "read_changeset_state",
]

CHANGESET_DIR = ".changeset"

BumpType = Literal["major", "minor", "patch", "none"]
_BUMP_TYPES: frozenset[str] = frozenset({"major", "minor", "patch", "none"})


@dataclass(frozen=True, slots=True)
class ChangesetError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Changeset:
    """One pending change.

    Attributes:
        id: File name without the ``.md`` suffix
        summary: Markdown body after the front matter
        releases: (package name, bump type) pairs in file order
    """

    id: str
    summary: str
    releases: tuple[tuple[str, BumpType], ...] = ()


@dataclass(frozen=True, slots=True)
class PreState:
    """Pre-release mode from ``.changeset/pre.json``."""

    mode: Literal["pre", "exit"]
    tag: str
    changesets: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ChangesetState:
    changesets: tuple[Changeset, ...] = field(default_factory=tuple)
    pre_state: PreState | None = None

    @property
    def pending_count(self) -> int:
        return len(self.changesets)


def _unquote(s: str) -> str:
    s = s.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        return s[1:-1]
    return s


def parse_changeset(changeset_id: str, text: str) -> Result[Changeset, str]:
    """Parse the content of one changeset file.

    Returns:
        Ok(Changeset), or Err(reason) when the front matter is malformed
    """
    lines = text.replace("\r\n", "\n").split("\n")
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or lines[start].strip() != "---":
        return Err("missing front matter")

    try:
        end = next(i for i in range(start + 1, len(lines)) if lines[i].strip() == "---")
    except StopIteration:
        return Err("unterminated front matter")

    releases: list[tuple[str, BumpType]] = []
    for raw in lines[start + 1 : end]:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        name, sep, bump = line.rpartition(":")
        if not sep or not name.strip():
            return Err(f"invalid release line: {line}")
        bump = _unquote(bump)
        if bump not in _BUMP_TYPES:
            return Err(f"invalid bump type '{bump}' for {_unquote(name)}")
        releases.append((_unquote(name), bump))  # type: ignore[arg-type]

    summary = "\n".join(lines[end + 1 :]).strip()
    return Ok(Changeset(id=changeset_id, summary=summary, releases=tuple(releases)))


def _read_pre_state(path: Path) -> Result[PreState | None, ChangesetError]:
    if not path.is_file():
        return Ok(None)

    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ChangesetError(f"failed to read pre state: {e}", path=path))
    except json.JSONDecodeError as e:
        return Err(ChangesetError(f"invalid JSON in pre state: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ChangesetError("pre state must be a JSON object", path=path))

    mode = get_str(data, "mode")
    tag = get_str(data, "tag")
    if mode not in ("pre", "exit") or tag is None:
        return Err(ChangesetError("pre state needs mode (pre|exit) and tag", path=path))

    return Ok(PreState(mode=mode, tag=tag, changesets=tuple(get_str_list(data, "changesets"))))


def read_changeset_state(root: Path) -> Result[ChangesetState, ChangesetError]:
    """Read pending changesets of the repository at ``root``.

    Changesets already consumed by an active pre-release are not pending.
    A repository without ``.changeset/`` has no pending changesets.
    """
    directory = root / CHANGESET_DIR
    if not directory.is_dir():
        return Ok(ChangesetState())

    pre = _read_pre_state(directory / "pre.json")
    if isinstance(pre, Err):
        return pre
    pre_state = pre.value

    changesets: list[Changeset] = []
    for path in sorted(directory.glob("*.md")):
        if path.name.lower() == "readme.md":
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(ChangesetError(f"failed to read changeset: {e}", path=path))

        parsed = parse_changeset(path.stem, text)
        if isinstance(parsed, Err):
            return Err(ChangesetError(f"invalid changeset: {parsed.error}", path=path))
        changesets.append(parsed.value)

    if pre_state is not None and pre_state.mode == "pre":
        consumed = set(pre_state.changesets)
        changesets = [c for c in changesets if c.id not in consumed]

    return Ok(ChangesetState(changesets=tuple(changesets), pre_state=pre_state))
