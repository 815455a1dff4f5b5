"""Tests for changesets/store.py."""

from __future__ import annotations

import json
from pathlib import Path

from changesets_gitlab.changesets.store import (
    Changeset,
    ChangesetState,
    parse_changeset,
    read_changeset_state,
)
from changesets_gitlab.core.result import Err, Ok


def _write_changeset(root: Path, name: str, text: str) -> None:
    directory = root / ".changeset"
    directory.mkdir(exist_ok=True)
    (directory / f"{name}.md").write_text(text, encoding="utf-8")


CHANGESET = '---\n"@scope/pkg-a": minor\npkg-b: patch\n---\n\nAdd the frobnicate option.\n'


class TestParseChangeset:
    def test_parses_releases_and_summary(self) -> None:
        result = parse_changeset("brave-owls", CHANGESET)

        assert result == Ok(
            Changeset(
                id="brave-owls",
                summary="Add the frobnicate option.",
                releases=(("@scope/pkg-a", "minor"), ("pkg-b", "patch")),
            )
        )

    def test_empty_front_matter(self) -> None:
        result = parse_changeset("empty", "---\n---\n")

        assert isinstance(result, Ok)
        assert result.value.releases == ()
        assert result.value.summary == ""

    def test_missing_front_matter(self) -> None:
        assert parse_changeset("x", "just text") == Err("missing front matter")

    def test_unterminated_front_matter(self) -> None:
        assert parse_changeset("x", "---\npkg: patch\n") == Err("unterminated front matter")

    def test_invalid_bump(self) -> None:
        result = parse_changeset("x", "---\npkg: huge\n---\n")

        assert isinstance(result, Err)
        assert "huge" in result.error


class TestReadChangesetState:
    def test_no_changeset_directory(self, tmp_path: Path) -> None:
        assert read_changeset_state(tmp_path) == Ok(ChangesetState())

    def test_counts_pending_and_skips_readme(self, tmp_path: Path) -> None:
        _write_changeset(tmp_path, "README", "# Changesets\n")
        _write_changeset(tmp_path, "brave-owls", CHANGESET)
        _write_changeset(tmp_path, "calm-cats", "---\npkg-b: major\n---\n\nDrop node 16.\n")
        (tmp_path / ".changeset" / "config.json").write_text("{}", encoding="utf-8")

        result = read_changeset_state(tmp_path)

        assert isinstance(result, Ok)
        assert result.value.pending_count == 2
        assert [c.id for c in result.value.changesets] == ["brave-owls", "calm-cats"]
        assert result.value.pre_state is None

    def test_invalid_changeset_reports_path(self, tmp_path: Path) -> None:
        _write_changeset(tmp_path, "broken", "no front matter")

        result = read_changeset_state(tmp_path)

        assert isinstance(result, Err)
        assert result.error.path == tmp_path / ".changeset" / "broken.md"

    def test_pre_mode_skips_consumed_changesets(self, tmp_path: Path) -> None:
        _write_changeset(tmp_path, "brave-owls", CHANGESET)
        _write_changeset(tmp_path, "calm-cats", CHANGESET)
        (tmp_path / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "pre", "tag": "beta", "changesets": ["brave-owls"]}),
            encoding="utf-8",
        )

        result = read_changeset_state(tmp_path)

        assert isinstance(result, Ok)
        assert [c.id for c in result.value.changesets] == ["calm-cats"]
        assert result.value.pre_state is not None
        assert result.value.pre_state.tag == "beta"

    def test_exit_mode_keeps_all(self, tmp_path: Path) -> None:
        _write_changeset(tmp_path, "brave-owls", CHANGESET)
        (tmp_path / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "exit", "tag": "beta", "changesets": ["brave-owls"]}),
            encoding="utf-8",
        )

        result = read_changeset_state(tmp_path)

        assert isinstance(result, Ok)
        assert result.value.pending_count == 1

    def test_invalid_pre_state(self, tmp_path: Path) -> None:
        (tmp_path / ".changeset").mkdir()
        (tmp_path / ".changeset" / "pre.json").write_text("{", encoding="utf-8")

        result = read_changeset_state(tmp_path)

        assert isinstance(result, Err)
        assert "invalid JSON" in result.error.message
