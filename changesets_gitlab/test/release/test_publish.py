"""Tests for release/publish.py."""

from __future__ import annotations

from pathlib import Path

from changesets_gitlab.changesets.packages import PackageInfo, Workspace
from changesets_gitlab.core.context import ReleaseContext
from changesets_gitlab.core.result import Err, Ok
from changesets_gitlab.git.repository import Repository
from changesets_gitlab.gitlab.client import HostError, MockGitLabClient
from changesets_gitlab.output.console import MockConsole
from changesets_gitlab.platform.files import MockFileStore
from changesets_gitlab.platform.process import MockProcessRunner
from changesets_gitlab.release.model import PublishedPackage, PublishOutcome
from changesets_gitlab.release.publish import (
    create_releases,
    parse_published_packages,
    release_tag,
    run_publish,
)


def _monorepo(root: Path) -> Workspace:
    return Workspace(
        root=None,
        packages=(
            PackageInfo(name="@scope/pkg-a", version="1.1.0", dir=root / "packages" / "a"),
            PackageInfo(name="pkg-b", version="0.4.0", dir=root / "packages" / "b"),
        ),
    )


def _single(root: Path) -> Workspace:
    return Workspace(root=PackageInfo(name="solo", version="2.0.0", dir=root))


def _ctx(tmp_path: Path, **overrides: object) -> ReleaseContext:
    values: dict[str, object] = {
        "cwd": tmp_path,
        "gitlab_token": "T",
        "home": tmp_path / "home",
        "npm_token": "N",
    }
    values.update(overrides)
    return ReleaseContext(**values)  # type: ignore[arg-type]


PKG_B_OUTCOME = PublishOutcome(
    published=True, published_packages=(PublishedPackage(name="pkg-b", version="0.4.0"),)
)

PUBLISH_OUTPUT = """\
🦋  info npm info @scope/pkg-a
🦋  success packages published successfully:
🦋  @scope/pkg-a@1.1.0
🦋  pkg-b@0.4.0
🦋  Creating git tags...
🦋  New tag:  @scope/pkg-a@1.1.0
🦋  New tag:  pkg-b@0.4.0
"""


class TestParsePublishedPackages:
    def test_monorepo(self, tmp_path: Path) -> None:
        result = parse_published_packages(PUBLISH_OUTPUT, _monorepo(tmp_path))

        assert result == Ok(
            (
                PublishedPackage(name="@scope/pkg-a", version="1.1.0"),
                PublishedPackage(name="pkg-b", version="0.4.0"),
            )
        )

    def test_nothing_published(self, tmp_path: Path) -> None:
        output = "🦋  warn No unpublished projects to publish\n"

        assert parse_published_packages(output, _monorepo(tmp_path)) == Ok(())

    def test_duplicate_lines_are_collapsed(self, tmp_path: Path) -> None:
        output = "New tag: pkg-b@0.4.0\nNew tag: pkg-b@0.4.0\n"

        result = parse_published_packages(output, _monorepo(tmp_path))

        assert result == Ok((PublishedPackage(name="pkg-b", version="0.4.0"),))

    def test_unknown_package_in_monorepo(self, tmp_path: Path) -> None:
        result = parse_published_packages("New tag: other@1.0.0\n", _monorepo(tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "unparsable_result"

    def test_single_package_bare_tag(self, tmp_path: Path) -> None:
        result = parse_published_packages("🦋  New tag:  v2.0.0\n", _single(tmp_path))

        assert result == Ok((PublishedPackage(name="solo", version="2.0.0"),))

    def test_monorepo_bare_tag_is_unparsable(self, tmp_path: Path) -> None:
        result = parse_published_packages("New tag: v2.0.0\n", _monorepo(tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "unparsable_result"


class TestRunPublish:
    def test_runs_script_with_token(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.set(["pnpm", "release"], PUBLISH_OUTPUT)
        files = MockFileStore()

        result = run_publish(
            _ctx(tmp_path),
            "pnpm release",
            workspace=_monorepo(tmp_path),
            runner=runner,
            files=files,
            console=MockConsole(),
        )

        assert isinstance(result, Ok)
        assert result.value.published is True
        assert len(result.value.published_packages) == 2
        assert runner.calls[0].env == {"GITLAB_TOKEN": "T"}
        assert files.writes == [tmp_path / "home" / ".npmrc"]

    def test_missing_credentials_never_runs_script(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()

        result = run_publish(
            _ctx(tmp_path, npm_token=None),
            "pnpm release",
            workspace=_monorepo(tmp_path),
            runner=runner,
            files=MockFileStore(),
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.kind == "missing_credentials"
        assert runner.calls == []

    def test_script_failure(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.fail(["pnpm", "release"], returncode=3, stderr="E403 forbidden")

        result = run_publish(
            _ctx(tmp_path),
            "pnpm release",
            workspace=_monorepo(tmp_path),
            runner=runner,
            files=MockFileStore(),
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.kind == "script_failed"
        assert result.error.exit_code == 3
        assert result.error.hint == "E403 forbidden"

    def test_unparsable_script(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()

        result = run_publish(
            _ctx(tmp_path),
            "pnpm 'release",
            workspace=_monorepo(tmp_path),
            runner=runner,
            files=MockFileStore(),
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.kind == "script_failed"
        assert runner.calls == []

    def test_nothing_published(self, tmp_path: Path) -> None:
        result = run_publish(
            _ctx(tmp_path),
            "pnpm release",
            workspace=_monorepo(tmp_path),
            runner=MockProcessRunner(),
            files=MockFileStore(),
            console=MockConsole(),
        )

        assert result == Ok(PublishOutcome())


def test_release_tag(tmp_path: Path) -> None:
    pkg = PublishedPackage(name="solo", version="2.0.0")

    assert release_tag(pkg, _single(tmp_path)) == "v2.0.0"
    assert release_tag(pkg, _monorepo(tmp_path)) == "solo@2.0.0"


class TestCreateReleases:
    def test_pushes_tags_and_creates_releases(self, tmp_path: Path) -> None:
        workspace = _monorepo(tmp_path)
        pkg_dir = tmp_path / "packages" / "a"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "CHANGELOG.md").write_text(
            "# @scope/pkg-a\n\n## 1.1.0\n\n- Add frobnicate.\n\n## 1.0.0\n\n- Initial.\n",
            encoding="utf-8",
        )
        runner = MockProcessRunner()
        client = MockGitLabClient()
        outcome = PublishOutcome(
            published=True,
            published_packages=(
                PublishedPackage(name="@scope/pkg-a", version="1.1.0"),
                PublishedPackage(name="pkg-b", version="0.4.0"),
            ),
        )

        result = create_releases(
            outcome,
            workspace=workspace,
            repo=Repository(tmp_path, runner),
            client=client,
            console=MockConsole(),
        )

        assert result == Ok(None)
        assert runner.commands == [("git", "push", "origin", "--tags")]
        assert [r.tag_name for r in client.releases] == ["@scope/pkg-a@1.1.0", "pkg-b@0.4.0"]
        assert client.releases[0].description == "- Add frobnicate."
        assert client.releases[1].description == ""

    def test_tag_push_failure(self, tmp_path: Path) -> None:
        runner = MockProcessRunner()
        runner.fail(["git", "push"], stderr="denied")
        client = MockGitLabClient()

        result = create_releases(
            PKG_B_OUTCOME,
            workspace=_monorepo(tmp_path),
            repo=Repository(tmp_path, runner),
            client=client,
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.kind == "host_api_failed"
        assert client.releases == []

    def test_release_api_failure(self, tmp_path: Path) -> None:
        client = MockGitLabClient(release_error=HostError("failed to create release", "HTTP 409"))

        result = create_releases(
            PKG_B_OUTCOME,
            workspace=_monorepo(tmp_path),
            repo=Repository(tmp_path, MockProcessRunner()),
            client=client,
            console=MockConsole(),
        )

        assert isinstance(result, Err)
        assert result.error.kind == "host_api_failed"
        assert result.error.hint == "HTTP 409"
