"""Publish path: registry credentials, publish script, GitLab releases."""

from __future__ import annotations

import re

from changesets_gitlab.changesets.packages import Workspace, changelog_entry
from changesets_gitlab.core.context import ReleaseContext
from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.git.repository import Repository
from changesets_gitlab.gitlab.client import GitLabClient
from changesets_gitlab.output.console import ConsoleProtocol
from changesets_gitlab.platform.files import FileStore
from changesets_gitlab.platform.process import ProcessRunner, split_command
from changesets_gitlab.release.credentials import ensure_registry_credentials
from changesets_gitlab.release.errors import PublishError
from changesets_gitlab.release.model import PublishedPackage, PublishOutcome

_NEW_TAG_MARKER = "New tag:"
# "New tag: pkg@1.0.0" or "New tag: @scope/pkg@1.0.0-beta.1"
_NEW_TAG_RE = re.compile(r"New tag:\s+(@[^/\s]+/[^@\s]+|[^/@\s]+)@(\S+)")


def parse_published_packages(
    stdout: str,
    workspace: Workspace,
) -> Result[tuple[PublishedPackage, ...], PublishError]:
    """Extract published packages from the publish script output.

    In a single-package repository the tag line carries no package name, so
    any ``New tag:`` line means the root package was published.
    """
    found: list[PublishedPackage] = []
    for line in stdout.splitlines():
        if _NEW_TAG_MARKER not in line:
            continue

        match = _NEW_TAG_RE.search(line)
        if match is not None:
            name, version = match.group(1), match.group(2)
            if not workspace.is_single_package and workspace.find(name) is None:
                return Err(
                    PublishError(
                        kind="unparsable_result",
                        message=f"published package {name} is not part of the workspace",
                        hint=line.strip(),
                    )
                )
            pkg = PublishedPackage(name=name, version=version)
        elif workspace.is_single_package and workspace.root is not None:
            pkg = PublishedPackage(name=workspace.root.name, version=workspace.root.version)
        else:
            return Err(
                PublishError(
                    kind="unparsable_result",
                    message="cannot attribute publish output to a package",
                    hint=line.strip(),
                )
            )

        if pkg not in found:
            found.append(pkg)

    return Ok(tuple(found))


def run_publish(
    ctx: ReleaseContext,
    script: str,
    *,
    workspace: Workspace,
    runner: ProcessRunner,
    files: FileStore,
    console: ConsoleProtocol,
) -> Result[PublishOutcome, PublishError]:
    """Run the publish script and report what it published.

    Registry credentials are checked first; without them the script is never
    started.
    """
    creds = ensure_registry_credentials(ctx, files, console)
    if isinstance(creds, Err):
        return creds

    argv = split_command(script)
    if isinstance(argv, Err):
        return Err(
            PublishError(
                kind="script_failed",
                message=f"cannot parse publish script: {argv.error}",
                hint=script,
            )
        )

    result = runner.run(argv.value, cwd=ctx.cwd, env=ctx.script_env())
    if isinstance(result, Err):
        e = result.error
        return Err(
            PublishError(
                kind="script_failed",
                message=f"publish script failed (exit {e.returncode})",
                hint=e.stderr.strip() or None,
                exit_code=e.returncode,
            )
        )

    packages = parse_published_packages(result.value, workspace)
    if isinstance(packages, Err):
        return packages

    return Ok(PublishOutcome(published=bool(packages.value), published_packages=packages.value))


def release_tag(pkg: PublishedPackage, workspace: Workspace) -> str:
    if workspace.is_single_package:
        return f"v{pkg.version}"
    return f"{pkg.name}@{pkg.version}"


def create_releases(
    outcome: PublishOutcome,
    *,
    workspace: Workspace,
    repo: Repository,
    client: GitLabClient,
    console: ConsoleProtocol,
) -> Result[None, PublishError]:
    """Push the tags created by the publish script and add one GitLab release each."""
    pushed = repo.push_tags()
    if isinstance(pushed, Err):
        return Err(
            PublishError(
                kind="host_api_failed",
                message="failed to push release tags",
                hint=pushed.error.message,
            )
        )

    for pkg in outcome.published_packages:
        tag = release_tag(pkg, workspace)
        description = ""
        info = workspace.find(pkg.name)
        if info is not None:
            changelog = info.dir / "CHANGELOG.md"
            try:
                text = changelog.read_text(encoding="utf-8") if changelog.is_file() else ""
            except (OSError, UnicodeDecodeError) as e:
                console.warning(f"cannot read {changelog}: {e}")
                text = ""
            description = changelog_entry(text, pkg.version) or ""

        created = client.create_release(tag_name=tag, name=tag, description=description)
        if isinstance(created, Err):
            return Err(
                PublishError(
                    kind="host_api_failed",
                    message=created.error.message,
                    hint=created.error.hint,
                )
            )
        console.success(f"release {tag}")

    return Ok(None)
