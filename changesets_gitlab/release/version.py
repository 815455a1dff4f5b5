"""Version path: bump on a release branch and open the merge request."""

from __future__ import annotations

from changesets_gitlab.changesets.store import ChangesetState
from changesets_gitlab.core.context import ReleaseContext
from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.git.repository import GitError, Repository
from changesets_gitlab.gitlab.client import GitLabClient
from changesets_gitlab.output.console import ConsoleProtocol
from changesets_gitlab.platform.process import ProcessRunner, split_command
from changesets_gitlab.release.errors import VersionError
from changesets_gitlab.release.model import (
    DEFAULT_COMMIT_MESSAGE,
    DEFAULT_MR_TITLE,
    DEFAULT_VERSION_SCRIPT,
    RELEASE_BRANCH_PREFIX,
    Version,
)


def _git_error(error: GitError) -> VersionError:
    return VersionError(
        kind="git_failed",
        message=f"git {error.command} failed",
        hint=error.message,
    )


def _with_pre_tag(text: str, state: ChangesetState) -> str:
    pre = state.pre_state
    if pre is not None and pre.mode == "pre":
        return f"{text} ({pre.tag})"
    return text


def build_mr_body(state: ChangesetState, *, target_branch: str, has_publish_script: bool) -> str:
    if has_publish_script:
        publish_text = "the packages will be published to npm automatically"
    else:
        publish_text = (
            "publish to npm yourself or configure a `publish` script to do it automatically"
        )

    parts = [
        "This MR was opened by the changesets-gitlab CI job. When you're ready to do a "
        f"release, you can merge this and {publish_text}. If you're not ready to do a release "
        f"yet, that's fine, whenever you add more changesets to `{target_branch}`, this MR will "
        "be updated.",
    ]

    pre = state.pre_state
    if pre is not None and pre.mode == "pre":
        parts.append(
            f"`{target_branch}` is currently in **pre mode** so this branch has prereleases "
            "rather than normal releases. If you want to exit prereleases, run "
            f"`changeset pre exit` on `{target_branch}`."
        )

    lines = ["# Changes", ""]
    for changeset in state.changesets:
        packages = ", ".join(f"`{name}` ({bump})" for name, bump in changeset.releases)
        summary = changeset.summary.splitlines()[0] if changeset.summary else changeset.id
        lines.append(f"- {packages}: {summary}" if packages else f"- {summary}")
    parts.append("\n".join(lines))

    return "\n\n".join(parts) + "\n"


def run_version(
    ctx: ReleaseContext,
    action: Version,
    state: ChangesetState,
    *,
    repo: Repository,
    runner: ProcessRunner,
    client: GitLabClient,
    console: ConsoleProtocol,
) -> Result[str, VersionError]:
    """Bump versions on ``changeset-release/<target>`` and open its merge request.

    Returns:
        Ok(merge request URL) or Err(VersionError)
    """
    target = action.mr_target_branch or ctx.ref_name or repo.current_branch()
    if target is None:
        return Err(
            VersionError(
                kind="git_failed",
                message="cannot determine the merge request target branch",
                hint="Set the target_branch input or run on a branch pipeline.",
            )
        )
    release_branch = f"{RELEASE_BRANCH_PREFIX}{target}"

    switched = repo.checkout_branch(release_branch).map_err(_git_error)
    if isinstance(switched, Err):
        return switched

    script = action.script or DEFAULT_VERSION_SCRIPT
    argv = split_command(script)
    if isinstance(argv, Err):
        return Err(
            VersionError(
                kind="script_failed",
                message=f"cannot parse version script: {argv.error}",
                hint=script,
            )
        )

    bumped = runner.run(argv.value, cwd=ctx.cwd, env=ctx.script_env())
    if isinstance(bumped, Err):
        e = bumped.error
        return Err(
            VersionError(
                kind="script_failed",
                message=f"version script failed (exit {e.returncode})",
                hint=e.stderr.strip() or None,
            )
        )

    changed = repo.has_changes().map_err(_git_error)
    if isinstance(changed, Err):
        return changed

    if changed.value:
        commit_message = _with_pre_tag(action.commit_message or DEFAULT_COMMIT_MESSAGE, state)
        committed = repo.commit_all(commit_message).map_err(_git_error)
        if isinstance(committed, Err):
            return committed
    else:
        console.print("version script left the tree clean, nothing to commit")

    pushed = repo.force_push(release_branch).map_err(_git_error)
    if isinstance(pushed, Err):
        return pushed

    title = _with_pre_tag(action.mr_title or DEFAULT_MR_TITLE, state)
    body = build_mr_body(
        state,
        target_branch=target,
        has_publish_script=action.has_publish_script,
    )
    opened = client.open_merge_request(
        title=title,
        source_branch=release_branch,
        target_branch=target,
        body=body,
    )
    if isinstance(opened, Err):
        return Err(
            VersionError(
                kind="host_api_failed",
                message=opened.error.message,
                hint=opened.error.hint,
            )
        )

    console.success(f"merge request: {opened.value}")
    return Ok(opened.value)
