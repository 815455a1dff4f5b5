"""Release decision and orchestration.

One run:
1. inject GitLab credentials (CI only)
2. read pending changesets
3. classify into NoOp / Publish / Version and run the matching path
4. write the job outputs, exactly once, whatever happened above
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from changesets_gitlab.changesets.packages import Workspace, read_workspace
from changesets_gitlab.changesets.store import (
    ChangesetError,
    ChangesetState,
    read_changeset_state,
)
from changesets_gitlab.core.context import ContextError, ReleaseContext
from changesets_gitlab.core.result import Err, Result
from changesets_gitlab.git.repository import Repository
from changesets_gitlab.gitlab.client import GitLabClient
from changesets_gitlab.output.console import ConsoleProtocol
from changesets_gitlab.output.outputs import OutputSink
from changesets_gitlab.platform.files import FileStore
from changesets_gitlab.platform.process import ProcessRunner
from changesets_gitlab.release.classifier import classify
from changesets_gitlab.release.credentials import inject_credentials
from changesets_gitlab.release.errors import PublishError, VersionError
from changesets_gitlab.release.hooks import log_hook_result, run_hook
from changesets_gitlab.release.model import NoOp, Publish, RunResult, Version
from changesets_gitlab.release.publish import create_releases, run_publish
from changesets_gitlab.release.reporter import report
from changesets_gitlab.release.version import run_version

__all__ = ["ReleaseServices", "run_release"]

_MISSING_CLIENT_HINT = "Set GITLAB_TOKEN and CI_PROJECT_PATH."


@dataclass(frozen=True, slots=True)
class ReleaseServices:
    """Collaborators of a run.

    Attributes:
        client: GitLab client, None when no token/project is configured
        read_state: Changeset reader
        read_packages: Workspace package reader
    """

    console: ConsoleProtocol
    runner: ProcessRunner
    files: FileStore
    outputs: OutputSink
    client: GitLabClient | None
    read_state: Callable[[Path], Result[ChangesetState, ChangesetError]] = read_changeset_state
    read_packages: Callable[[Path], Result[Workspace, str]] = read_workspace


def run_release(ctx: ReleaseContext, services: ReleaseServices) -> RunResult:
    """Run one release decision.

    Outputs are written once at the end: the defaults unless a publish was
    confirmed, even when a later step failed or raised.
    """
    services.console.mask(ctx.gitlab_token)
    services.console.mask(ctx.npm_token)

    try:
        result = _run(ctx, services)
    except Exception:
        report(services.outputs, None)
        raise
    report(services.outputs, result.outcome)
    return result


def _run(ctx: ReleaseContext, services: ReleaseServices) -> RunResult:
    console = services.console
    repo = Repository(ctx.cwd, services.runner)

    if ctx.ci:
        injected = inject_credentials(ctx, repo, console)
        if isinstance(injected, Err):
            return RunResult(action=None, error=injected.error)

    state = services.read_state(ctx.cwd)
    if isinstance(state, Err):
        return RunResult(action=None, error=state.error)

    action = classify(state.value.pending_count, ctx.inputs.publish, ctx.inputs)
    match action:
        case NoOp():
            console.print("No changesets found")
            return RunResult(action=action)
        case Publish():
            return _publish(ctx, action, repo, services)
        case Version():
            return _version(ctx, action, state.value, repo, services)


def _publish(
    ctx: ReleaseContext,
    action: Publish,
    repo: Repository,
    services: ReleaseServices,
) -> RunResult:
    console = services.console
    console.print("No changesets found, attempting to publish any unpublished packages to npm")

    workspace = services.read_packages(ctx.cwd)
    if isinstance(workspace, Err):
        return RunResult(action=action, error=ContextError(workspace.error))

    published = run_publish(
        ctx,
        action.script,
        workspace=workspace.value,
        runner=services.runner,
        files=services.files,
        console=console,
    )
    if isinstance(published, Err):
        return RunResult(action=action, error=published.error)

    outcome = published.value
    if not outcome.published:
        console.info("No packages were published")
        return RunResult(action=action, outcome=outcome)

    names = ", ".join(f"{p.name}@{p.version}" for p in outcome.published_packages)
    console.success(f"published {names}")

    if ctx.inputs.create_gitlab_releases:
        if services.client is None:
            error = PublishError(
                kind="host_api_failed",
                message="cannot create GitLab releases without API access",
                hint=_MISSING_CLIENT_HINT,
            )
            return RunResult(action=action, outcome=outcome, error=error)

        released = create_releases(
            outcome,
            workspace=workspace.value,
            repo=repo,
            client=services.client,
            console=console,
        )
        if isinstance(released, Err):
            return RunResult(action=action, outcome=outcome, error=released.error)

    if ctx.inputs.published:
        hook = run_hook(
            ctx.inputs.published,
            cwd=ctx.cwd,
            runner=services.runner,
            env=ctx.script_env(),
        )
        log_hook_result("published", hook, console)

    return RunResult(action=action, outcome=outcome)


def _version(
    ctx: ReleaseContext,
    action: Version,
    state: ChangesetState,
    repo: Repository,
    services: ReleaseServices,
) -> RunResult:
    console = services.console
    console.print(
        f"{state.pending_count} pending changeset(s), preparing the version merge request"
    )

    if services.client is None:
        error = VersionError(
            kind="host_api_failed",
            message="cannot open the merge request without API access",
            hint=_MISSING_CLIENT_HINT,
        )
        return RunResult(action=action, error=error)

    opened = run_version(
        ctx,
        action,
        state,
        repo=repo,
        runner=services.runner,
        client=services.client,
        console=console,
    )
    if isinstance(opened, Err):
        return RunResult(action=action, error=opened.error)

    if ctx.inputs.only_changesets:
        hook = run_hook(
            ctx.inputs.only_changesets,
            cwd=ctx.cwd,
            runner=services.runner,
            env=ctx.script_env(),
        )
        log_hook_result("only-changesets", hook, console)

    return RunResult(action=action, merge_request_url=opened.value)
