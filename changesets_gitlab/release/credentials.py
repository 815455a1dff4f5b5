"""Credential injection for GitLab pushes and npm publishes."""

from __future__ import annotations

import urllib.parse
from pathlib import Path

from changesets_gitlab.core.context import ReleaseContext
from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.git.repository import Repository
from changesets_gitlab.output.console import ConsoleProtocol
from changesets_gitlab.platform.files import FileStore
from changesets_gitlab.release.errors import CredentialError, PublishError


def build_remote_url(ctx: ReleaseContext) -> Result[str, CredentialError]:
    """Remote URL embedding the CI user and token.

    ``https://gitlab.com`` + ``ci-bot`` + ``T`` + ``grp/proj`` gives
    ``https://ci-bot:T@gitlab.com/grp/proj.git``.
    """
    try:
        parsed = urllib.parse.urlsplit(ctx.gitlab_host)
        port = parsed.port
    except ValueError as e:
        return Err(
            CredentialError(
                kind="invalid_host_url",
                message=f"invalid GITLAB_HOST: {ctx.gitlab_host}",
                hint=str(e),
            )
        )

    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return Err(
            CredentialError(
                kind="invalid_host_url",
                message=f"invalid GITLAB_HOST: {ctx.gitlab_host}",
                hint="Expected an absolute URL such as https://gitlab.example.com",
            )
        )

    missing = [
        name
        for name, value in (
            ("GITLAB_CI_USER_NAME", ctx.gitlab_user_name),
            ("GITLAB_TOKEN", ctx.gitlab_token),
            ("CI_PROJECT_PATH", ctx.project_path),
        )
        if not value
    ]
    if missing:
        return Err(
            CredentialError(
                kind="missing_variable",
                message=f"missing {', '.join(missing)}",
                hint="Define them as CI/CD variables of the project.",
            )
        )

    host = parsed.hostname if port is None else f"{parsed.hostname}:{port}"
    auth = f"{ctx.gitlab_user_name}:{ctx.gitlab_token}"
    return Ok(f"{parsed.scheme}://{auth}@{host}/{ctx.project_path}.git")


def inject_credentials(
    ctx: ReleaseContext,
    repo: Repository,
    console: ConsoleProtocol,
) -> Result[None, CredentialError]:
    """Configure the committer and point ``origin`` at the authenticated URL.

    The URL is validated before anything is changed; on error the remote is
    left untouched.
    """
    url = build_remote_url(ctx)
    if isinstance(url, Err):
        return url

    console.print("setting git user")
    user = repo.configure_user(ctx.gitlab_user_name or "", ctx.gitlab_user_email)
    if isinstance(user, Err):
        return Err(
            CredentialError(
                kind="git_failed",
                message="failed to set git user",
                hint=user.error.message,
            )
        )

    console.print("setting GitLab credentials")
    remote = repo.set_remote_url(url.value, silent=not ctx.debug_credentials)
    if isinstance(remote, Err):
        return Err(
            CredentialError(
                kind="git_failed",
                message=remote.error.message,
                hint="Check that the checkout has an 'origin' remote.",
            )
        )
    return Ok(None)


def registry_auth_line(registry_host: str, token: str) -> str:
    return f"//registry.{registry_host}/:_authToken={token}"


def ensure_registry_credentials(
    ctx: ReleaseContext,
    files: FileStore,
    console: ConsoleProtocol,
) -> Result[Path, PublishError]:
    """Make sure ``~/.npmrc`` exists, creating it from ``NPM_TOKEN`` if needed.

    An existing file is never rewritten.
    """
    npmrc = ctx.npmrc_path
    if npmrc is not None and files.exists(npmrc):
        console.print("Found existing .npmrc file")
        return Ok(npmrc)

    if npmrc is not None and ctx.npm_token:
        console.print("No .npmrc file found, creating one")
        try:
            files.write(npmrc, registry_auth_line(ctx.registry_host, ctx.npm_token))
        except OSError as e:
            return Err(
                PublishError(
                    kind="missing_credentials",
                    message=f"failed to write {npmrc}",
                    hint=str(e),
                )
            )
        return Ok(npmrc)

    return Err(
        PublishError(
            kind="missing_credentials",
            message="No `.npmrc` found nor `NPM_TOKEN` provided, unable to publish packages",
            hint=None if npmrc is not None else "HOME is not set",
        )
    )
