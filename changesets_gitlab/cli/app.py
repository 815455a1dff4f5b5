from __future__ import annotations

import os
from pathlib import Path

import typer

from changesets_gitlab import __version__
from changesets_gitlab.core.context import ReleaseContext, load_context
from changesets_gitlab.core.errors import ErrorCode
from changesets_gitlab.core.result import Err
from changesets_gitlab.gitlab.client import GitLabClient, RestGitLabClient
from changesets_gitlab.gitlab.http import RealHttpClient
from changesets_gitlab.output.console import ConsoleProtocol, RichConsole
from changesets_gitlab.output.errors import print_run_error, run_error_exit_code
from changesets_gitlab.output.outputs import DotenvOutputs
from changesets_gitlab.platform.files import LocalFileStore
from changesets_gitlab.platform.process import SubprocessRunner
from changesets_gitlab.release.engine import ReleaseServices, run_release
from changesets_gitlab.release.reporter import report

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _gitlab_client(ctx: ReleaseContext) -> GitLabClient | None:
    if ctx.gitlab_token is None or ctx.project_path is None:
        return None
    return RestGitLabClient(
        host=ctx.gitlab_host,
        project_path=ctx.project_path,
        token=ctx.gitlab_token,
        token_type=ctx.gitlab_token_type,
        http=RealHttpClient(),
    )


def _write_default_outputs(console: ConsoleProtocol) -> None:
    raw = os.environ.get("CHANGESETS_OUTPUT_FILE", "").strip()
    report(DotenvOutputs(Path(raw) if raw else None, console), None)


@app.command()
def release(
    published: str | None = typer.Option(
        None, "--published", help="Command to run after packages were published."
    ),
    only_changesets: str | None = typer.Option(
        None,
        "--only-changesets",
        help="Command to run after the version merge request was opened.",
    ),
    publish: str | None = typer.Option(
        None, "--publish", help="Publish script (overrides INPUT_PUBLISH)."
    ),
    version_script: str | None = typer.Option(
        None, "--version-script", help="Version script (default: changeset version)."
    ),
    title: str | None = typer.Option(None, "--title", help="Merge request title."),
    target_branch: str | None = typer.Option(
        None, "--target-branch", help="Merge request target branch."
    ),
    commit: str | None = typer.Option(None, "--commit", help="Version commit message."),
    create_gitlab_releases: str | None = typer.Option(
        None,
        "--create-gitlab-releases",
        help="Create a GitLab release per published package (true/false).",
    ),
    cwd: Path | None = typer.Option(None, "--cwd", help="Repository root (default: cwd)."),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Version or publish packages from pending changesets."""
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    console = RichConsole()

    try:
        root = (cwd or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --cwd: {e}")
        _write_default_outputs(console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    loaded = load_context(
        os.environ,
        cwd=root,
        overrides={
            "publish": publish,
            "version": version_script,
            "title": title,
            "target_branch": target_branch,
            "commit": commit,
            "create_gitlab_releases": create_gitlab_releases,
            "published": published,
            "only_changesets": only_changesets,
        },
    )
    if isinstance(loaded, Err):
        print_run_error(loaded.error, console)
        _write_default_outputs(console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = loaded.value
    result = run_release(
        ctx,
        ReleaseServices(
            console=console,
            runner=SubprocessRunner(console),
            files=LocalFileStore(),
            outputs=DotenvOutputs(ctx.output_file, console),
            client=_gitlab_client(ctx),
        ),
    )

    if result.error is not None:
        print_run_error(result.error, console)
        raise typer.Exit(code=run_error_exit_code(result.error))


def main() -> None:
    app()
