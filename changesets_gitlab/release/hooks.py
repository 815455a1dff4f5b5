"""Best-effort post hooks (``--published``, ``--only-changesets``)."""

from __future__ import annotations

from pathlib import Path

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.output.console import ConsoleProtocol
from changesets_gitlab.platform.process import ProcessRunner, split_command
from changesets_gitlab.release.errors import HookError


def run_hook(
    command: str,
    *,
    cwd: Path,
    runner: ProcessRunner,
    env: dict[str, str] | None = None,
) -> Result[None, HookError]:
    argv = split_command(command)
    if isinstance(argv, Err):
        return Err(
            HookError(
                kind="invalid_command",
                command=command,
                message=f"cannot parse hook command: {argv.error}",
            )
        )

    result = runner.run(argv.value, cwd=cwd, env=env)
    if isinstance(result, Err):
        e = result.error
        return Err(
            HookError(
                kind="failed",
                command=command,
                message=e.stderr.strip() or str(e),
                exit_code=e.returncode,
            )
        )
    return Ok(None)


def log_hook_result(
    label: str,
    result: Result[None, HookError],
    console: ConsoleProtocol,
) -> None:
    """Report a hook result; never affects the run status."""
    match result:
        case Ok(_):
            console.success(f"{label} hook finished")
        case Err(HookError(kind="invalid_command", command=command, message=message)):
            console.warning(f"{label} hook not run ({command!r}): {message}")
        case Err(HookError(command=command, message=message, exit_code=code)):
            console.warning(f"{label} hook failed (exit {code}, {command!r}): {message}")
