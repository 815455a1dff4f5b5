"""Subprocess execution with Result-based error handling.

Git commands and the user's publish/version scripts are all blocking
subprocess calls. They go through the ``ProcessRunner`` protocol so the
release engine can be driven by ``MockProcessRunner`` in tests.

Usage:
    runner = SubprocessRunner(console)
    match runner.run(["git", "status"], cwd=repo_root):
        case Ok(stdout):
            ...
        case Err(error):
            console.error(f"{error} {error.stderr}")
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.output.console import ConsoleProtocol, Style

__all__ = [
    "MockProcessRunner",
    "ProcessError",
    "ProcessRunner",
    "RunCall",
    "SubprocessRunner",
    "run",
    "split_command",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Full environment (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


@runtime_checkable
class ProcessRunner(Protocol):
    """Single blocking call used for every subprocess of a run."""

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        """Run ``cmd`` to completion.

        Args:
            cmd: Command and arguments.
            cwd: Working directory.
            env: Extra variables layered over the inherited environment.
            silent: Do not echo the command line or its output.
            timeout: Maximum seconds to wait.

        Returns:
            Ok(stdout) on exit 0, Err(ProcessError) otherwise.
        """
        ...


class SubprocessRunner:
    """ProcessRunner backed by ``subprocess``.

    Non-silent runs echo the command line before running it and the captured
    output afterwards.
    """

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        full_env: dict[str, str] | None = None
        if env:
            full_env = {**os.environ, **env}

        if not silent:
            self._console.print(f"$ {' '.join(cmd)}", Style.DIM)

        result = run(cmd, cwd=cwd, env=full_env, timeout=timeout)

        if not silent:
            match result:
                case Ok(stdout):
                    self._echo(stdout)
                case Err(error):
                    self._echo(error.stdout)
                    self._echo(error.stderr)
        return result

    def _echo(self, text: str) -> None:
        for line in text.splitlines():
            self._console.print(line, Style.DIM)


@dataclass(frozen=True, slots=True)
class RunCall:
    """A call recorded by MockProcessRunner."""

    cmd: tuple[str, ...]
    cwd: Path
    env: dict[str, str]
    silent: bool


def _empty_calls() -> list[RunCall]:
    return []


def _empty_responses() -> dict[tuple[str, ...], str | ProcessError]:
    return {}


@dataclass
class MockProcessRunner:
    """ProcessRunner for tests.

    Responses are registered per command prefix; the longest matching prefix
    wins. Unmatched commands succeed with empty stdout.

    Usage:
        runner = MockProcessRunner()
        runner.set(["pnpm", "release"], "New tag: pkg-a@1.0.0\\n")
        runner.fail(["git", "push"], returncode=128, stderr="denied")
    """

    calls: list[RunCall] = field(default_factory=_empty_calls)
    responses: dict[tuple[str, ...], str | ProcessError] = field(
        default_factory=_empty_responses
    )

    def set(self, prefix: list[str], stdout: str) -> None:
        self.responses[tuple(prefix)] = stdout

    def fail(
        self,
        prefix: list[str],
        *,
        returncode: int = 1,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.responses[tuple(prefix)] = ProcessError(
            command=tuple(prefix),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        silent: bool = False,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        self.calls.append(RunCall(cmd=tuple(cmd), cwd=cwd, env=dict(env or {}), silent=silent))

        best: tuple[str, ...] | None = None
        for prefix in self.responses:
            if tuple(cmd[: len(prefix)]) != prefix:
                continue
            if best is None or len(prefix) > len(best):
                best = prefix

        if best is None:
            return Ok("")

        response = self.responses[best]
        if isinstance(response, ProcessError):
            return Err(
                ProcessError(
                    command=tuple(cmd),
                    returncode=response.returncode,
                    stdout=response.stdout,
                    stderr=response.stderr,
                )
            )
        return Ok(response)

    # Test helper methods

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [c.cmd for c in self.calls]

    def called(self, prefix: list[str]) -> list[RunCall]:
        """Calls whose command starts with ``prefix``."""
        p = tuple(prefix)
        return [c for c in self.calls if c.cmd[: len(p)] == p]


def split_command(command: str) -> Result[list[str], str]:
    """Split a shell-style command string into argv.

    Returns:
        Ok(argv), or Err(reason) for an empty or unbalanced string
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        return Err(str(e))
    if not argv:
        return Err("empty command")
    return Ok(argv)
