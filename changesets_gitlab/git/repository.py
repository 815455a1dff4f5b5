"""Git repository abstraction.

The release run needs a handful of git operations on the CI checkout:
committer identity, the credential-bearing ``origin`` URL, the release branch,
and the commit/force-push of the version bump. All of them return Result
types and run through the injected ``ProcessRunner``.

Usage:
    repo = Repository(Path("."), runner)
    match repo.checkout_branch("changeset-release/main"):
        case Ok(_):
            ...
        case Err(e):
            console.error(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.platform.process import ProcessError, ProcessRunner

GIT_TIMEOUT_SECONDS = 30.0
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})

__all__ = [
    "GIT_NETWORK_TIMEOUT_SECONDS",
    "GIT_TIMEOUT_SECONDS",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """Git operations on a single checkout.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path, runner: ProcessRunner) -> None:
        self.path = path
        self._runner = runner

    def configure_user(self, name: str, email: str) -> Result[None, GitError]:
        """Set the committer identity for automated commits."""
        for key, value in (("user.name", name), ("user.email", email)):
            result = self._run(["config", key, value])
            if isinstance(result, Err):
                return Err(self._error(f"config {key}", result.error, "git config failed"))
        return Ok(None)

    def set_remote_url(
        self,
        url: str,
        *,
        remote: str = "origin",
        silent: bool = True,
    ) -> Result[None, GitError]:
        """Point ``remote`` at ``url``.

        The URL usually embeds a token: it is never copied into the error,
        and the command is only echoed when ``silent`` is False.
        """
        result = self._run(["remote", "set-url", remote, url], silent=silent)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command="remote set-url",
                    message=f"failed to set URL of remote '{remote}'",
                    returncode=e.returncode,
                )
            )
        return Ok(None)

    def current_branch(self) -> str | None:
        """Current branch name, None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], silent=True)
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch in ("", "HEAD") else branch
            case Err(_):
                return None

    def checkout_branch(self, branch: str) -> Result[None, GitError]:
        """Create or reset ``branch`` at the current HEAD and switch to it."""
        result = self._run(["checkout", "-B", branch])
        if isinstance(result, Err):
            return Err(self._error("checkout -B", result.error, f"failed to switch to {branch}"))
        return Ok(None)

    def has_changes(self) -> Result[bool, GitError]:
        result = self._run(["status", "--porcelain"], silent=True)
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(stdout.strip() != "")

    def commit_all(self, message: str) -> Result[None, GitError]:
        """Stage every change and commit it."""
        add = self._run(["add", "-A"])
        if isinstance(add, Err):
            return Err(self._error("add -A", add.error, "git add failed"))

        commit = self._run(["commit", "-m", message])
        if isinstance(commit, Err):
            return Err(self._error("commit", commit.error, "git commit failed"))
        return Ok(None)

    def force_push(self, branch: str, *, remote: str = "origin") -> Result[None, GitError]:
        """Push HEAD to ``remote/branch``, replacing whatever is there."""
        result = self._run(["push", remote, f"HEAD:{branch}", "--force"])
        if isinstance(result, Err):
            return Err(self._error("push", result.error, f"failed to push {branch}"))
        return Ok(None)

    def push_tags(self, *, remote: str = "origin") -> Result[None, GitError]:
        result = self._run(["push", remote, "--tags"])
        if isinstance(result, Err):
            return Err(self._error("push --tags", result.error, "failed to push tags"))
        return Ok(None)

    def _run(self, args: list[str], *, silent: bool = False) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else GIT_TIMEOUT_SECONDS
        )
        return self._runner.run(
            ["git", *args],
            cwd=self.path,
            silent=silent,
            timeout=timeout,
        )

    @staticmethod
    def _error(command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or error.stdout.strip() or fallback,
            returncode=error.returncode,
        )
