"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TypeAlias

from typing import TYPE_CHECKING

from changesets_gitlab.changesets.store import ChangesetError
from changesets_gitlab.core.context import ContextError
from changesets_gitlab.core.errors import ErrorCode
from changesets_gitlab.output.console import Style
from changesets_gitlab.release.errors import CredentialError, PublishError, VersionError

if TYPE_CHECKING:
    from changesets_gitlab.output.console import ConsoleProtocol

__all__ = ["print_run_error", "run_error_exit_code"]

RunError: TypeAlias = CredentialError | PublishError | VersionError | ContextError | ChangesetError


def print_run_error(error: RunError, console: ConsoleProtocol) -> None:
    """Print a terminal run error with its hint."""
    match error:
        case CredentialError(message=message, hint=hint):
            console.error(f"credentials: {message}")
        case PublishError(kind="script_failed", message=message, hint=hint):
            console.error(message)
        case PublishError(message=message, hint=hint):
            console.error(f"publish: {message}")
        case VersionError(message=message, hint=hint):
            console.error(f"version: {message}")
        case ContextError(message=message, hint=hint):
            console.error(message)
        case ChangesetError(message=message, path=path):
            console.error(message)
            hint = str(path) if path is not None else None
    if hint:
        console.print(f"hint: {hint}", Style.DIM)


def run_error_exit_code(error: RunError) -> int:
    """Get exit code for a terminal run error."""
    match error:
        case ContextError() | ChangesetError():
            return int(ErrorCode.USER_ERROR)
        case CredentialError():
            return int(ErrorCode.CREDENTIAL_ERROR)
        case PublishError(kind="missing_credentials"):
            return int(ErrorCode.CREDENTIAL_ERROR)
        case PublishError():
            return int(ErrorCode.PUBLISH_ERROR)
        case VersionError():
            return int(ErrorCode.VERSION_ERROR)
