"""Error types of the release engine.

Credential, publish and version errors end the run. Hook errors are only
logged: hooks are best-effort notifications.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

__all__ = [
    "CredentialError",
    "HookError",
    "PublishError",
    "ReleaseError",
    "VersionError",
]


@dataclass(frozen=True, slots=True)
class CredentialError:
    kind: Literal["invalid_host_url", "missing_variable", "git_failed"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: Literal["missing_credentials", "script_failed", "unparsable_result", "host_api_failed"]
    message: str
    hint: str | None = None
    exit_code: int | None = None


@dataclass(frozen=True, slots=True)
class VersionError:
    kind: Literal["script_failed", "git_failed", "host_api_failed"]
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class HookError:
    """A post hook that could not run or failed.

    ``invalid_command`` means the command string itself is malformed (nothing
    was executed); ``failed`` means it ran and exited non-zero.
    """

    kind: Literal["invalid_command", "failed"]
    command: str
    message: str
    exit_code: int | None = None


ReleaseError: TypeAlias = CredentialError | PublishError | VersionError
