"""Release decision and orchestration engine."""

from changesets_gitlab.release.classifier import classify
from changesets_gitlab.release.engine import ReleaseServices, run_release
from changesets_gitlab.release.errors import (
    CredentialError,
    HookError,
    PublishError,
    ReleaseError,
    VersionError,
)
from changesets_gitlab.release.model import (
    NoOp,
    Publish,
    PublishedPackage,
    PublishOutcome,
    ReleaseAction,
    RunResult,
    Version,
)
from changesets_gitlab.release.reporter import report

__all__ = [
    "CredentialError",
    "HookError",
    "NoOp",
    "Publish",
    "PublishError",
    "PublishOutcome",
    "PublishedPackage",
    "ReleaseAction",
    "ReleaseError",
    "ReleaseServices",
    "RunResult",
    "Version",
    "VersionError",
    "classify",
    "report",
    "run_release",
]
