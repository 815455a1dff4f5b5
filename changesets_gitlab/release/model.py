from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass

from changesets_gitlab.changesets.store import ChangesetError
from changesets_gitlab.core.context import ContextError
from changesets_gitlab.release.errors import ReleaseError

DEFAULT_VERSION_SCRIPT = "changeset version"
DEFAULT_MR_TITLE = "Version Packages"
DEFAULT_COMMIT_MESSAGE = "Version Packages"
RELEASE_BRANCH_PREFIX = "changeset-release/"


@dataclass(frozen=True, slots=True)
class NoOp:
    """Nothing pending and nothing to publish."""


@dataclass(frozen=True, slots=True)
class Publish:
    """Publish packages that were versioned but not yet published."""

    script: str


@dataclass(frozen=True, slots=True)
class Version:
    """Open (or update) the version bump merge request.

    ``None`` fields fall back to the defaults above (or the current branch for
    ``mr_target_branch``).
    """

    script: str | None
    mr_title: str | None
    mr_target_branch: str | None
    commit_message: str | None
    has_publish_script: bool


ReleaseAction: TypeAlias = NoOp | Publish | Version


@dataclass(frozen=True, slots=True)
class PublishedPackage:
    name: str
    version: str

    def as_output(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    published: bool = False
    published_packages: tuple[PublishedPackage, ...] = ()


@dataclass(frozen=True, slots=True)
class RunResult:
    """Summary of one run.

    Attributes:
        action: Selected action (None if the run failed before classification)
        outcome: Confirmed publish outcome, None when nothing was published
        error: Terminal error, None on success
        merge_request_url: URL of the version merge request, if one was opened
    """

    action: ReleaseAction | None
    outcome: PublishOutcome | None = None
    error: ReleaseError | ContextError | ChangesetError | None = None
    merge_request_url: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None
