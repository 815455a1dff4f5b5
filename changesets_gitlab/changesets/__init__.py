"""Changeset state and workspace packages."""

from changesets_gitlab.changesets.packages import PackageInfo, Workspace, read_workspace
from changesets_gitlab.changesets.store import (
    Changeset,
    ChangesetError,
    ChangesetState,
    PreState,
    read_changeset_state,
)

__all__ = [
    "Changeset",
    "ChangesetError",
    "ChangesetState",
    "PackageInfo",
    "PreState",
    "Workspace",
    "read_changeset_state",
    "read_workspace",
]
