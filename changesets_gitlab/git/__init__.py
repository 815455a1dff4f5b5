"""Git operations on the CI checkout.

Usage:
    from changesets_gitlab.git import Repository

    repo = Repository(Path("."), runner)
    repo.configure_user("ci-bot", "ci-bot@example.com")
"""

from changesets_gitlab.git.repository import (
    GIT_NETWORK_TIMEOUT_SECONDS,
    GIT_TIMEOUT_SECONDS,
    GitError,
    Repository,
)

__all__ = [
    "GIT_NETWORK_TIMEOUT_SECONDS",
    "GIT_TIMEOUT_SECONDS",
    "GitError",
    "Repository",
]
