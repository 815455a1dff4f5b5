"""GitLab REST API access."""

from changesets_gitlab.gitlab.client import (
    GitLabClient,
    HostError,
    MockGitLabClient,
    RestGitLabClient,
)
from changesets_gitlab.gitlab.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "GitLabClient",
    "HostError",
    "HttpClient",
    "HttpError",
    "MockGitLabClient",
    "MockHttpClient",
    "RealHttpClient",
    "RestGitLabClient",
]
