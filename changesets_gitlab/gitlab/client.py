"""GitLab host client.

The release engine needs two things from GitLab: a merge request carrying the
version bump, and (after a publish) one release per published package. Both
go through the ``GitLabClient`` protocol; ``RestGitLabClient`` implements it
over the v4 REST API.
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.core.structured import as_obj_list, as_str_dict, get_int, get_str
from changesets_gitlab.gitlab.http import HttpClient, HttpError

__all__ = [
    "GitLabClient",
    "HostError",
    "MockGitLabClient",
    "RestGitLabClient",
    "auth_headers",
]


@dataclass(frozen=True, slots=True)
class HostError:
    """Error from a GitLab API call."""

    message: str
    hint: str | None = None


@runtime_checkable
class GitLabClient(Protocol):
    def open_merge_request(
        self,
        *,
        title: str,
        source_branch: str,
        target_branch: str,
        body: str,
    ) -> Result[str, HostError]:
        """Create the merge request, or update the open one for the same branches.

        Returns:
            Ok(web URL of the merge request) or Err(HostError)
        """
        ...

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        description: str,
    ) -> Result[None, HostError]: ...


def auth_headers(token: str, token_type: str) -> dict[str, str]:
    """Authentication header for a GitLab token.

    CI job tokens use ``JOB-TOKEN``, OAuth tokens a bearer header, and
    personal/project access tokens ``PRIVATE-TOKEN``.
    """
    if token_type == "job":
        return {"JOB-TOKEN": token}
    if token_type == "oauth":
        return {"Authorization": f"Bearer {token}"}
    return {"PRIVATE-TOKEN": token}


class RestGitLabClient:
    """GitLabClient over the REST API of ``host``.

    Attributes:
        host: GitLab base URL, e.g. https://gitlab.com
        project_path: Project path, e.g. group/project
    """

    def __init__(
        self,
        *,
        host: str,
        project_path: str,
        token: str,
        token_type: str,
        http: HttpClient,
    ) -> None:
        self.host = host.rstrip("/")
        self.project_path = project_path
        self._headers = auth_headers(token, token_type)
        self._http = http

    @property
    def project_url(self) -> str:
        project_id = urllib.parse.quote(self.project_path, safe="")
        return f"{self.host}/api/v4/projects/{project_id}"

    def open_merge_request(
        self,
        *,
        title: str,
        source_branch: str,
        target_branch: str,
        body: str,
    ) -> Result[str, HostError]:
        query = urllib.parse.urlencode(
            {
                "state": "opened",
                "source_branch": source_branch,
                "target_branch": target_branch,
            }
        )
        existing = self._http.request_json(
            "GET", f"{self.project_url}/merge_requests?{query}", headers=self._headers
        )
        if isinstance(existing, Err):
            return Err(self._host_error("failed to search merge requests", existing.error))

        items = as_obj_list(existing.value) or []
        iid: int | None = None
        for item in items:
            data = as_str_dict(item)
            if data is not None:
                iid = get_int(data, "iid")
                if iid is not None:
                    break

        payload: dict[str, object] = {"title": title, "description": body}
        if iid is None:
            payload["source_branch"] = source_branch
            payload["target_branch"] = target_branch
            result = self._http.request_json(
                "POST", f"{self.project_url}/merge_requests", headers=self._headers, body=payload
            )
            action = "create"
        else:
            result = self._http.request_json(
                "PUT",
                f"{self.project_url}/merge_requests/{iid}",
                headers=self._headers,
                body=payload,
            )
            action = "update"

        if isinstance(result, Err):
            return Err(self._host_error(f"failed to {action} merge request", result.error))

        data = as_str_dict(result.value)
        url = get_str(data, "web_url") if data is not None else None
        if url is None:
            return Err(HostError(f"unexpected merge request payload after {action}"))
        return Ok(url)

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        description: str,
    ) -> Result[None, HostError]:
        result = self._http.request_json(
            "POST",
            f"{self.project_url}/releases",
            headers=self._headers,
            body={"tag_name": tag_name, "name": name, "description": description},
        )
        if isinstance(result, Err):
            return Err(self._host_error(f"failed to create release {tag_name}", result.error))
        return Ok(None)

    @staticmethod
    def _host_error(message: str, error: HttpError) -> HostError:
        return HostError(message=message, hint=str(error))


@dataclass(frozen=True, slots=True)
class MergeRequestCall:
    title: str
    source_branch: str
    target_branch: str
    body: str


@dataclass(frozen=True, slots=True)
class ReleaseCall:
    tag_name: str
    name: str
    description: str


def _empty_mr_calls() -> list[MergeRequestCall]:
    return []


def _empty_release_calls() -> list[ReleaseCall]:
    return []


@dataclass
class MockGitLabClient:
    """GitLabClient recording calls, for tests.

    Set ``merge_request_error`` / ``release_error`` to make the calls fail.
    """

    web_url: str = "https://gitlab.com/grp/proj/-/merge_requests/1"
    merge_request_error: HostError | None = None
    release_error: HostError | None = None
    merge_requests: list[MergeRequestCall] = field(default_factory=_empty_mr_calls)
    releases: list[ReleaseCall] = field(default_factory=_empty_release_calls)

    def open_merge_request(
        self,
        *,
        title: str,
        source_branch: str,
        target_branch: str,
        body: str,
    ) -> Result[str, HostError]:
        self.merge_requests.append(
            MergeRequestCall(
                title=title,
                source_branch=source_branch,
                target_branch=target_branch,
                body=body,
            )
        )
        if self.merge_request_error is not None:
            return Err(self.merge_request_error)
        return Ok(self.web_url)

    def create_release(
        self,
        *,
        tag_name: str,
        name: str,
        description: str,
    ) -> Result[None, HostError]:
        self.releases.append(ReleaseCall(tag_name=tag_name, name=name, description=description))
        if self.release_error is not None:
            return Err(self.release_error)
        return Ok(None)
