"""Tests for gitlab/client.py."""

from __future__ import annotations

import pytest

from changesets_gitlab.core.result import Err, Ok
from changesets_gitlab.gitlab.client import (
    GitLabClient,
    HostError,
    MockGitLabClient,
    RestGitLabClient,
    auth_headers,
)
from changesets_gitlab.gitlab.http import HttpError, MockHttpClient

PROJECT = "https://gitlab.example.com/api/v4/projects/grp%2Fsub%2Fproj"
SEARCH = (
    f"{PROJECT}/merge_requests?state=opened"
    "&source_branch=changeset-release%2Fmain&target_branch=main"
)
MR_URL = "https://gitlab.example.com/grp/sub/proj/-/merge_requests/7"


def _client(http: MockHttpClient, token_type: str = "personal") -> RestGitLabClient:
    return RestGitLabClient(
        host="https://gitlab.example.com/",
        project_path="grp/sub/proj",
        token="T",
        token_type=token_type,
        http=http,
    )


def _open(client: RestGitLabClient):
    return client.open_merge_request(
        title="Version Packages",
        source_branch="changeset-release/main",
        target_branch="main",
        body="body",
    )


@pytest.mark.parametrize(
    ("token_type", "expected"),
    [
        ("job", {"JOB-TOKEN": "T"}),
        ("oauth", {"Authorization": "Bearer T"}),
        ("personal", {"PRIVATE-TOKEN": "T"}),
    ],
)
def test_auth_headers(token_type: str, expected: dict[str, str]) -> None:
    assert auth_headers("T", token_type) == expected


def test_project_url_encodes_path() -> None:
    assert _client(MockHttpClient()).project_url == PROJECT


class TestOpenMergeRequest:
    def test_creates_when_none_open(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", SEARCH, [])
        http.set_json("POST", f"{PROJECT}/merge_requests", {"iid": 7, "web_url": MR_URL})

        assert _open(_client(http)) == Ok(MR_URL)

        post = http.calls[-1]
        assert post.method == "POST"
        assert post.headers == {"PRIVATE-TOKEN": "T"}
        assert post.body == {
            "title": "Version Packages",
            "description": "body",
            "source_branch": "changeset-release/main",
            "target_branch": "main",
        }

    def test_updates_existing(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", SEARCH, [{"iid": 7, "web_url": MR_URL}])
        http.set_json("PUT", f"{PROJECT}/merge_requests/7", {"iid": 7, "web_url": MR_URL})

        assert _open(_client(http, "job")) == Ok(MR_URL)

        methods = [c.method for c in http.calls]
        assert methods == ["GET", "PUT"]
        assert http.calls[-1].body == {"title": "Version Packages", "description": "body"}
        assert http.calls[-1].headers == {"JOB-TOKEN": "T"}

    def test_search_failure(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", SEARCH, HttpError(url=SEARCH, status=401, message="Unauthorized"))

        result = _open(_client(http))

        assert isinstance(result, Err)
        assert result.error.message == "failed to search merge requests"
        assert result.error.hint is not None and "401" in result.error.hint

    def test_create_failure(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", SEARCH, [])

        result = _open(_client(http))

        assert isinstance(result, Err)
        assert result.error.message == "failed to create merge request"

    def test_payload_without_web_url(self) -> None:
        http = MockHttpClient()
        http.set_json("GET", SEARCH, [])
        http.set_json("POST", f"{PROJECT}/merge_requests", {"iid": 7})

        result = _open(_client(http))

        assert isinstance(result, Err)
        assert "unexpected" in result.error.message


class TestCreateRelease:
    def test_posts_release(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", f"{PROJECT}/releases", {"tag_name": "pkg-a@1.0.0"})

        result = _client(http).create_release(
            tag_name="pkg-a@1.0.0", name="pkg-a@1.0.0", description="notes"
        )

        assert result == Ok(None)
        assert http.calls[0].body == {
            "tag_name": "pkg-a@1.0.0",
            "name": "pkg-a@1.0.0",
            "description": "notes",
        }

    def test_failure(self) -> None:
        result = _client(MockHttpClient()).create_release(
            tag_name="v1.0.0", name="v1.0.0", description=""
        )

        assert isinstance(result, Err)
        assert result.error.message == "failed to create release v1.0.0"


class TestMockGitLabClient:
    def test_records_calls(self) -> None:
        client = MockGitLabClient()
        assert isinstance(client, GitLabClient)

        assert _open(client) == Ok(client.web_url)  # type: ignore[arg-type]
        assert client.merge_requests[0].source_branch == "changeset-release/main"

    def test_errors(self) -> None:
        client = MockGitLabClient(
            merge_request_error=HostError("mr"), release_error=HostError("release")
        )

        assert _open(client) == Err(HostError("mr"))  # type: ignore[arg-type]
        assert client.create_release(tag_name="v1", name="v1", description="") == Err(
            HostError("release")
        )
