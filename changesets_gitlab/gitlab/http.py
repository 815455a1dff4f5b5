"""HTTP client abstraction for the GitLab REST API.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from changesets_gitlab.core.result import Err, Ok, Result

__all__ = [
    "HttpCall",
    "HttpClient",
    "GITLAB_API_TIMEOUT_SECONDS",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

GITLAB_API_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON-over-HTTP requests."""

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method (GET, POST, PUT)
            url: Absolute URL
            headers: Extra request headers (authentication)
            body: JSON body, or None for no body

        Returns:
            Ok with the decoded JSON value, or Err with HttpError
        """
        ...


class RealHttpClient:
    """Real HTTP client using urllib."""

    def __init__(
        self,
        timeout: float = GITLAB_API_TIMEOUT_SECONDS,
        user_agent: str = "changesets-gitlab",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        # Use system certificates
        self._ssl_context = ssl.create_default_context()

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        data: bytes | None = None
        all_headers = {"User-Agent": self.user_agent, "Accept": "application/json", **headers}
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            all_headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=data, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        if not raw.strip():
            return Ok(None)
        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))


@dataclass(frozen=True, slots=True)
class HttpCall:
    method: str
    url: str
    headers: dict[str, str]
    body: dict[str, object] | None


class MockHttpClient:
    """Mock HTTP client for testing.

    Usage:
        client = MockHttpClient()
        client.set_json("GET", "https://gitlab.com/api/v4/...", [])
        client.set_json("POST", "https://gitlab.com/api/v4/...", {"iid": 1})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object | HttpError] = {}
        self.calls: list[HttpCall] = []

    def set_json(self, method: str, url: str, response: object | HttpError) -> None:
        self._responses[(method, url)] = response

    def request_json(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        body: dict[str, object] | None = None,
    ) -> Result[object, HttpError]:
        self.calls.append(HttpCall(method=method, url=url, headers=dict(headers), body=body))

        if (method, url) not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = self._responses[(method, url)]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
