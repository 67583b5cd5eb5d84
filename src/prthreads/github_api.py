"""GitHub API client using httpx with static token authentication.

The token comes from ``GITHUB_TOKEN`` (or ``GH_TOKEN``) and is checked once at
startup with :func:`validate_credentials`. :class:`GitHubClient` carries the
token and endpoints; every call opens a short-lived ``httpx.AsyncClient``.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from prthreads.models import PRReference

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

_HTTP_UNAUTHORIZED = 401

# Anchored at the start only: trailing "/files", "#discussion_r..." etc. are ignored.
_PR_URL_RE = re.compile(r"^https?://[^/\s]+/([^/\s]+)/([^/\s]+)/pull/([0-9]+)")


# ---------------------------------------------------------------------------
# Error types
# ---------------------------------------------------------------------------


class GitHubError(Exception):
    """Raised when a GitHub API call fails."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubAuthError(GitHubError):
    """Raised when no token is configured."""

    def __init__(self, detail: str = "") -> None:
        msg = "GitHub token not found. Set the GITHUB_TOKEN (or GH_TOKEN) environment variable."
        if detail:
            msg = f"{detail}\n{msg}"
        super().__init__(msg, status_code=_HTTP_UNAUTHORIZED)


class InvalidPRURLError(GitHubError):
    """Raised when a pull request URL does not have the ``.../owner/repo/pull/N`` shape."""


class QueryFailedError(GitHubError):
    """Raised when the review-threads GraphQL query fails for any reason."""


class SearchFailedError(GitHubError):
    """Raised when the issue search request fails."""


class CredentialError(GitHubError):
    """Base class for fatal startup credential failures."""


class AuthenticationFailedError(CredentialError):
    """The identity lookup could not be performed (network or transport failure)."""


class InvalidTokenError(CredentialError):
    """GitHub rejected the token."""

    def __init__(self) -> None:
        super().__init__("invalid or expired token", status_code=_HTTP_UNAUTHORIZED)


class UnexpectedResponseError(CredentialError):
    """The identity lookup returned a non-success status other than 401."""


# ---------------------------------------------------------------------------
# URL parsing
# ---------------------------------------------------------------------------


def parse_pr_url(url: str) -> PRReference:
    """Parse a pull request URL into a :class:`PRReference`.

    Accepts ``https://<host>/<owner>/<repo>/pull/<number>``, optionally
    followed by more path or a fragment.

    Raises:
        InvalidPRURLError: If the URL does not match that shape.
    """
    match = _PR_URL_RE.match(url.strip())
    if match is None:
        msg = "Invalid PR URL format. Expected: https://github.com/owner/repo/pull/123"
        raise InvalidPRURLError(msg)
    owner, repo, number = match.groups()
    return PRReference(owner=owner, repo=repo, number=int(number))


# ---------------------------------------------------------------------------
# HTTP helpers
# ---------------------------------------------------------------------------


def _status_line(response: httpx.Response) -> str:
    """Render ``"404 Not Found"`` style status text."""
    return f"{response.status_code} {response.reason_phrase}".strip()


def _error_message(response: httpx.Response) -> str:
    """Extract GitHub's ``message`` field, falling back to the raw text."""
    try:
        body = response.json()
        return body.get("message", response.text)
    except Exception:
        return response.text


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class GitHubClient:
    """Thin async wrapper over the GitHub REST and GraphQL endpoints.

    Holds only the token and endpoint URLs. Each request opens its own
    :class:`httpx.AsyncClient`, so an instance has nothing to close and can be
    rebuilt or shared freely between tool calls and server sessions.
    """

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        graphql_url: str | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.graphql_url = graphql_url or f"{self.api_url}/graphql"
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def get_authenticated_user(self) -> httpx.Response:
        """``GET /user``. Returns the raw response so callers can classify the status."""
        async with httpx.AsyncClient() as http:
            return await http.get(f"{self.api_url}/user", headers=self._headers)

    async def search_issues(
        self,
        query: str,
        *,
        sort: str = "updated",
        order: str = "desc",
        per_page: int = 30,
    ) -> dict[str, Any]:
        """Run ``GET /search/issues`` and return the parsed first page.

        Raises:
            SearchFailedError: On transport failure or a non-2xx status.
        """
        params = {"q": query, "sort": sort, "order": order, "per_page": per_page}
        logger.debug("Search issues: %s", params)
        try:
            async with httpx.AsyncClient() as http:
                response = await http.get(f"{self.api_url}/search/issues", headers=self._headers, params=params)
        except httpx.RequestError as exc:
            msg = f"Error searching GitHub: {exc}"
            raise SearchFailedError(msg) from exc

        if not response.is_success:
            msg = f"GitHub API returned non-200 status: {_status_line(response)}"
            raise SearchFailedError(msg, status_code=response.status_code)
        return response.json()

    async def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query and return the ``data`` object.

        Raises:
            QueryFailedError: On transport failure, non-2xx status, or a
                non-empty ``errors`` array.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug("GraphQL query, variables=%s", variables)
        try:
            async with httpx.AsyncClient() as http:
                response = await http.post(self.graphql_url, headers=self._headers, json=payload)
        except httpx.RequestError as exc:
            msg = f"request failed: {exc}"
            raise QueryFailedError(msg) from exc

        if not response.is_success:
            msg = f"GitHub API error {_status_line(response)}: {_error_message(response)}"
            raise QueryFailedError(msg, status_code=response.status_code)

        result: dict[str, Any] = response.json()
        errors = result.get("errors")
        if errors:
            messages = "; ".join(e.get("message", str(e)) for e in errors)
            msg = f"GraphQL error: {messages}"
            raise QueryFailedError(msg)
        return result.get("data") or {}


# ---------------------------------------------------------------------------
# Startup credential check
# ---------------------------------------------------------------------------


async def validate_credentials(client: GitHubClient) -> str:
    """Perform the one identity lookup made at startup.

    Returns:
        The authenticated user's login.

    Raises:
        AuthenticationFailedError: If the request could not be made.
        InvalidTokenError: If GitHub answered 401.
        UnexpectedResponseError: For any other non-success status.
    """
    try:
        response = await client.get_authenticated_user()
    except httpx.RequestError as exc:
        msg = f"authentication test failed: {exc}"
        raise AuthenticationFailedError(msg) from exc

    if response.status_code == _HTTP_UNAUTHORIZED:
        raise InvalidTokenError
    if not response.is_success:
        msg = f"unexpected API response: {_status_line(response)}"
        raise UnexpectedResponseError(msg, status_code=response.status_code)

    return response.json().get("login", "unknown")
