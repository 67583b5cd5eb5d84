"""FastMCP server for prthreads.

Exposes read-only tools for listing your pull requests and reading their
review comment threads. Authentication uses a static GitHub token that is
validated once when the server starts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_context
from fastmcp.server.lifespan import lifespan
from fastmcp.server.middleware.error_handling import ErrorHandlingMiddleware
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.server.middleware.timing import TimingMiddleware
from pydantic import Field

from prthreads.config import get_config
from prthreads.github_api import (
    CredentialError,
    GitHubAuthError,
    GitHubClient,
    InvalidPRURLError,
    QueryFailedError,
    SearchFailedError,
    parse_pr_url,
    validate_credentials,
)
from prthreads.models import PRState
from prthreads.tools import comments, pull_requests

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from prthreads.config import Settings
    from prthreads.models import ReviewThread

logger = logging.getLogger(__name__)

_GITHUB_KEY = "github"


def build_client(settings: Settings) -> GitHubClient:
    """Create the shared GitHub client from settings.

    Raises:
        GitHubAuthError: If no token is configured.
    """
    return GitHubClient(
        settings.require_token(),
        api_url=settings.api_url,
        graphql_url=settings.graphql_url,
    )


async def check_prerequisites(client: GitHubClient) -> str:
    """Validate the token with one identity lookup; failures are fatal."""
    try:
        login = await validate_credentials(client)
    except CredentialError:
        logger.exception("GitHub authentication failed")
        raise
    logger.info("GitHub service initialized, authenticated as %s", login)
    return login


async def startup() -> GitHubClient:
    """Build the shared client from the active settings and validate its token.

    Raises:
        GitHubAuthError: If no token is configured.
        CredentialError: If GitHub cannot confirm the token.
    """
    logger.info("Starting prthreads MCP server")
    try:
        client = build_client(get_config())
    except GitHubAuthError:
        logger.exception("Failed to create GitHub client")
        raise
    await check_prerequisites(client)
    logger.info("MCP server running, waiting for requests")
    return client


@lifespan
async def check_github_token(server: FastMCP) -> AsyncIterator[dict[str, GitHubClient]]:  # noqa: ARG001
    """Refuse to serve until the configured token is confirmed by GitHub."""
    yield {_GITHUB_KEY: await startup()}


mcp = FastMCP(
    "prthreads",
    lifespan=check_github_token,
    instructions="""\
Read-only access to your GitHub pull requests and their review comments.

- `list_pull_requests` lists pull requests you authored (open by default).
- `get_unresolved_comments` gives a compact view of the unresolved review
  threads on a PR; long comments are cut to their first lines.
- `get_full_comments` gives every comment in full. Use it when a preview from
  `get_unresolved_comments` was truncated, or pass `unresolved_only=true` to
  skip resolved threads.

Pull requests are identified by their full URL, for example
https://github.com/owner/repo/pull/123.
""",
)

mcp.add_middleware(ErrorHandlingMiddleware(include_traceback=False, transform_errors=False))
mcp.add_middleware(TimingMiddleware())
mcp.add_middleware(LoggingMiddleware(include_payloads=True, max_payload_length=500))


def _get_client() -> GitHubClient:
    """Return the client the startup check put in the lifespan context."""
    return get_context().lifespan_context[_GITHUB_KEY]


async def _fetch_threads(pull_request_url: str) -> list[ReviewThread]:
    try:
        ref = parse_pr_url(pull_request_url)
    except InvalidPRURLError as exc:
        raise ToolError(f"Invalid PR URL: {exc}") from exc
    try:
        return await comments.fetch_review_threads(_get_client(), ref)
    except QueryFailedError as exc:
        logger.warning("Review thread query failed for %s: %s", pull_request_url, exc)
        raise ToolError(f"GitHub GraphQL query failed: {exc}") from exc


@mcp.tool(tags={"query"})
async def list_pull_requests(
    state: Annotated[
        str,
        Field(
            description="The state of the pull requests to list (open, closed, or all). Defaults to 'open'.",
            json_schema_extra={"enum": [s.value for s in PRState]},
        ),
    ] = PRState.OPEN.value,
) -> str:
    """Lists pull requests authored by the authenticated user.

    Returns up to 15 pull requests, most recently updated first, one entry per
    PR with its state, title and URL.
    """
    try:
        return await pull_requests.list_pull_requests(_get_client(), state)
    except SearchFailedError as exc:
        logger.warning("Pull request search failed: %s", exc)
        raise ToolError(str(exc)) from exc


@mcp.tool(tags={"query"})
async def get_unresolved_comments(
    pull_request_url: Annotated[
        str,
        Field(description="The full URL of the pull request (e.g., https://github.com/owner/repo/pull/123)"),
    ],
) -> str:
    """Gets all unresolved review comments from a specific GitHub pull request.

    Long multi-line comments are shortened to their first three lines; use
    `get_full_comments` to read them in full.
    """
    threads = await _fetch_threads(pull_request_url)
    return comments.format_unresolved_comments(threads)


@mcp.tool(tags={"query"})
async def get_full_comments(
    pull_request_url: Annotated[
        str,
        Field(description="The full URL of the pull request (e.g., https://github.com/owner/repo/pull/123)"),
    ],
    unresolved_only: Annotated[
        bool,
        Field(description="If true, only show unresolved comments. If false, show all comments. Defaults to false."),
    ] = False,
) -> str:
    """Gets all review comments from a specific GitHub pull request with full content (no truncation)."""
    threads = await _fetch_threads(pull_request_url)
    return comments.format_full_comments(threads, unresolved_only=unresolved_only)


def configure_logging() -> None:
    """Send log records to stderr at the configured level; stdout carries the MCP transport.

    Loads the active settings, which the startup check and the tools then reuse.
    """
    logging.basicConfig(
        level=get_config().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
