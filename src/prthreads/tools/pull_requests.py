"""Search for pull requests authored by the authenticated user."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from prthreads.models import PRState, PullRequestSummary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prthreads.github_api import GitHubClient

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 15

_FILTERED_STATES = frozenset({PRState.OPEN.value, PRState.CLOSED.value})


def build_search_query(state: str) -> str:
    """Build the search expression for the user's own pull requests.

    Only ``open`` and ``closed`` add a state qualifier; ``all`` and anything
    unrecognized search every state.
    """
    parts = ["is:pr", "author:@me"]
    if state in _FILTERED_STATES:
        parts.append(f"is:{state}")
    return " ".join(parts)


def parse_search_items(items: Sequence[dict[str, Any]]) -> list[PullRequestSummary]:
    """Turn raw ``/search/issues`` items into summaries."""
    return [
        PullRequestSummary(
            state=item.get("state", ""),
            title=item.get("title", ""),
            url=item.get("html_url", ""),
        )
        for item in items
    ]


def format_pull_requests(prs: Sequence[PullRequestSummary], total: int, state: str) -> str:
    """Render one entry per pull request: state, title, URL."""
    if total == 0 or not prs:
        return f"No pull requests found with state: {state}"

    lines = [f"Found {total} pull requests (state: {state}):"]
    if total > len(prs):
        lines.append(f"(showing the {len(prs)} most recently updated)")
    lines.append("")
    for pr in prs:
        lines.append(f"- [State: {pr.state}] {pr.title}")
        lines.append(f"  {pr.url}")
    return "\n".join(lines) + "\n"


async def list_pull_requests(client: GitHubClient, state: str = PRState.OPEN.value) -> str:
    """Search the user's pull requests, most recently updated first.

    Raises:
        SearchFailedError: On transport failure or a non-2xx response.
    """
    query = build_search_query(state)
    result = await client.search_issues(query, sort="updated", order="desc", per_page=SEARCH_LIMIT)
    total = result.get("total_count", 0)
    prs = parse_search_items(result.get("items", [])[:SEARCH_LIMIT])
    logger.info("Found %d PRs (query=%r).", total, query)
    return format_pull_requests(prs, total, state)
