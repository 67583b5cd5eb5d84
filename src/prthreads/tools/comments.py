"""Review-thread fetching and the two comment report formatters."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from prthreads.github_api import QueryFailedError
from prthreads.queries import REVIEW_THREADS_QUERY, ReviewThreadsResponse

if TYPE_CHECKING:
    from collections.abc import Sequence

    from prthreads.github_api import GitHubClient
    from prthreads.models import Comment, PRReference, ReviewThread

logger = logging.getLogger(__name__)

# Bodies longer than this, spanning more than _PREVIEW_LINES lines, are cut to a preview.
_PREVIEW_CHARS = 200
_PREVIEW_LINES = 3

NO_UNRESOLVED_MESSAGE = "No unresolved comments found on that PR."
NO_COMMENTS_MESSAGE = "No comments found on that PR."


async def fetch_review_threads(client: GitHubClient, ref: PRReference) -> list[ReviewThread]:
    """Fetch the first page of review threads for a pull request.

    Raises:
        QueryFailedError: If the request fails or the response does not
            contain the repository and pull request.
    """
    variables = {"owner": ref.owner, "repo": ref.repo, "prNumber": ref.number}
    data = await client.graphql(REVIEW_THREADS_QUERY, variables)
    try:
        threads = ReviewThreadsResponse.model_validate(data).to_threads()
    except (ValidationError, ValueError) as exc:
        msg = f"{ref.owner}/{ref.repo}#{ref.number}: {exc}"
        raise QueryFailedError(msg) from exc
    logger.info("Fetched %d review threads for %s/%s#%d", len(threads), ref.owner, ref.repo, ref.number)
    return threads


def _line_label(comment: Comment) -> int:
    return comment.line if comment.line is not None else 0


def preview_body(body: str) -> str:
    """Shorten a long, multi-line comment body to its first lines.

    Only bodies over 200 characters that also span more than three lines are
    shortened; the elided line count follows on its own line.
    """
    if len(body) <= _PREVIEW_CHARS:
        return body
    lines = body.split("\n")
    if len(lines) <= _PREVIEW_LINES:
        return body
    preview = "\n".join(lines[:_PREVIEW_LINES])
    return f"{preview}\n… +{len(lines) - _PREVIEW_LINES} lines (ctrl+o to expand)"


def format_unresolved_comments(threads: Sequence[ReviewThread]) -> str:
    """Render unresolved threads with long bodies previewed.

    Threads without comments are neither shown nor counted.
    """
    blocks: list[str] = []
    for thread in threads:
        # Comment-less threads are left out of the count too, so it always matches the blocks shown.
        if thread.is_resolved or not thread.comments:
            continue
        first = thread.comments[0]
        lines = [f"Unresolved Thread on: {first.path} (Line {_line_label(first)})"]
        lines.extend(f"  - @{c.author}: {preview_body(c.body)}" for c in thread.comments)
        lines.append(f"  (Thread Link: {first.url})")
        blocks.append("\n".join(lines) + "\n\n")

    if not blocks:
        return NO_UNRESOLVED_MESSAGE
    return f"Found {len(blocks)} unresolved comment threads:\n\n" + "".join(blocks)


def format_full_comments(threads: Sequence[ReviewThread], *, unresolved_only: bool = False) -> str:
    """Render threads with every comment body in full.

    With ``unresolved_only`` resolved threads are dropped. Threads without
    comments are neither shown nor counted.
    """
    blocks: list[str] = []
    for thread in threads:
        if unresolved_only and thread.is_resolved:
            continue
        if not thread.comments:
            continue
        first = thread.comments[0]
        status = "Resolved" if thread.is_resolved else "Unresolved"
        parts = [f"=== {status} Thread on: {first.path} (Line {_line_label(first)}) ===\n"]
        for i, comment in enumerate(thread.comments):
            if i > 0:
                parts.append("\n--- Reply ---\n")
            parts.append(f"@{comment.author}:\n{comment.body}\n")
        parts.append(f"\n(Thread Link: {first.url})\n\n")
        blocks.append("".join(parts))

    if not blocks:
        return NO_UNRESOLVED_MESSAGE if unresolved_only else NO_COMMENTS_MESSAGE
    qualifier = " unresolved" if unresolved_only else ""
    return f"Found {len(blocks)}{qualifier} comment threads:\n\n" + "".join(blocks)
