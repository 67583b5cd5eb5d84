"""Global test fixtures and GraphQL node factories for prthreads."""

from __future__ import annotations

from typing import Any

import pytest

from prthreads.config import reset_config

PR_URL = "https://github.com/owner/repo/pull/42"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Start every test without tokens or PRTHREADS_* overrides and a fresh config."""
    for var in ("GITHUB_TOKEN", "GH_TOKEN", "PRTHREADS_API_URL", "PRTHREADS_GRAPHQL_URL", "PRTHREADS_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


def comment_node(
    author: str | None = "reviewer",
    body: str = "Consider adding error handling here.",
    path: str = "src/app.py",
    line: int | None = 42,
    url: str = "https://github.com/owner/repo/pull/42#discussion_r1",
    created_at: str = "2026-02-06T10:00:00Z",
) -> dict[str, Any]:
    return {
        "author": {"login": author} if author else None,
        "body": body,
        "path": path,
        "line": line,
        "url": url,
        "createdAt": created_at,
    }


def thread_node(*comments: dict[str, Any], resolved: bool = False) -> dict[str, Any]:
    return {"isResolved": resolved, "comments": {"nodes": list(comments)}}


def threads_data(*threads: dict[str, Any]) -> dict[str, Any]:
    """The ``data`` object of a review-threads response."""
    return {"repository": {"pullRequest": {"reviewThreads": {"nodes": list(threads)}}}}
