"""Pydantic models for prthreads."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PRState(StrEnum):
    """State filters accepted by ``list_pull_requests``."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


class PRReference(BaseModel):
    """Owner, repository and number parsed from a pull request URL."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1, description="Repository owner (user or organization)")
    repo: str = Field(min_length=1, description="Repository name")
    number: int = Field(ge=0, description="Pull request number")


class PullRequestSummary(BaseModel):
    """One pull request from a search result."""

    model_config = ConfigDict(frozen=True)

    state: str = Field(description="open or closed")
    title: str = Field(description="Pull request title")
    url: str = Field(description="Pull request web URL")


class Comment(BaseModel):
    """A single comment within a review thread."""

    model_config = ConfigDict(frozen=True)

    author: str = Field(default="ghost", description="GitHub login of the comment author")
    body: str = Field(default="", description="Raw comment body")
    path: str = Field(default="", description="File path the comment is on")
    line: int | None = Field(default=None, description="Line number in the file, if any")
    url: str = Field(default="", description="Permalink to the comment")
    created_at: datetime | None = Field(default=None, description="When the comment was posted")


class ReviewThread(BaseModel):
    """A review thread on a pull request."""

    model_config = ConfigDict(frozen=True)

    is_resolved: bool = Field(default=False, description="Whether the thread was marked resolved")
    comments: tuple[Comment, ...] = Field(default=(), description="Comments in server (chronological) order")
