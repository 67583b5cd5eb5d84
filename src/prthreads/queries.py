"""GraphQL query text and response schema for review threads.

The response models mirror the query's nesting exactly and use GitHub's
camelCase field names. :meth:`ReviewThreadsResponse.to_threads` converts them
to the in-memory :mod:`prthreads.models` types.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime

from pydantic import BaseModel, ConfigDict, Field

from prthreads.models import Comment, ReviewThread

MAX_THREADS = 100
MAX_COMMENTS_PER_THREAD = 20

REVIEW_THREADS_QUERY = f"""
query($owner: String!, $repo: String!, $prNumber: Int!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $prNumber) {{
      reviewThreads(first: {MAX_THREADS}) {{
        nodes {{
          isResolved
          comments(first: {MAX_COMMENTS_PER_THREAD}) {{
            nodes {{
              author {{ login }}
              body
              path
              line
              url
              createdAt
            }}
          }}
        }}
      }}
    }}
  }}
}}
"""


class _Node(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AuthorNode(_Node):
    login: str


class CommentNode(_Node):
    author: AuthorNode | None = None
    body: str = ""
    path: str | None = None
    line: int | None = None
    url: str = ""
    created_at: datetime | None = Field(default=None, alias="createdAt")


class CommentConnection(_Node):
    nodes: list[CommentNode] = Field(default_factory=list)


class ThreadNode(_Node):
    is_resolved: bool = Field(alias="isResolved")
    comments: CommentConnection = Field(default_factory=CommentConnection)


class ThreadConnection(_Node):
    nodes: list[ThreadNode] = Field(default_factory=list)


class PullRequestNode(_Node):
    review_threads: ThreadConnection = Field(default_factory=ThreadConnection, alias="reviewThreads")


class RepositoryNode(_Node):
    pull_request: PullRequestNode | None = Field(default=None, alias="pullRequest")


class ReviewThreadsResponse(_Node):
    """The ``data`` object returned for :data:`REVIEW_THREADS_QUERY`."""

    repository: RepositoryNode | None = None

    def to_threads(self) -> list[ReviewThread]:
        """Convert to in-memory threads, keeping server order.

        Raises:
            ValueError: If the repository or pull request is missing.
        """
        if self.repository is None:
            msg = "repository not found"
            raise ValueError(msg)
        if self.repository.pull_request is None:
            msg = "pull request not found"
            raise ValueError(msg)
        return [
            ReviewThread(
                is_resolved=node.is_resolved,
                comments=tuple(_to_comment(c) for c in node.comments.nodes),
            )
            for node in self.repository.pull_request.review_threads.nodes
        ]


def _to_comment(node: CommentNode) -> Comment:
    return Comment(
        author=node.author.login if node.author else "ghost",
        body=node.body,
        path=node.path or "",
        line=node.line,
        url=node.url,
        created_at=node.created_at,
    )
