"""CLI for prthreads, built on cyclopts (same framework as FastMCP's CLI)."""

from __future__ import annotations

import asyncio
import sys

import cyclopts
from rich.console import Console

app = cyclopts.App(
    name="prthreads",
    help="prthreads: GitHub pull request review threads over MCP.",
)

_console = Console(stderr=True)

_MASK_MIN_LENGTH = 8


@app.default
def serve() -> None:
    """Run the prthreads MCP server over stdio (default command)."""
    from prthreads.server import configure_logging, mcp  # noqa: PLC0415

    configure_logging()
    mcp.run()


@app.command(name="check-auth")
def check_auth() -> None:
    """Validate the configured GitHub token and print the authenticated login.

    Exits with status 1 if the token is missing or GitHub rejects it.
    """
    from prthreads.config import load_config  # noqa: PLC0415
    from prthreads.github_api import GitHubError, validate_credentials  # noqa: PLC0415
    from prthreads.server import build_client  # noqa: PLC0415

    settings = load_config()
    _console.print(f"API URL: {settings.api_url}")
    _console.print(f"Token:   {_mask_token(settings.github_token)}")

    try:
        login = asyncio.run(validate_credentials(build_client(settings)))
    except GitHubError as exc:
        _console.print(f"[red]✗[/red] GitHub authentication failed: {exc}")
        sys.exit(1)

    _console.print(f"[green]✓[/green] Authenticated as: {login}")


def _mask_token(token: str | None) -> str:
    """Mask all but the first and last two characters."""
    if not token:
        return "(not set)"
    if len(token) <= _MASK_MIN_LENGTH:
        return "****"
    return token[:2] + "*" * (len(token) - 4) + token[-2:]
