"""Main entry point for prthreads."""

from prthreads.server import configure_logging, mcp


def main() -> None:
    """Run the prthreads MCP server."""
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
