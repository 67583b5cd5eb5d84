"""prthreads: MCP server exposing your GitHub pull requests and their review threads."""
