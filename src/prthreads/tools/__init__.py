"""Tool implementations: plain functions that take a GitHubClient."""
