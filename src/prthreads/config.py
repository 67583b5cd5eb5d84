"""Environment-driven configuration.

Settings are read once at startup with :func:`load_config`, validated by
Pydantic, and kept as the active config for the rest of the process.
Tests swap the active instance with :func:`set_config`.
"""

from __future__ import annotations

import logging

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prthreads.github_api import DEFAULT_API_URL, GitHubAuthError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Top-level prthreads configuration."""

    model_config = SettingsConfigDict(env_prefix="PRTHREADS_", extra="ignore")

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_TOKEN", "GH_TOKEN"),
        description="Personal access token used for every GitHub call",
    )
    api_url: str = Field(default=DEFAULT_API_URL, description="GitHub REST API base URL")
    graphql_url: str | None = Field(default=None, description="GraphQL endpoint; defaults to <api_url>/graphql")
    log_level: str = Field(default="INFO", description="Root log level for the server process")

    @field_validator("github_token")
    @classmethod
    def _blank_token_is_missing(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value.strip() if value else value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level {value!r}"
            raise ValueError(msg)
        return level

    def require_token(self) -> str:
        """Return the token or raise :exc:`GitHubAuthError` if unset."""
        if not self.github_token:
            raise GitHubAuthError
        return self.github_token


_state: dict[str, Settings] = {}


def load_config() -> Settings:
    """Build settings from the environment."""
    settings = Settings()
    logger.debug("Loaded settings: api_url=%s graphql_url=%s", settings.api_url, settings.graphql_url)
    return settings


def get_config() -> Settings:
    """Return the active settings, loading them from the environment on first use."""
    if "active" not in _state:
        _state["active"] = load_config()
    return _state["active"]


def set_config(settings: Settings) -> None:
    """Set the active settings (called during server startup and by tests)."""
    _state["active"] = settings


def reset_config() -> None:
    """Forget the active settings so the next :func:`get_config` reloads them."""
    _state.pop("active", None)
