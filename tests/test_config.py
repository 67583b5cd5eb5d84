"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from prthreads.config import Settings, get_config, load_config, reset_config, set_config
from prthreads.github_api import GitHubAuthError


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.github_token is None
        assert settings.api_url == "https://api.github.com"
        assert settings.graphql_url is None
        assert settings.log_level == "INFO"

    def test_reads_github_token(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_abc")
        assert Settings().github_token == "ghp_abc"

    def test_falls_back_to_gh_token(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GH_TOKEN", "ghp_gh")
        assert Settings().github_token == "ghp_gh"

    def test_blank_token_treated_as_missing(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_TOKEN", "   ")
        assert Settings().github_token is None

    def test_prefixed_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PRTHREADS_API_URL", "https://ghe.example.com/api/v3")
        monkeypatch.setenv("PRTHREADS_GRAPHQL_URL", "https://ghe.example.com/api/graphql")
        monkeypatch.setenv("PRTHREADS_LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.api_url == "https://ghe.example.com/api/v3"
        assert settings.graphql_url == "https://ghe.example.com/api/graphql"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PRTHREADS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError, match="Unknown log level"):
            Settings()


class TestRequireToken:
    def test_returns_token(self):
        assert Settings(GITHUB_TOKEN="ghp_x").require_token() == "ghp_x"

    def test_missing_token_raises(self):
        with pytest.raises(GitHubAuthError, match="GITHUB_TOKEN"):
            Settings().require_token()


class TestActiveConfig:
    def test_get_config_loads_once(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GITHUB_TOKEN", "first")
        first = get_config()
        monkeypatch.setenv("GITHUB_TOKEN", "second")
        assert get_config() is first
        reset_config()
        assert get_config().github_token == "second"

    def test_set_config_overrides(self):
        custom = Settings(GITHUB_TOKEN="custom")
        set_config(custom)
        assert get_config() is custom

    def test_load_config_reads_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GH_TOKEN", "tok")
        assert load_config().github_token == "tok"
