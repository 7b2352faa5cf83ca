"""Tests for environment-based settings."""
from gitflex.config import load_settings
from gitflex.infrastructure.github_client import GITHUB_API_URL


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("GITHUB_TOKEN", "GITHUB_API_URL", "RANDOM_USER_COUNT",
                 "ANALYSIS_CONCURRENCY", "MAX_RETRY_WAIT"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.github_token is None
    assert settings.github_api_url == GITHUB_API_URL
    assert settings.random_user_count == 5
    assert settings.analysis_concurrency == 5
    assert settings.max_retry_wait == 60.0


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_example")
    monkeypatch.setenv("RANDOM_USER_COUNT", "3")
    monkeypatch.setenv("MAX_RETRY_WAIT", "5")

    settings = load_settings()

    assert settings.github_token == "ghp_example"
    assert settings.random_user_count == 3
    assert settings.max_retry_wait == 5.0
