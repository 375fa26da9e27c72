"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError
from pytest import MonkeyPatch

from digest_research.config import ResearchSettings, get_settings


def test__settings__uses_defaults_when_unset(monkeypatch: MonkeyPatch) -> None:
    for name in ("RESEARCH_MAX_RESULTS_PER_QUERY", "RESEARCH_SEARCH_TIMEOUT_S", "TAVILY_API_KEY", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)

    settings = ResearchSettings()

    assert settings.max_results_per_query == 10
    assert settings.search_timeout_s == 30.0
    assert settings.tavily_api_key == ""
    assert settings.environment == "development"


def test__settings__reads_overrides(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("RESEARCH_MAX_RESULTS_PER_QUERY", "5")
    monkeypatch.setenv("RESEARCH_GENERATION_TIMEOUT_S", "12.5")
    monkeypatch.setenv("TAVILY_API_KEY", "tvly-test")
    monkeypatch.setenv("TAVILY_SEARCH_DEPTH", "advanced")
    monkeypatch.setenv("ENVIRONMENT", "staging")

    settings = ResearchSettings()

    assert settings.max_results_per_query == 5
    assert settings.generation_timeout_s == 12.5
    assert settings.tavily_api_key == "tvly-test"
    assert settings.tavily_search_depth == "advanced"
    assert settings.environment == "staging"


def test__settings__keyword_arguments_win_over_environment(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("RESEARCH_SEARCH_TIMEOUT_S", "9")

    settings = ResearchSettings(environment="demo", search_timeout_s=2.0)

    assert settings.environment == "demo"
    assert settings.search_timeout_s == 2.0


@pytest.mark.parametrize(
    "name,value",
    [
        ("RESEARCH_MAX_RESULTS_PER_QUERY", "ten"),
        ("RESEARCH_SEARCH_TIMEOUT_S", "soon"),
        ("RESEARCH_MAX_RESULTS_PER_QUERY", "0"),
        ("RESEARCH_MAX_RESULTS_PER_QUERY", "51"),
        ("RESEARCH_SEARCH_TIMEOUT_S", "-5"),
        ("RESEARCH_GENERATION_TIMEOUT_S", "0"),
        ("RESEARCH_SUMMARY_RESULT_LIMIT", "0"),
        ("TAVILY_SEARCH_DEPTH", "deep"),
    ],
)
def test__settings__rejects_invalid_values_at_load(monkeypatch: MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        ResearchSettings()


def test__settings__is_frozen() -> None:
    settings = ResearchSettings()
    with pytest.raises(ValidationError):
        settings.search_timeout_s = 1.0  # type: ignore[misc]


def test__get_settings__caches_instance() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
