"""Environment-driven settings for the research engine."""

import os
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEXT_MODEL = os.getenv("RESEARCH_TEXT_MODEL", "google-gla:gemini-2.5-flash")


class ResearchSettings(BaseSettings):
    """Tunables for one research engine instance.

    Read from `RESEARCH_*` variables; the Tavily key, search depth and
    `ENVIRONMENT` keep their unprefixed names. Timeouts bound each external
    call individually; an expired timeout is handled like any other failure
    of that call.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESEARCH_",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    text_model: str = DEFAULT_TEXT_MODEL
    max_results_per_query: int = Field(default=10, ge=1, le=50)
    search_language: str = Field(default="en", min_length=2)
    search_timeout_s: float = Field(default=30.0, gt=0)
    generation_timeout_s: float = Field(default=60.0, gt=0)
    summary_result_limit: int = Field(default=10, ge=1)

    tavily_api_key: str = Field(default="", validation_alias=AliasChoices("TAVILY_API_KEY", "tavily_api_key"))
    tavily_search_depth: str = Field(
        default="basic",
        pattern="^(basic|advanced)$",
        validation_alias=AliasChoices("TAVILY_SEARCH_DEPTH", "tavily_search_depth"),
    )
    environment: str = Field(default="development", validation_alias=AliasChoices("ENVIRONMENT", "environment"))


@lru_cache(maxsize=1)
def get_settings() -> ResearchSettings:
    """Cached settings for production; tests pass ResearchSettings directly."""
    return ResearchSettings()
