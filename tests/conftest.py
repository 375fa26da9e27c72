import pytest

from digest_research.config import ResearchSettings
from digest_research.logging import clear_run_context


@pytest.fixture
def settings() -> ResearchSettings:
    return ResearchSettings(search_timeout_s=2.0, generation_timeout_s=2.0)


@pytest.fixture(autouse=True)
def _clear_log_context() -> None:
    clear_run_context()
