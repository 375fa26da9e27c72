"""Demo mode collaborators for API testing without burning API keys.

Demo runs go through the real research workflow; only the search provider
and the text generator are replaced by canned, deterministic stand-ins.
"""

import os
from functools import lru_cache

from digest_research.config import ResearchSettings
from digest_research.models import GenerationOptions, SearchHit, SearchOptions


def is_demo_mode_allowed() -> bool:
    """Check if demo mode is allowed in current environment.

    Demo mode is only allowed in development and staging environments
    for security and resource reasons.
    """
    environment = os.getenv("ENVIRONMENT", "development")
    return environment in ("development", "staging")


_DEMO_HITS: tuple[SearchHit, ...] = (
    SearchHit(
        title="OpenTelemetry documentation: architecture overview",
        url="https://opentelemetry.io/docs/concepts/",
        snippet="Reference architecture, API and SDK design, and performance guidance for instrumenting services.",
        source="opentelemetry.io",
    ),
    SearchHit(
        title="Prometheus vs Datadog: comparison for platform teams",
        url="https://www.techcrunch.com/2025/observability-comparison",
        snippet="A side-by-side comparison of pricing, features and market position versus competitors.",
        source="techcrunch.com",
    ),
    SearchHit(
        title="Observability use cases in production at scale",
        url="https://engineering.example.com/blog/observability-in-production",
        snippet="Case study of a real-world deployment, with lessons learned and customer examples.",
        source="engineering.example.com",
    ),
    SearchHit(
        title="Limitations of tracing: challenges and drawbacks",
        url="https://news.ycombinator.com/item?id=4242",
        snippet="Users discuss issues with sampling, cost problems and known limitations of distributed tracing.",
        source="news.ycombinator.com",
    ),
    SearchHit(
        title="Getting started tutorial: observability guide",
        url="https://github.com/open-telemetry/opentelemetry-demo",
        snippet="An introduction and overview with example code, a tutorial and an implementation guide.",
        source="github.com",
    ),
)

_DEMO_QUERY_LINES = (
    "observability tooling overview",
    "observability vs monitoring comparison",
    "opentelemetry architecture performance",
    "observability case studies production",
    "distributed tracing limitations",
)

_DEMO_INSIGHTS = """Market Position: A widely adopted open standard with strong vendor backing.
Feature Gaps: managed storage, built-in alerting, long-term retention
Pricing Analysis: Free to adopt, with cost driven by the chosen storage backend.
User Sentiment: Positive overall, with complaints about configuration complexity.
Competitive Edge: vendor neutrality, broad language support, active community
Architecture: Collector pipeline with pluggable receivers, processors and exporters.
Performance: Low single-digit percent overhead reported under typical sampling.
Integration: Moderate effort, auto-instrumentation covers common frameworks.
Security: TLS between agents and collectors, no built-in secret redaction.
Limitations: sampling trade-offs, storage cost, steep learning curve
Scalability: Horizontal collector scaling behind a load balancer.
Adoption Readiness: Requires a tracing backend and service ownership of instrumentation.
Risk: cost overruns, incomplete instrumentation, alert fatigue
Timeline: Pilot one service, then expand per team over two quarters.
Success Metrics: mean time to detect, mean time to resolve, trace coverage
Next Steps: pick a backend, instrument a pilot service, define dashboards
Alternative: vendor agents, log-based monitoring"""

_DEMO_SUMMARY = (
    "Observability tooling has converged on open instrumentation standards, with "
    "OpenTelemetry as the common layer and a competitive market of storage and "
    "analysis backends. Teams report clear gains in incident response once tracing "
    "covers their critical paths, while cost and sampling remain the main concerns."
)


class DemoSearchProvider:
    """Returns the same canned hits for every query."""

    name = "demo"

    async def search(self, query: str, options: SearchOptions) -> list[SearchHit]:
        return list(_DEMO_HITS[: options.max_results])


class DemoTextGenerator:
    """Answers each prompt kind the workflow sends with canned text."""

    async def generate_text(self, prompt: str, options: GenerationOptions) -> str:
        lowered = prompt.lower()
        if "search queries" in lowered:
            return "\n".join(_DEMO_QUERY_LINES)
        if "executive summary for" in lowered:
            return _DEMO_SUMMARY
        if "insights" in lowered or "strategic recommendations" in lowered:
            return _DEMO_INSIGHTS
        return _DEMO_SUMMARY


@lru_cache(maxsize=1)
def get_demo_settings() -> ResearchSettings:
    return ResearchSettings(environment="demo", search_timeout_s=5.0, generation_timeout_s=5.0)
