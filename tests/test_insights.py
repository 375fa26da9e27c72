"""Tests for insight synthesis."""

import pytest

from digest_research.clustering import cluster_results
from digest_research.config import ResearchSettings
from digest_research.exceptions import InsightGenerationError
from digest_research.insights import (
    PLACEHOLDER_SUMMARY,
    SECTION_OPTIONS,
    SUMMARY_OPTIONS,
    InsightSynthesizer,
    calculate_confidence,
    extract_competitors,
    extract_list,
    extract_section,
    identify_data_gaps,
)
from digest_research.models import ClusterCategory, ClusteringResult, ResearchResult
from tests.fakes import FakeTextGenerator

COMPETITIVE_PROMPT = "competitive intelligence insights"
TECHNICAL_PROMPT = "technical assessment insights"
STRATEGIC_PROMPT = "strategic recommendations"
SUMMARY_PROMPT = "executive summary for"

SECTION_TEXT = """Market Position: Leading open standard for telemetry.
Feature Gaps: managed storage, built-in alerting
Architecture: Collector pipeline with pluggable exporters.
Risk: cost overruns, vendor lock-in, skill gaps"""


def _clustering_with_results() -> ClusteringResult:
    return cluster_results(
        [
            ResearchResult(title="Prometheus vs Datadog comparison", snippet="A strong alternative to Grafana", relevance=0.8),
            ResearchResult(title="Kubernetes architecture and api", relevance=0.7),
            ResearchResult(title="Hello world", relevance=0.3),
        ]
    )


class TestCalculateConfidence:
    def test__nothing_categorized__is_zero(self) -> None:
        assert calculate_confidence(ClusteringResult(overall_quality=0.9)) == 0.0

    def test__volume_bonus_and_gap_penalty(self) -> None:
        clustering = ClusteringResult(
            overall_quality=0.7, coverage_gaps=["gap"], total_categorized=12, uncategorized_count=2
        )
        assert calculate_confidence(clustering) == pytest.approx(0.7)

    def test__large_volume_gets_both_bonuses(self) -> None:
        clustering = ClusteringResult(overall_quality=0.5, total_categorized=25)
        assert calculate_confidence(clustering) == pytest.approx(0.7)

    def test__many_uncategorized_is_penalized(self) -> None:
        clustering = ClusteringResult(overall_quality=0.5, total_categorized=4, uncategorized_count=3)
        assert calculate_confidence(clustering) == pytest.approx(0.35)

    def test__clamped_to_unit_interval(self) -> None:
        low = ClusteringResult(overall_quality=0.2, coverage_gaps=["a", "b", "c", "d", "e"], total_categorized=1)
        high = ClusteringResult(overall_quality=1.0, total_categorized=30)
        assert calculate_confidence(low) == 0.0
        assert calculate_confidence(high) == 1.0


class TestIdentifyDataGaps:
    def test__thin_categories_add_gaps(self) -> None:
        clustering = ClusteringResult(
            categories=[
                ClusterCategory(
                    name="Competitive Analysis",
                    description="",
                    priority=2,
                    results=[ResearchResult() for _ in range(3)],
                ),
                ClusterCategory(name="Technical Details", description="", priority=3, results=[ResearchResult()]),
            ],
            coverage_gaps=["No Overview information found"],
            total_categorized=4,
        )

        assert identify_data_gaps(clustering) == [
            "No Overview information found",
            "Limited technical implementation details",
            "Missing real-world use case examples",
        ]


class TestParsing:
    def test__extract_section__joins_following_lines(self) -> None:
        text = "Intro\nMarket Position: Leader in the space\nStrong brand\n\nOther"
        assert extract_section(text, "market position", "Market Position") == (
            "Market Position: Leader in the space Strong brand"
        )

    def test__extract_section__fallback_when_missing(self) -> None:
        assert extract_section("nothing relevant", "pricing", "Pricing Analysis") == (
            "No specific Pricing Analysis information found in research results."
        )

    def test__extract_list__splits_on_commas(self) -> None:
        text = "Risk: cost overruns, vendor lock-in, skill gaps"
        assert extract_list(text, "risk", "challenges") == ["Risk: cost overruns", "vendor lock-in", "skill gaps"]

    def test__extract_list__fallback_when_missing(self) -> None:
        assert extract_list("", "next steps", "action items") == [
            "No specific action items identified in research results"
        ]

    def test__extract_competitors__words_after_markers(self) -> None:
        results = [
            ResearchResult(title="Prometheus vs Datadog", snippet="A strong alternative to Grafana"),
            ResearchResult(title="Datadog competitor: Honeycomb"),
        ]
        assert extract_competitors(results) == ["datadog", "grafana", "honeycomb"]


class TestInsightSynthesizer:
    @pytest.mark.asyncio
    async def test__empty_clustering__returns_placeholder(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator()

        insights = await InsightSynthesizer(generator, settings).synthesize_insights("observability", ClusteringResult())

        assert insights.executive_summary == PLACEHOLDER_SUMMARY
        assert insights.confidence == 0.0
        assert insights.data_gaps == ["No research results available"]
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test__builds_all_sections(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(
            responses={SUMMARY_PROMPT: "  Adopt OpenTelemetry incrementally.  "},
            default=SECTION_TEXT,
        )
        clustering = _clustering_with_results()

        insights = await InsightSynthesizer(generator, settings).synthesize_insights("observability", clustering)

        assert len(generator.calls) == 4
        assert [options for _, options in generator.calls] == [SECTION_OPTIONS] * 3 + [SUMMARY_OPTIONS]
        assert insights.executive_summary == "Adopt OpenTelemetry incrementally."
        assert insights.competitive.market_position.startswith("Market Position: Leading open standard")
        assert insights.competitive.key_competitors == ["datadog", "grafana"]
        assert insights.technical.architecture_overview.startswith("Architecture: Collector pipeline")
        assert insights.strategic.risk_assessment[0] == "Risk: cost overruns"
        assert insights.confidence == pytest.approx(calculate_confidence(clustering))
        assert "Missing real-world use case examples" in insights.data_gaps

    @pytest.mark.asyncio
    async def test__competitive_prompt_notes_missing_data(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(default=SECTION_TEXT)
        clustering = cluster_results([ResearchResult(title="Kubernetes architecture and api", relevance=0.7)])

        await InsightSynthesizer(generator, settings).synthesize_insights("observability", clustering)

        competitive_prompt = generator.calls[0][0]
        assert COMPETITIVE_PROMPT in competitive_prompt
        assert "(Limited competitive analysis data available)" in competitive_prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "marker,section",
        [
            (COMPETITIVE_PROMPT, "competitive"),
            (TECHNICAL_PROMPT, "technical"),
            (STRATEGIC_PROMPT, "strategic"),
            (SUMMARY_PROMPT, "executive summary"),
        ],
    )
    async def test__any_section_failure_raises(self, settings: ResearchSettings, marker: str, section: str) -> None:
        generator = FakeTextGenerator(responses={marker: RuntimeError("rate limited")}, default=SECTION_TEXT)

        with pytest.raises(InsightGenerationError) as exc_info:
            await InsightSynthesizer(generator, settings).synthesize_insights("observability", _clustering_with_results())

        assert exc_info.value.section == section
        assert "rate limited" in str(exc_info.value)
