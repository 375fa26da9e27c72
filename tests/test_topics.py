"""Tests for article-level query generation and topic analysis."""

import pytest

from digest_research.config import ResearchSettings
from digest_research.exceptions import QueryGenerationError, TopicAnalysisError
from digest_research.models import ArticleInput
from digest_research.topics import ARTICLE_QUERY_OPTIONS, TOPIC_ANALYSIS_OPTIONS, analyze_topics, generate_article_queries
from tests.fakes import FakeTextGenerator

ARTICLE = ArticleInput(title="OpenTelemetry reaches 1.0", content="The collector is now stable. " * 100)


class TestGenerateArticleQueries:
    @pytest.mark.asyncio
    async def test__returns_cleaned_queries(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(
            default="1. collector stability\n2. OpenTelemetry vs Jaeger\n3. collector STABILITY\n4. a\n5. otel adoption"
        )

        queries = await generate_article_queries(ARTICLE, generator, settings)

        assert queries == ["collector stability", "OpenTelemetry vs Jaeger", "otel adoption"]
        prompt, options = generator.calls[0]
        assert options == ARTICLE_QUERY_OPTIONS
        assert "OpenTelemetry reaches 1.0" in prompt
        assert ARTICLE.content not in prompt

    @pytest.mark.asyncio
    async def test__caps_at_five_queries(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(default="\n".join(f"follow up {i}" for i in range(8)))

        assert len(await generate_article_queries(ARTICLE, generator, settings)) == 5

    @pytest.mark.asyncio
    async def test__failure_raises_query_generation_error(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(default=RuntimeError("model down"))

        with pytest.raises(QueryGenerationError) as exc_info:
            await generate_article_queries(ARTICLE, generator, settings)

        assert exc_info.value.intent == "article"

    @pytest.mark.asyncio
    async def test__empty_response_raises(self, settings: ResearchSettings) -> None:
        with pytest.raises(QueryGenerationError, match="no usable queries"):
            await generate_article_queries(ARTICLE, FakeTextGenerator(default=""), settings)


class TestAnalyzeTopics:
    @pytest.mark.asyncio
    async def test__keeps_topic_lines(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(
            default="Here are the topics:\n1. Observability: tracing and metrics\nmisc line\n- Cost: storage pricing"
        )

        topics = await analyze_topics([ARTICLE, ArticleInput(title="Second", content="More")], generator, settings)

        assert topics == ["Observability: tracing and metrics", "Cost: storage pricing"]
        prompt, options = generator.calls[0]
        assert options == TOPIC_ANALYSIS_OPTIONS
        assert "Article 2: Second" in prompt

    @pytest.mark.asyncio
    async def test__bold_labels_keep_topic_name(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator(default="1. **Observability:** tracing and metrics\n2. **Cost:** storage pricing")

        topics = await analyze_topics([ARTICLE], generator, settings)

        assert topics == ["Observability: tracing and metrics", "Cost: storage pricing"]

    @pytest.mark.asyncio
    async def test__no_articles_skips_generation(self, settings: ResearchSettings) -> None:
        generator = FakeTextGenerator()

        assert await analyze_topics([], generator, settings) == []
        assert generator.calls == []

    @pytest.mark.asyncio
    async def test__failure_raises_topic_analysis_error(self, settings: ResearchSettings) -> None:
        with pytest.raises(TopicAnalysisError, match="model down"):
            await analyze_topics([ARTICLE], FakeTextGenerator(default=RuntimeError("model down")), settings)
