"""Article-level helpers: follow-up queries for one article, topic analysis for many."""

import asyncio

from digest_research.config import ResearchSettings, get_settings
from digest_research.exceptions import QueryGenerationError, TopicAnalysisError
from digest_research.generation import TextGenerator
from digest_research.logging import get_logger
from digest_research.models import ArticleInput, GenerationOptions
from digest_research.text import clean_generated_lines, dedupe_case_insensitive, truncate_content

log = get_logger("digest_research.topics")

ARTICLE_QUERY_OPTIONS = GenerationOptions(max_tokens=300, temperature=0.7)
TOPIC_ANALYSIS_OPTIONS = GenerationOptions(max_tokens=400, temperature=0.5)

ARTICLE_CONTENT_LIMIT = 1000
TOPIC_CONTENT_LIMIT = 200
MAX_ARTICLE_QUERIES = 5
MAX_TOPICS = 7


async def generate_article_queries(
    article: ArticleInput,
    generator: TextGenerator,
    settings: ResearchSettings | None = None,
) -> list[str]:
    """Three to five follow-up search queries for a single article.

    Raises:
        QueryGenerationError: when generation fails or yields no usable query.
    """
    settings = settings or get_settings()
    content = truncate_content(article.content, ARTICLE_CONTENT_LIMIT)
    prompt = f"""Based on this article, generate 3-5 search queries that would help find related
information, competing viewpoints, or deeper context.

Title: {article.title}
Content: {content}

Format: Return only the search queries, one per line."""

    try:
        async with asyncio.timeout(settings.generation_timeout_s):
            response = await generator.generate_text(prompt, ARTICLE_QUERY_OPTIONS)
    except Exception as e:
        raise QueryGenerationError(intent="article", topic=article.title, reason=str(e) or type(e).__name__) from e

    queries = dedupe_case_insensitive(clean_generated_lines(response))[:MAX_ARTICLE_QUERIES]
    if not queries:
        raise QueryGenerationError(intent="article", topic=article.title, reason="no usable queries in response")

    log.info("topics.article_queries_generated", title=article.title, query_count=len(queries))
    return queries


async def analyze_topics(
    articles: list[ArticleInput],
    generator: TextGenerator,
    settings: ResearchSettings | None = None,
) -> list[str]:
    """Main themes across a set of articles as "Topic: description" lines.

    Raises:
        TopicAnalysisError: when generation fails.
    """
    if not articles:
        return []

    settings = settings or get_settings()
    blocks = [
        f"Article {i}: {article.title}\n{truncate_content(article.content, TOPIC_CONTENT_LIMIT)}"
        for i, article in enumerate(articles, 1)
    ]
    joined = "\n\n".join(blocks)
    prompt = f"""Analyze these articles and identify the 5-7 main topics or themes they cover.

{joined}

Format: one topic per line as "Topic: short description"."""

    try:
        async with asyncio.timeout(settings.generation_timeout_s):
            response = await generator.generate_text(prompt, TOPIC_ANALYSIS_OPTIONS)
    except Exception as e:
        raise TopicAnalysisError(reason=str(e) or type(e).__name__) from e

    topics = [line for line in clean_generated_lines(response, keep_labels=True) if ":" in line][:MAX_TOPICS]
    log.info("topics.analyzed", article_count=len(articles), topic_count=len(topics))
    return topics
