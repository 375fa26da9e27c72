"""Follow-up query generation from the best early results."""

import asyncio

from digest_research.config import ResearchSettings
from digest_research.generation import TextGenerator
from digest_research.logging import get_logger
from digest_research.models import GenerationOptions, Query, QueryIntent, ResearchResult
from digest_research.text import clean_generated_lines, dedupe_case_insensitive

log = get_logger("digest_research.refinement")

REFINEMENT_OPTIONS = GenerationOptions(max_tokens=300, temperature=0.7)

TOP_RESULT_WINDOW = 10
FALLBACK_RESULT_WINDOW = 5
HIGH_VALUE_RELEVANCE = 0.6


def refinement_query_count(depth: int) -> int:
    if depth <= 3:
        return 2
    if depth == 4:
        return 3
    return 4


def select_context_results(ranked: list[ResearchResult]) -> list[ResearchResult]:
    """High-value results among the top 10, or the top 5 when none qualify."""
    window = ranked[:TOP_RESULT_WINDOW]
    high_value = [result for result in window if result.relevance > HIGH_VALUE_RELEVANCE]
    return high_value or ranked[:FALLBACK_RESULT_WINDOW]


def _build_prompt(topic: str, context: list[ResearchResult], count: int) -> str:
    lines = [f"{i}. {result.title}\n   {result.snippet}\n   Source: {result.source}" for i, result in enumerate(context, 1)]
    findings = "\n".join(lines)
    return f"""We are researching "{topic}". These are the most relevant results found so far:

{findings}

Generate {count} follow-up search queries that dig deeper into the most promising
leads above or cover angles they are missing. Keep each query short (3-8 words).

Format: Return only the search queries, one per line."""


class RefinementEngine:
    def __init__(self, generator: TextGenerator, settings: ResearchSettings) -> None:
        self.generator = generator
        self.timeout_s = settings.generation_timeout_s

    async def generate_refinement_queries(self, topic: str, ranked: list[ResearchResult], depth: int) -> list[Query]:
        """Follow-up queries for a ranked result set. Never raises; failures yield []."""
        context = select_context_results(ranked)
        if not context:
            log.info("refinement.skipped", reason="no results")
            return []

        count = refinement_query_count(depth)
        prompt = _build_prompt(topic, context, count)
        try:
            async with asyncio.timeout(self.timeout_s):
                response = await self.generator.generate_text(prompt, REFINEMENT_OPTIONS)
        except Exception as e:
            log.warning("refinement.failed", error=str(e) or type(e).__name__)
            return []

        texts = dedupe_case_insensitive(clean_generated_lines(response))[:count]
        log.info("refinement.completed", context_results=len(context), query_count=len(texts))
        return [Query(text=text, intent=QueryIntent.REFINEMENT, depth=depth) for text in texts]
