"""Query planning: intent batches and phrase expansion."""

import asyncio
from itertools import zip_longest

from digest_research.catalog import STOP_WORDS
from digest_research.config import ResearchSettings
from digest_research.exceptions import QueryGenerationError
from digest_research.generation import TextGenerator
from digest_research.logging import get_logger
from digest_research.models import GenerationOptions, Query, QueryIntent
from digest_research.text import clean_generated_lines, dedupe_case_insensitive

log = get_logger("digest_research.planner")

PLANNING_OPTIONS = GenerationOptions(max_tokens=500, temperature=0.7)

_GENERAL_FOCUS = {
    1: "1. Basic overview\n2. Recent developments\n3. Key examples",
    2: "1. Overview and definition\n2. Current tools and trends\n3. Case studies and examples\n4. Common challenges",
}
_GENERAL_FOCUS_DEEP = (
    "1. Basic overview and definition\n2. Current tools and frameworks\n3. Recent developments\n"
    "4. Industry case studies\n5. Common challenges and future trends"
)

_COMPETITIVE_FOCUS = (
    "1. Direct comparisons with alternatives\n2. Market positioning and adoption\n"
    "3. Pricing and value versus competitors\n4. Strengths and weaknesses reported by users"
)

_TECHNICAL_FOCUS = (
    "1. Architecture and design\n2. Implementation and integration\n3. Performance benchmarks\n"
    "4. Scalability and limits\n5. Security and documentation"
)


def general_batch_size(depth: int) -> int:
    if depth <= 1:
        return 3
    if depth == 2:
        return 4
    return 5


def competitive_batch_size(depth: int) -> int:
    return 3 if depth == 2 else 4


def technical_batch_size(depth: int) -> int:
    return min(depth, 5)


def _build_prompt(topic: str, intent: QueryIntent, count: int, depth: int) -> str:
    if intent is QueryIntent.GENERAL:
        focus = _GENERAL_FOCUS.get(depth, _GENERAL_FOCUS_DEEP)
        angle = "research"
    elif intent is QueryIntent.COMPETITIVE:
        focus = _COMPETITIVE_FOCUS
        angle = "competitive research"
    else:
        focus = _TECHNICAL_FOCUS
        angle = "technical research"

    return f"""Generate {count} short search queries for {angle} on: {topic}

Create search queries (3-8 words each) covering:
{focus}

Examples: "AI testing frameworks", "ML model validation tools", "testing challenges AI"

Format: Return only the search queries, one per line."""


def expand_phrase(phrase: str) -> list[str]:
    """Shorter keyword variants of a long phrase; empty for phrases of 3 tokens or fewer.

    Variants, in order: the first three words, the phrase without stop words,
    and every other significant term (non-stop-word longer than 3 characters).
    """
    tokens = phrase.split()
    if len(tokens) <= 3:
        return []

    variants = [" ".join(tokens[:3])]

    stripped = [token for token in tokens if token.lower() not in STOP_WORDS]
    if stripped and len(stripped) < len(tokens):
        variants.append(" ".join(stripped))

    significant = [token for token in stripped if len(token) > 3]
    alternating = significant[::2] if len(significant) >= 4 else significant
    if len(alternating) >= 2:
        variants.append(" ".join(alternating))

    return [variant for variant in dedupe_case_insensitive(variants) if variant.lower() != phrase.lower()]


def build_batch(phrases: list[str], count: int) -> list[str]:
    """Interleave phrases with their variants, dedupe, and cap at `count`.

    Original phrases come first, then each phrase's first variant, then each
    phrase's second variant, so variants only fill the batch when the model
    returned fewer phrases than requested.
    """
    expansions = [expand_phrase(phrase) for phrase in phrases]
    candidates = list(phrases)
    for tier in zip_longest(*expansions):
        candidates.extend(variant for variant in tier if variant)
    return dedupe_case_insensitive(candidates)[:count]


class QueryPlanner:
    """Builds the intent batches for a topic at a given depth."""

    def __init__(self, generator: TextGenerator, settings: ResearchSettings) -> None:
        self.generator = generator
        self.timeout_s = settings.generation_timeout_s

    async def generate_batch(self, topic: str, intent: QueryIntent, count: int, depth: int) -> list[Query]:
        """Generate one batch.

        Raises:
            QueryGenerationError: when generation fails or yields no usable query.
        """
        prompt = _build_prompt(topic, intent, count, depth)
        try:
            async with asyncio.timeout(self.timeout_s):
                response = await self.generator.generate_text(prompt, PLANNING_OPTIONS)
        except Exception as e:
            raise QueryGenerationError(intent=intent.value, topic=topic, reason=str(e) or type(e).__name__) from e

        texts = build_batch(clean_generated_lines(response), count)
        if not texts:
            raise QueryGenerationError(intent=intent.value, topic=topic, reason="no usable queries in response")
        return [Query(text=text, intent=intent, depth=depth) for text in texts]

    async def generate_queries(self, topic: str, depth: int) -> list[Query]:
        """All planned queries for a topic, general batch first.

        Raises:
            QueryGenerationError: when the general batch cannot be generated.
        """
        queries = await self.generate_batch(topic, QueryIntent.GENERAL, general_batch_size(depth), depth)

        secondary: list[tuple[QueryIntent, int]] = []
        if depth >= 2:
            secondary.append((QueryIntent.COMPETITIVE, competitive_batch_size(depth)))
        if depth >= 3:
            secondary.append((QueryIntent.TECHNICAL, technical_batch_size(depth)))

        for intent, count in secondary:
            try:
                queries.extend(await self.generate_batch(topic, intent, count, depth))
            except QueryGenerationError as e:
                log.warning("planner.batch_failed", intent=intent.value, error=e.reason)

        log.info("planner.completed", topic=topic, depth=depth, query_count=len(queries))
        return queries
