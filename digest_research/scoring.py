"""Multi-factor relevance scoring and stable ranking of research results.

Every function here is pure: no I/O, no randomness, no failure modes. The
score is a weighted sum of five sub-scores, each in [0, 1]:

    content    0.30  query words found in title + snippet
    title      0.15  query words found in title, full phrase bonus
    authority  0.20  tiered domain reputation
    recency    0.15  piecewise-linear decay on days since the hit was found
    quality    0.20  technical / competitive vocabulary density
"""

from datetime import datetime, timezone
from urllib.parse import urlparse

from digest_research.catalog import (
    AUTHORITY_SCORES,
    BONUS_TERMS,
    COMPETITIVE_TERMS,
    DEFAULT_AUTHORITY_SCORE,
    TECHNICAL_TERMS,
    TIER_1_DOMAINS,
    TIER_2_DOMAINS,
    TIER_3_PATTERNS,
    TIER_4_DOMAINS,
)
from digest_research.models import ResearchResult

CONTENT_WEIGHT = 0.30
TITLE_WEIGHT = 0.15
AUTHORITY_WEIGHT = 0.20
RECENCY_WEIGHT = 0.15
QUALITY_WEIGHT = 0.20


def query_words(query: str) -> list[str]:
    return query.lower().split()


def _fraction_present(words: list[str] | tuple[str, ...], text: str) -> float:
    if not words:
        return 0.0
    return sum(1 for word in words if word in text) / len(words)


def content_relevance(result: ResearchResult, words: list[str]) -> float:
    text = f"{result.title} {result.snippet}".lower()
    return _fraction_present(words, text)


def title_relevance(result: ResearchResult, words: list[str]) -> float:
    if not words:
        return 0.0
    title = result.title.lower()
    score = _fraction_present(words, title)
    if " ".join(words) in title:
        score += len(words)
    return min(score, 1.0)


def _host_matches(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


def authority_tier(url: str) -> int | None:
    """Return the authority tier (1-4) of a URL, or None when no tier matches.

    Domain tiers are checked before the tier-3 URL patterns so a forum post
    whose path mentions "engineering" still counts as a forum.
    """
    lowered = url.lower()
    host = (urlparse(lowered).hostname or "").removeprefix("www.")
    if _host_matches(host, TIER_1_DOMAINS):
        return 1
    if _host_matches(host, TIER_2_DOMAINS):
        return 2
    if _host_matches(host, TIER_4_DOMAINS):
        return 4
    if any(pattern in lowered for pattern in TIER_3_PATTERNS):
        return 3
    return None


def authority_score(url: str) -> float:
    tier = authority_tier(url)
    if tier is None:
        return DEFAULT_AUTHORITY_SCORE
    return AUTHORITY_SCORES[tier]


def recency_score(date_found: datetime, now: datetime | None = None) -> float:
    now = now or datetime.now(timezone.utc)
    if date_found.tzinfo is None:
        date_found = date_found.replace(tzinfo=timezone.utc)
    days = max((now - date_found).total_seconds() / 86400.0, 0.0)

    if days <= 180:
        return 1.0 - 0.5 * (days / 180)
    if days <= 365:
        return 0.5 - 0.3 * ((days - 180) / 185)
    return 0.2


def quality_score(result: ResearchResult) -> float:
    text = f"{result.title} {result.snippet}".lower()
    score = 0.6 * _fraction_present(TECHNICAL_TERMS, text) + 0.4 * _fraction_present(COMPETITIVE_TERMS, text)
    if any(term in text for term in BONUS_TERMS):
        score += 0.1
    return min(score, 1.0)


def score_result(result: ResearchResult, words: list[str], now: datetime | None = None) -> float:
    """Relevance of one result to the query words, in [0, 1]."""
    score = (
        CONTENT_WEIGHT * content_relevance(result, words)
        + TITLE_WEIGHT * title_relevance(result, words)
        + AUTHORITY_WEIGHT * authority_score(result.url)
        + RECENCY_WEIGHT * recency_score(result.date_found, now)
        + QUALITY_WEIGHT * quality_score(result)
    )
    return min(max(score, 0.0), 1.0)


def score_results(results: list[ResearchResult], query: str, now: datetime | None = None) -> list[ResearchResult]:
    """Return copies of `results` with relevance set, in the original order."""
    words = query_words(query)
    return [result.model_copy(update={"relevance": score_result(result, words, now)}) for result in results]


def rank_results(results: list[ResearchResult]) -> list[ResearchResult]:
    """Sort by relevance, highest first. Equal scores keep their input order."""
    return sorted(results, key=lambda result: result.relevance, reverse=True)
