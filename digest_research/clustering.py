"""Keyword clustering of ranked results into fixed categories and coverage analysis."""

from digest_research.catalog import (
    CATEGORY_ASSIGNMENT_THRESHOLD,
    CATEGORY_DEFINITIONS,
    CONTENT_FAMILIES,
    HIGH_QUALITY_RELEVANCE,
    LOW_QUALITY_THRESHOLD,
    MAX_COVERAGE_GAPS,
    CategoryDefinition,
)
from digest_research.logging import get_logger
from digest_research.models import ClusterCategory, ClusteringResult, ResearchResult

log = get_logger("digest_research.clustering")

NO_RESULTS_GAP = "No results found to analyze"


def category_score(result: ResearchResult, definition: CategoryDefinition) -> float:
    """Keyword hits normalised by keyword count; a title hit counts double."""
    if not definition.keywords:
        return 0.0
    title = result.title.lower()
    snippet = result.snippet.lower()
    score = 0.0
    for keyword in definition.keywords:
        if keyword in title:
            score += 2.0
        elif keyword in snippet:
            score += 1.0
    return score / len(definition.keywords)


def best_category(
    result: ResearchResult, definitions: tuple[CategoryDefinition, ...] = CATEGORY_DEFINITIONS
) -> int | None:
    """Index of the best scoring category, or None below the assignment threshold."""
    best_index: int | None = None
    best_score = 0.0
    for index, definition in enumerate(definitions):
        score = category_score(result, definition)
        if score > best_score:
            best_score = score
            best_index = index
    if best_score > CATEGORY_ASSIGNMENT_THRESHOLD:
        return best_index
    return None


def _build_category(definition: CategoryDefinition, results: list[ResearchResult]) -> ClusterCategory:
    quality = 0.0
    density = 0.0
    if results:
        quality = min(sum(result.relevance for result in results) / len(results), 1.0)
        density = sum(1 for result in results if result.relevance > HIGH_QUALITY_RELEVANCE) / len(results)
    return ClusterCategory(
        name=definition.name,
        description=definition.description,
        priority=definition.priority,
        results=results,
        quality=quality,
        density=density,
    )


def identify_coverage_gaps(categories: list[ClusterCategory]) -> list[str]:
    """Missing or weak information areas, at most five.

    Order: empty categories, then low-quality categories, then content
    families (technical, competitive, practical) absent from every result.
    """
    empty = [f"No {category.name} information found" for category in categories if not category.results]
    weak = [
        f"Limited high-quality {category.name} content"
        for category in categories
        if category.results and category.quality < LOW_QUALITY_THRESHOLD
    ]

    texts = [
        f"{result.title} {result.snippet}".lower() for category in categories for result in category.results
    ]
    missing = [
        f"Missing {family} information"
        for family, keywords in CONTENT_FAMILIES.items()
        if not any(keyword in text for text in texts for keyword in keywords)
    ]

    return (empty + weak + missing)[:MAX_COVERAGE_GAPS]


def cluster_results(results: list[ResearchResult]) -> ClusteringResult:
    """Assign each result to at most one category and summarise the clusters."""
    if not results:
        return ClusteringResult(coverage_gaps=[NO_RESULTS_GAP])

    buckets: list[list[ResearchResult]] = [[] for _ in CATEGORY_DEFINITIONS]
    for result in results:
        index = best_category(result)
        if index is not None:
            buckets[index].append(result)

    categories = [_build_category(definition, bucket) for definition, bucket in zip(CATEGORY_DEFINITIONS, buckets)]
    categories.sort(key=lambda category: (category.priority, -category.quality))

    total_categorized = sum(len(category.results) for category in categories)
    overall_quality = 0.0
    if total_categorized:
        weighted = sum(category.quality * len(category.results) for category in categories)
        overall_quality = min(weighted / total_categorized, 1.0)

    clustering = ClusteringResult(
        categories=categories,
        overall_quality=overall_quality,
        coverage_gaps=identify_coverage_gaps(categories),
        total_categorized=total_categorized,
        uncategorized_count=len(results) - total_categorized,
    )
    log.info(
        "clustering.completed",
        categorized=clustering.total_categorized,
        uncategorized=clustering.uncategorized_count,
        gaps=len(clustering.coverage_gaps),
    )
    return clustering
