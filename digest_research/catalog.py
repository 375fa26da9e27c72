"""Static lookup tables for scoring, clustering and query expansion.

Everything here is immutable and loaded once at import time.
"""

from dataclasses import dataclass
from types import MappingProxyType

# ============================================================================
# Authority tiers
# ============================================================================

# Official documentation, academic and vendor domains.
TIER_1_DOMAINS: tuple[str, ...] = (
    "arxiv.org",
    "github.com",
    "doi.org",
    "acm.org",
    "ieee.org",
    "nature.com",
    "science.org",
    "pubmed.ncbi.nlm.nih.gov",
    "docs.python.org",
    "developer.mozilla.org",
    "kubernetes.io",
    "microsoft.com",
    "learn.microsoft.com",
    "cloud.google.com",
    "developers.google.com",
    "aws.amazon.com",
    "docs.aws.amazon.com",
    "openai.com",
    "anthropic.com",
    "apple.com",
    "oracle.com",
    "ibm.com",
    "research.google",
)

# Established technology press.
TIER_2_DOMAINS: tuple[str, ...] = (
    "techcrunch.com",
    "theverge.com",
    "wired.com",
    "arstechnica.com",
    "zdnet.com",
    "infoq.com",
    "thenewstack.io",
    "venturebeat.com",
    "theregister.com",
    "reuters.com",
    "bbc.com",
    "nytimes.com",
    "bloomberg.com",
    "technologyreview.com",
)

# Blog, engineering and conference URL patterns (matched anywhere in the URL).
TIER_3_PATTERNS: tuple[str, ...] = (
    "/blog",
    "blog.",
    "engineering.",
    "/engineering",
    "conference",
    "summit",
    "medium.com",
    "dev.to",
    "substack.com",
)

# Social networks and forums.
TIER_4_DOMAINS: tuple[str, ...] = (
    "reddit.com",
    "twitter.com",
    "x.com",
    "news.ycombinator.com",
    "stackoverflow.com",
    "quora.com",
    "facebook.com",
    "linkedin.com",
    "youtube.com",
)

AUTHORITY_SCORES = MappingProxyType({1: 1.0, 2: 0.8, 3: 0.6, 4: 0.4})
DEFAULT_AUTHORITY_SCORE = 0.5

# ============================================================================
# Quality terms
# ============================================================================

TECHNICAL_TERMS: tuple[str, ...] = (
    "api",
    "architecture",
    "implementation",
    "performance",
    "benchmark",
    "scalability",
    "algorithm",
    "framework",
    "documentation",
    "sdk",
    "latency",
    "open source",
)

COMPETITIVE_TERMS: tuple[str, ...] = (
    "vs",
    "versus",
    "comparison",
    "alternative",
    "competitor",
    "market",
    "pricing",
    "pros",
    "cons",
)

BONUS_TERMS: tuple[str, ...] = ("github", "example", "tutorial", "guide")

# ============================================================================
# Clustering categories
# ============================================================================


@dataclass(frozen=True)
class CategoryDefinition:
    """A fixed research category and the keywords that pull results into it."""

    name: str
    description: str
    priority: int
    keywords: tuple[str, ...]


CATEGORY_DEFINITIONS: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        name="Overview",
        description="General introduction, background information, and foundational concepts",
        priority=1,
        keywords=(
            "overview",
            "introduction",
            "what is",
            "basics",
            "fundamental",
            "guide",
            "explained",
            "understanding",
            "beginner",
            "getting started",
            "definition",
        ),
    ),
    CategoryDefinition(
        name="Competitive Analysis",
        description="Direct comparisons, market positioning, alternatives, and competitive intelligence",
        priority=2,
        keywords=(
            "vs",
            "versus",
            "comparison",
            "compare",
            "alternative",
            "competitor",
            "market",
            "share",
            "positioning",
            "rivals",
            "competing",
            "against",
            "advantages",
            "disadvantages",
            "pros",
            "cons",
            "better",
            "worse",
        ),
    ),
    CategoryDefinition(
        name="Technical Details",
        description="Architecture, implementation specifics, performance data, and technical specifications",
        priority=3,
        keywords=(
            "architecture",
            "implementation",
            "technical",
            "api",
            "code",
            "engineering",
            "performance",
            "benchmark",
            "scalability",
            "algorithm",
            "framework",
            "infrastructure",
            "design",
            "specification",
            "documentation",
            "sdk",
        ),
    ),
    CategoryDefinition(
        name="Use Cases",
        description="Real-world applications, case studies, examples, and practical implementations",
        priority=4,
        keywords=(
            "use case",
            "example",
            "case study",
            "application",
            "implementation",
            "real world",
            "practical",
            "scenario",
            "solution",
            "project",
            "deployment",
            "success story",
            "tutorial",
            "how to",
            "guide",
            "walkthrough",
        ),
    ),
    CategoryDefinition(
        name="Limitations",
        description="Known issues, constraints, criticisms, challenges, and potential problems",
        priority=5,
        keywords=(
            "limitation",
            "problem",
            "issue",
            "challenge",
            "difficulty",
            "constraint",
            "drawback",
            "disadvantage",
            "weakness",
            "criticism",
            "fail",
            "error",
            "bug",
            "vulnerability",
            "risk",
            "concern",
            "downside",
            "negative",
        ),
    ),
    CategoryDefinition(
        name="Recent Developments",
        description="Latest updates, recent news, roadmap items, and emerging trends",
        priority=6,
        keywords=(
            "new",
            "latest",
            "recent",
            "update",
            "announcement",
            "release",
            "roadmap",
            "future",
            "upcoming",
            "development",
            "news",
            "2025",
            "2026",
            "beta",
            "preview",
            "launch",
            "version",
            "improvement",
            "feature",
            "enhancement",
        ),
    ),
)

CATEGORY_ASSIGNMENT_THRESHOLD = 0.1
HIGH_QUALITY_RELEVANCE = 0.6
LOW_QUALITY_THRESHOLD = 0.5
MAX_COVERAGE_GAPS = 5

# Content families every well-covered result set should touch at least once.
CONTENT_FAMILIES = MappingProxyType(
    {
        "technical": ("api", "documentation", "architecture", "performance"),
        "competitive": ("comparison", "alternative", "vs", "competitor"),
        "practical": ("example", "tutorial", "guide", "implementation"),
    }
)

# ============================================================================
# Text processing
# ============================================================================

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "been",
        "but",
        "by",
        "could",
        "did",
        "do",
        "does",
        "for",
        "from",
        "had",
        "has",
        "have",
        "how",
        "in",
        "is",
        "it",
        "of",
        "on",
        "or",
        "should",
        "that",
        "the",
        "this",
        "to",
        "was",
        "were",
        "what",
        "which",
        "will",
        "with",
        "would",
    }
)

KEYWORD_PUNCTUATION = ".,!?;:\"'()[]{}"
MAX_RESULT_KEYWORDS = 5
