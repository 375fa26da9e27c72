"""Digest Research - research orchestration and relevance scoring for content digests"""

__version__ = "0.1.0"

from digest_research.clustering import cluster_results, identify_coverage_gaps
from digest_research.exceptions import (
    InsightGenerationError,
    QueryGenerationError,
    ResearchPipelineError,
    SearchExecutionError,
    SearchProviderError,
    SummaryGenerationError,
    TextGenerationError,
    TopicAnalysisError,
)
from digest_research.generation import (
    AgentTextGenerator,
    TextGenerator,
    clear_generator_cache,
    create_text_agent,
    get_text_generator,
)
from digest_research.insights import InsightSynthesizer
from digest_research.models import (
    ActionableInsights,
    ArticleInput,
    ClusterCategory,
    ClusteringResult,
    GenerationOptions,
    PhaseTimings,
    Query,
    QueryIntent,
    ResearchReport,
    ResearchResult,
    SearchHit,
    SearchOptions,
)
from digest_research.planner import QueryPlanner
from digest_research.refinement import RefinementEngine
from digest_research.scoring import rank_results, score_result, score_results
from digest_research.search import SearchExecutor, SearchProvider, TavilySearchProvider
from digest_research.topics import analyze_topics, generate_article_queries
from digest_research.workflow import perform_research

__all__ = [
    # Models
    "QueryIntent",
    "Query",
    "SearchHit",
    "SearchOptions",
    "GenerationOptions",
    "ResearchResult",
    "ClusterCategory",
    "ClusteringResult",
    "ActionableInsights",
    "PhaseTimings",
    "ResearchReport",
    "ArticleInput",
    # Collaborators
    "SearchProvider",
    "TavilySearchProvider",
    "TextGenerator",
    "AgentTextGenerator",
    "create_text_agent",
    "get_text_generator",
    "clear_generator_cache",
    # Engine
    "QueryPlanner",
    "SearchExecutor",
    "score_result",
    "score_results",
    "rank_results",
    "RefinementEngine",
    "cluster_results",
    "identify_coverage_gaps",
    "InsightSynthesizer",
    "generate_article_queries",
    "analyze_topics",
    # Exceptions
    "ResearchPipelineError",
    "QueryGenerationError",
    "SearchExecutionError",
    "InsightGenerationError",
    "SummaryGenerationError",
    "TopicAnalysisError",
    "SearchProviderError",
    "TextGenerationError",
    # Workflow
    "perform_research",
]
