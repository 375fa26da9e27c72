"""Pydantic models for the research engine."""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


# --- Queries & collaborator options ---


class QueryIntent(str, Enum):
    """Query-generation strategy that produced a query."""

    GENERAL = "general"
    COMPETITIVE = "competitive"
    TECHNICAL = "technical"
    REFINEMENT = "refinement"


class Query(BaseModel):
    """A single planned search query."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(
        min_length=1,
        description="Search query text sent to the provider",
        examples=["observability tooling comparison"],
    )
    intent: QueryIntent = Field(description="Intent batch this query belongs to")
    depth: int = Field(ge=1, description="Research depth tier that produced this query")


class SearchOptions(BaseModel):
    """Options passed to a search provider for one query."""

    model_config = ConfigDict(frozen=True)

    max_results: int = Field(default=10, ge=1, le=50)
    language: str = Field(default="en", min_length=2)


class SearchHit(BaseModel):
    """Raw hit returned by a search provider."""

    title: str = ""
    url: str = ""
    snippet: str = ""
    source: str = ""


class GenerationOptions(BaseModel):
    """Per-call options for a text generator.

    `model=None` selects the generator's default model. When `response_schema`
    is set the generator constrains output to that model and returns it as JSON.
    """

    model_config = ConfigDict(frozen=True)

    max_tokens: int = Field(default=500, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    model: str | None = None
    response_schema: type[BaseModel] | None = None


# --- Results ---


class ResearchResult(BaseModel):
    """One search hit enriched for ranking. Relevance is replaced once by the scorer."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    title: str = Field(default="", examples=["OpenTelemetry vs Prometheus: a comparison"])
    url: str = Field(default="", examples=["https://opentelemetry.io/docs/"])
    snippet: str = ""
    source: str = ""
    relevance: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Relevance in [0, 1]; 0.5 until the result is scored",
    )
    date_found: datetime = Field(default_factory=_utcnow)
    keywords: list[str] = Field(default_factory=list, max_length=5)


class ClusterCategory(BaseModel):
    """A fixed thematic bucket with the results assigned to it."""

    name: str
    description: str
    priority: int = Field(ge=1, le=6, description="Display priority, 1 is shown first")
    results: list[ResearchResult] = Field(default_factory=list)
    quality: float = Field(default=0.0, ge=0.0, le=1.0, description="Mean relevance of assigned results")
    density: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Fraction of assigned results with relevance above 0.6",
    )


class ClusteringResult(BaseModel):
    """Categorized view of a ranked result set."""

    categories: list[ClusterCategory] = Field(default_factory=list)
    overall_quality: float = Field(default=0.0, ge=0.0, le=1.0)
    coverage_gaps: list[str] = Field(default_factory=list, max_length=5)
    total_categorized: int = Field(default=0, ge=0)
    uncategorized_count: int = Field(default=0, ge=0)


# --- Insights ---


class CompetitiveIntelligence(BaseModel):
    market_position: str = ""
    feature_gaps: list[str] = Field(default_factory=list)
    pricing_analysis: str = ""
    user_sentiment: str = ""
    key_competitors: list[str] = Field(default_factory=list)
    competitive_edge: list[str] = Field(default_factory=list)


class TechnicalAssessment(BaseModel):
    architecture_overview: str = ""
    performance_benchmarks: str = ""
    integration_complexity: str = ""
    security_posture: str = ""
    technical_limitations: list[str] = Field(default_factory=list)
    scalability_factors: dict[str, str] = Field(default_factory=dict)


class StrategicRecommendations(BaseModel):
    adoption_readiness: str = ""
    risk_assessment: list[str] = Field(default_factory=list)
    implementation_timeline: dict[str, str] = Field(default_factory=dict)
    success_metrics: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    alternative_options: list[str] = Field(default_factory=list)


class ActionableInsights(BaseModel):
    """Structured insights synthesized from clustered research results."""

    competitive: CompetitiveIntelligence = Field(default_factory=CompetitiveIntelligence)
    technical: TechnicalAssessment = Field(default_factory=TechnicalAssessment)
    strategic: StrategicRecommendations = Field(default_factory=StrategicRecommendations)
    executive_summary: str = ""
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Trust in the insights derived from cluster quality and coverage",
    )
    data_gaps: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)


# --- Report ---


class PhaseTimings(BaseModel):
    """Wall-clock milliseconds spent in each research phase."""

    planning_ms: int = Field(default=0, ge=0)
    searching_ms: int = Field(default=0, ge=0)
    refinement_ms: int = Field(default=0, ge=0)
    clustering_ms: int = Field(default=0, ge=0)
    insights_ms: int = Field(default=0, ge=0)
    summary_ms: int = Field(default=0, ge=0)
    total_ms: int = Field(default=0, ge=0)


class ResearchReport(BaseModel):
    """Complete output of one research run."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    query: str = Field(
        min_length=1,
        description="Research topic that was submitted",
        examples=["observability tooling"],
    )
    depth: int = Field(ge=1, description="Requested research depth")
    generated_queries: list[str] = Field(
        default_factory=list,
        description="All search queries in phase order (planner batches, then refinement)",
    )
    queries: list[Query] = Field(default_factory=list, description="Generated queries with their intent")
    results: list[ResearchResult] = Field(default_factory=list, description="Final ranked results")
    summary: str = ""
    date_generated: datetime = Field(default_factory=_utcnow)
    total_results: int = Field(default=0, ge=0)
    relevance_score: float = Field(default=0.0, ge=0.0, le=1.0, description="Mean result relevance")
    clustering: ClusteringResult | None = Field(default=None, description="Present at depth >= 2")
    insights: ActionableInsights | None = Field(default=None, description="Present at depth >= 3 when synthesis succeeds")
    timings: PhaseTimings = Field(default_factory=PhaseTimings)


# --- Article helpers ---


class ArticleInput(BaseModel):
    """Minimal article view used for follow-up query and topic analysis."""

    title: str = ""
    content: str = ""
