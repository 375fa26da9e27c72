"""Actionable insight synthesis over clustered research results.

Each section (competitive, technical, strategic) plus the executive summary
is one text-generation call. Insights are all-or-nothing: the first failing
call raises InsightGenerationError. Turning generated prose into structured
fields is best effort; a missing anchor phrase yields a generic fallback
string rather than an error.
"""

import asyncio
from datetime import datetime, timezone

from digest_research.catalog import KEYWORD_PUNCTUATION, STOP_WORDS
from digest_research.config import ResearchSettings
from digest_research.exceptions import InsightGenerationError
from digest_research.generation import TextGenerator
from digest_research.logging import get_logger
from digest_research.models import (
    ActionableInsights,
    ClusterCategory,
    ClusteringResult,
    CompetitiveIntelligence,
    GenerationOptions,
    ResearchResult,
    StrategicRecommendations,
    TechnicalAssessment,
)

log = get_logger("digest_research.insights")

SECTION_OPTIONS = GenerationOptions(max_tokens=1000, temperature=0.6)
SUMMARY_OPTIONS = GenerationOptions(max_tokens=500, temperature=0.5)

MAX_CONTEXT_RESULTS = 8
MAX_LIST_ITEMS = 5
THIN_CATEGORY_SIZE = 2

PLACEHOLDER_SUMMARY = "Insufficient research data to generate actionable insights."
PLACEHOLDER_GAP = "No research results available"

_COMPETITOR_MARKERS = frozenset({"vs", "versus", "alternative", "alternatives", "competitor", "competitors"})


# ============================================================================
# Confidence & gaps
# ============================================================================


def calculate_confidence(clustering: ClusteringResult) -> float:
    """Trust in the insights, from cluster quality, coverage and volume, in [0, 1]."""
    if clustering.total_categorized == 0:
        return 0.0

    confidence = clustering.overall_quality
    confidence -= 0.1 * len(clustering.coverage_gaps)
    if clustering.total_categorized >= 10:
        confidence += 0.1
    if clustering.total_categorized >= 20:
        confidence += 0.1
    if clustering.uncategorized_count > clustering.total_categorized / 2:
        confidence -= 0.15

    return min(max(confidence, 0.0), 1.0)


def identify_data_gaps(clustering: ClusteringResult) -> list[str]:
    gaps = list(clustering.coverage_gaps)
    sizes = {category.name: len(category.results) for category in clustering.categories}

    if sizes.get("Competitive Analysis", 0) <= THIN_CATEGORY_SIZE:
        gaps.append("Insufficient competitive analysis data")
    if sizes.get("Technical Details", 0) <= THIN_CATEGORY_SIZE:
        gaps.append("Limited technical implementation details")
    if sizes.get("Use Cases", 0) <= THIN_CATEGORY_SIZE:
        gaps.append("Missing real-world use case examples")
    return gaps


# ============================================================================
# Best-effort parsing
# ============================================================================


def _find_section(text: str, keyword: str) -> str | None:
    """Up to three non-blank lines starting at the first line that mentions `keyword`."""
    lines = text.splitlines()
    needle = keyword.lower()
    for index, line in enumerate(lines):
        if needle not in line.lower():
            continue
        section = " ".join(part.strip() for part in lines[index : index + 3] if part.strip())
        if len(section) > 10:
            return section
    return None


def extract_section(text: str, keyword: str, fallback: str) -> str:
    return _find_section(text, keyword) or f"No specific {fallback} information found in research results."


def extract_list(text: str, keyword: str, fallback: str) -> list[str]:
    section = _find_section(text, keyword) or ""
    items = [item.strip() for item in section.split(",")]
    items = [item for item in items if 3 < len(item) < 100]
    if not items:
        return [f"No specific {fallback} identified in research results"]
    return items[:MAX_LIST_ITEMS]


def extract_competitors(results: list[ResearchResult]) -> list[str]:
    """Names that follow "vs", "alternative", "competitor" and similar markers."""
    competitors: list[str] = []
    for result in results:
        words = [word.strip(KEYWORD_PUNCTUATION) for word in f"{result.title} {result.snippet}".lower().split()]
        for index, word in enumerate(words):
            if word.rstrip(".") not in _COMPETITOR_MARKERS:
                continue
            for candidate in words[index + 1 : index + 3]:
                if candidate in STOP_WORDS or candidate in _COMPETITOR_MARKERS:
                    continue
                if len(candidate) > 2 and candidate not in competitors:
                    competitors.append(candidate)
                break
    return competitors[:MAX_LIST_ITEMS]


def parse_competitive(response: str, results: list[ResearchResult]) -> CompetitiveIntelligence:
    return CompetitiveIntelligence(
        market_position=extract_section(response, "market position", "Market Position"),
        feature_gaps=extract_list(response, "feature gaps", "gaps"),
        pricing_analysis=extract_section(response, "pricing", "Pricing Analysis"),
        user_sentiment=extract_section(response, "user sentiment", "sentiment"),
        key_competitors=extract_competitors(results),
        competitive_edge=extract_list(response, "competitive edge", "advantages"),
    )


def parse_technical(response: str) -> TechnicalAssessment:
    return TechnicalAssessment(
        architecture_overview=extract_section(response, "architecture", "Architecture Overview"),
        performance_benchmarks=extract_section(response, "performance", "benchmarks"),
        integration_complexity=extract_section(response, "integration", "Integration Complexity"),
        security_posture=extract_section(response, "security", "Security Posture"),
        technical_limitations=extract_list(response, "limitations", "constraints"),
        scalability_factors={"assessment": extract_section(response, "scalability", "Scalability Factors")},
    )


def parse_strategic(response: str) -> StrategicRecommendations:
    return StrategicRecommendations(
        adoption_readiness=extract_section(response, "adoption readiness", "requirements"),
        risk_assessment=extract_list(response, "risk", "challenges"),
        implementation_timeline={"timeline": extract_section(response, "timeline", "Implementation Timeline")},
        success_metrics=extract_list(response, "success metrics", "kpis"),
        next_steps=extract_list(response, "next steps", "action items"),
        alternative_options=extract_list(response, "alternative", "backup"),
    )


# ============================================================================
# Prompts
# ============================================================================


def _find_category(clustering: ClusteringResult, *markers: str) -> ClusterCategory | None:
    for category in clustering.categories:
        name = category.name.lower()
        if any(marker in name for marker in markers):
            return category
    return None


def _findings_block(heading: str, results: list[ResearchResult], empty_note: str) -> str:
    lines = [heading]
    lines.extend(f"- {result.title}: {result.snippet}" for result in results[:MAX_CONTEXT_RESULTS])
    if not results:
        lines.append(empty_note)
    return "\n".join(lines)


def _competitive_prompt(topic: str, findings: str) -> str:
    return f"""Based on research about "{topic}" and the competitive findings below, generate competitive intelligence insights:

{findings}

Analyze the competitive landscape and provide:

1. Market Position: Where does this solution stand relative to competitors? What are its key strengths and weaknesses?
2. Feature Gaps: What capabilities are competitors offering that this solution lacks?
3. Pricing Analysis: How does pricing compare to alternatives? What is the value proposition?
4. User Sentiment: What do users think about this versus alternatives?
5. Key Competitors: List 3-5 main competing solutions mentioned in the research.
6. Competitive Edge: What unique advantages or differentiators does this solution have?

Focus on actionable intelligence for decision-making."""


def _technical_prompt(topic: str, findings: str) -> str:
    return f"""Based on research about "{topic}" and the technical findings below, generate technical assessment insights:

{findings}

Analyze the technical aspects and provide:

1. Architecture Overview: How is this solution designed? What is the overall technical approach?
2. Performance Benchmarks: What quantitative performance data is available?
3. Integration Complexity: How easy is it to adopt and integrate?
4. Security Posture: What security practices, vulnerabilities, or compliance considerations are mentioned?
5. Technical Limitations: What are the known technical constraints or bottlenecks?
6. Scalability Factors: How well does it scale and where are the limits?

Focus on concrete technical information that helps evaluate implementation feasibility."""


def _strategic_prompt(topic: str, clustering: ClusteringResult, findings: str) -> str:
    gaps = ", ".join(clustering.coverage_gaps) or "none"
    return f"""Based on comprehensive research about "{topic}" with the following context:

Total Results Analyzed: {clustering.total_categorized}
Overall Quality Score: {clustering.overall_quality:.2f}
Coverage Gaps: {gaps}

{findings}

Generate strategic recommendations for decision-making:

1. Adoption Readiness: What technical requirements and prerequisites are needed before implementation?
2. Risk Assessment: What are the top 3-5 potential challenges and how can they be mitigated?
3. Implementation Timeline: What are the suggested phases for evaluation and deployment?
4. Success Metrics: What KPIs should be tracked to measure adoption success?
5. Next Steps: What are the immediate action items to move forward?
6. Alternative Options: What backup or alternative solutions should be considered?

Provide actionable, practical recommendations for technology decision-makers."""


def _summary_prompt(
    topic: str,
    competitive: CompetitiveIntelligence,
    technical: TechnicalAssessment,
    strategic: StrategicRecommendations,
) -> str:
    return f"""Create a concise executive summary for technology decision-makers about "{topic}".

Research highlights:
- Market position: {competitive.market_position}
- Architecture: {technical.architecture_overview}
- Adoption readiness: {strategic.adoption_readiness}
- Key risks: {"; ".join(strategic.risk_assessment)}

Address what this is and why it matters, how it compares to alternatives, the main
technical considerations, the recommended approach for evaluation, and the key risks
and benefits. Keep it to 3-4 paragraphs focused on business impact."""


# ============================================================================
# Synthesizer
# ============================================================================


class InsightSynthesizer:
    """Generates ActionableInsights from a ClusteringResult."""

    def __init__(self, generator: TextGenerator, settings: ResearchSettings) -> None:
        self.generator = generator
        self.timeout_s = settings.generation_timeout_s

    async def _generate(self, section: str, prompt: str, options: GenerationOptions) -> str:
        try:
            async with asyncio.timeout(self.timeout_s):
                return await self.generator.generate_text(prompt, options)
        except Exception as e:
            log.error("insights.section_failed", section=section, error=str(e) or type(e).__name__)
            raise InsightGenerationError(section=section, reason=str(e) or type(e).__name__) from e

    async def synthesize_insights(self, topic: str, clustering: ClusteringResult) -> ActionableInsights:
        """Build all insight sections.

        Raises:
            InsightGenerationError: when any section fails to generate.
        """
        if not clustering.categories:
            return ActionableInsights(
                executive_summary=PLACEHOLDER_SUMMARY,
                confidence=0.0,
                data_gaps=[PLACEHOLDER_GAP],
            )

        competitive_category = _find_category(clustering, "competitive", "comparison")
        competitive_results = competitive_category.results if competitive_category else []
        competitive_findings = _findings_block(
            "Competitive research findings:",
            competitive_results,
            "(Limited competitive analysis data available)",
        )
        competitive = parse_competitive(
            await self._generate("competitive", _competitive_prompt(topic, competitive_findings), SECTION_OPTIONS),
            competitive_results,
        )

        technical_category = _find_category(clustering, "technical", "architecture")
        technical_results = technical_category.results if technical_category else []
        technical_findings = _findings_block(
            "Technical research findings:",
            technical_results,
            "(Limited technical analysis data available)",
        )
        technical = parse_technical(
            await self._generate("technical", _technical_prompt(topic, technical_findings), SECTION_OPTIONS)
        )

        categorized = [result for category in clustering.categories for result in category.results]
        representative = sorted(categorized, key=lambda result: result.relevance, reverse=True)
        strategic_findings = _findings_block(
            "Representative findings:",
            representative,
            "(No categorized findings available)",
        )
        strategic = parse_strategic(
            await self._generate("strategic", _strategic_prompt(topic, clustering, strategic_findings), SECTION_OPTIONS)
        )

        summary = await self._generate(
            "executive summary",
            _summary_prompt(topic, competitive, technical, strategic),
            SUMMARY_OPTIONS,
        )

        insights = ActionableInsights(
            competitive=competitive,
            technical=technical,
            strategic=strategic,
            executive_summary=summary.strip(),
            confidence=calculate_confidence(clustering),
            data_gaps=identify_data_gaps(clustering),
            generated_at=datetime.now(timezone.utc),
        )
        log.info("insights.completed", confidence=round(insights.confidence, 3), data_gaps=len(insights.data_gaps))
        return insights
