"""Research workflow: plan, search, rank, refine, cluster, synthesize, summarize."""

import asyncio
from time import perf_counter
from uuid import uuid4

from digest_research.clustering import cluster_results
from digest_research.config import ResearchSettings, get_settings
from digest_research.events import (
    EventCallback,
    PhaseCompleteEvent,
    PhaseStartEvent,
    PhaseWarningEvent,
    ResearchPhase,
    SearchProgressEvent,
    SSEEvent,
)
from digest_research.exceptions import InsightGenerationError, SummaryGenerationError
from digest_research.generation import TextGenerator, get_text_generator
from digest_research.insights import InsightSynthesizer
from digest_research.logging import bind_run_context, get_logger
from digest_research.models import (
    ActionableInsights,
    ClusteringResult,
    GenerationOptions,
    PhaseTimings,
    Query,
    ResearchReport,
    ResearchResult,
)
from digest_research.planner import QueryPlanner
from digest_research.refinement import RefinementEngine
from digest_research.scoring import rank_results, score_results
from digest_research.search import ProgressCallback, SearchExecutor, SearchProvider, get_search_provider

log = get_logger("digest_research.workflow")

SUMMARY_OPTIONS = GenerationOptions(max_tokens=800, temperature=0.6)
NO_RESULTS_SUMMARY = "No research results found for the given query."

CLUSTER_CONTEXT_RESULTS = 3


def _elapsed_ms(start: float) -> int:
    return int((perf_counter() - start) * 1000)


def _mean_relevance(results: list[ResearchResult]) -> float:
    if not results:
        return 0.0
    return min(sum(result.relevance for result in results) / len(results), 1.0)


def _summary_context(
    results: list[ResearchResult],
    clustering: ClusteringResult | None,
    insights: ActionableInsights | None,
    limit: int,
) -> str:
    sections: list[str] = []

    if clustering is not None and clustering.total_categorized:
        for category in clustering.categories:
            if not category.results:
                continue
            lines = [f"## {category.name} ({len(category.results)} results, quality {category.quality:.2f})"]
            lines.extend(
                f"- {result.title}: {result.snippet}" for result in category.results[:CLUSTER_CONTEXT_RESULTS]
            )
            sections.append("\n".join(lines))
        if clustering.coverage_gaps:
            sections.append("Coverage gaps: " + "; ".join(clustering.coverage_gaps))
    else:
        lines = [
            f"{i}. {result.title}\n   {result.snippet}\n   Source: {result.source}"
            for i, result in enumerate(results[:limit], 1)
        ]
        sections.append("\n".join(lines))

    if insights is not None:
        sections.append(f"Executive summary:\n{insights.executive_summary}")
        if insights.data_gaps:
            sections.append("Known data gaps: " + "; ".join(insights.data_gaps))

    return "\n\n".join(sections)


def _summary_prompt(topic: str, context: str) -> str:
    return f"""Write a research summary about "{topic}" from the findings below.

{context}

Cover the key themes, the most important facts and developments, and any notable
disagreement between sources. Write 2-3 concise paragraphs in plain prose."""


async def perform_research(
    topic: str,
    depth: int,
    *,
    search_provider: SearchProvider | None = None,
    text_generator: TextGenerator | None = None,
    settings: ResearchSettings | None = None,
    event_callback: EventCallback | None = None,
) -> ResearchReport:
    """Run the full research pipeline for a topic.

    Args:
        topic: Research topic or question.
        depth: Research depth, 1 or more. Depth 2 adds competitive queries and
            clustering; depth 3 adds technical queries, refinement and insights.
        search_provider: Override default search provider (for testing).
        text_generator: Override default text generator (for testing).
        settings: Override environment settings (for testing).
        event_callback: Awaited with progress events as phases run.

    Returns:
        ResearchReport with ranked results, summary and timing metrics.

    Raises:
        ValueError: When the topic is blank or depth is below 1.
        QueryGenerationError: When the general query batch cannot be generated.
        SummaryGenerationError: When the summary cannot be generated.
    """
    if not topic or not topic.strip():
        raise ValueError("topic must not be blank")
    if depth < 1:
        raise ValueError(f"depth must be at least 1, got {depth}")

    correlation_id = str(uuid4())[:8]
    bind_run_context(correlation_id, topic)

    _settings = settings or get_settings()
    _generator = text_generator or get_text_generator(_settings.text_model)
    _provider = search_provider or get_search_provider(_settings.tavily_api_key, _settings.tavily_search_depth)

    async def _emit(event: SSEEvent) -> None:
        if event_callback is not None:
            await event_callback(event)

    def _progress_for(phase: ResearchPhase) -> ProgressCallback:
        async def _progress(completed: int, total: int, query: Query) -> None:
            await _emit(
                SearchProgressEvent(
                    data={
                        "phase": phase.value,
                        "completed": completed,
                        "total": total,
                        "current_query": query.text,
                        "intent": query.intent.value,
                    }
                )
            )

        return _progress

    planner = QueryPlanner(_generator, _settings)
    executor = SearchExecutor(_provider, _settings)
    timings: dict[str, int] = {}

    workflow_start = perf_counter()
    log.info("workflow.started", topic=topic, depth=depth)

    # Phase 1: Planning (general batch failure is fatal)
    phase_start = perf_counter()
    await _emit(PhaseStartEvent(data={"phase": ResearchPhase.PLANNING.value}))
    try:
        queries = await planner.generate_queries(topic, depth)
    except Exception as e:
        log.error("workflow.planning.failed", error=str(e))
        raise
    timings["planning_ms"] = _elapsed_ms(phase_start)
    log.info("workflow.planning.completed", duration_ms=timings["planning_ms"], query_count=len(queries))
    await _emit(
        PhaseCompleteEvent(
            data={
                "phase": ResearchPhase.PLANNING.value,
                "duration_ms": timings["planning_ms"],
                "output_summary": {"queries": [query.text for query in queries]},
            }
        )
    )

    # Phase 2: Searching (sequential, failed queries skipped)
    phase_start = perf_counter()
    await _emit(PhaseStartEvent(data={"phase": ResearchPhase.SEARCHING.value}))
    raw_results, failed = await executor.execute_all(queries, progress=_progress_for(ResearchPhase.SEARCHING))
    if failed:
        await _emit(
            PhaseWarningEvent(
                data={
                    "phase": ResearchPhase.SEARCHING.value,
                    "warning": f"{failed} of {len(queries)} searches failed, continuing with partial results",
                }
            )
        )
    ranked = rank_results(score_results(raw_results, topic))
    timings["searching_ms"] = _elapsed_ms(phase_start)
    log.info(
        "workflow.searching.completed",
        duration_ms=timings["searching_ms"],
        results=len(ranked),
        failed=failed,
    )
    await _emit(
        PhaseCompleteEvent(
            data={
                "phase": ResearchPhase.SEARCHING.value,
                "duration_ms": timings["searching_ms"],
                "output_summary": {"results": len(ranked), "failed_queries": failed},
            }
        )
    )

    # Phase 3: Refinement (depth >= 3, never fatal)
    if depth >= 3:
        phase_start = perf_counter()
        await _emit(PhaseStartEvent(data={"phase": ResearchPhase.REFINEMENT.value}))
        refinement = RefinementEngine(_generator, _settings)
        refined_queries = await refinement.generate_refinement_queries(topic, ranked, depth)
        refined_results: list[ResearchResult] = []
        if refined_queries:
            queries = queries + refined_queries
            new_results, refined_failed = await executor.execute_all(
                refined_queries, progress=_progress_for(ResearchPhase.REFINEMENT)
            )
            refined_results = score_results(new_results, topic)
            ranked = rank_results(ranked + refined_results)
            if refined_failed:
                await _emit(
                    PhaseWarningEvent(
                        data={
                            "phase": ResearchPhase.REFINEMENT.value,
                            "warning": f"{refined_failed} of {len(refined_queries)} refinement searches failed",
                        }
                    )
                )
        timings["refinement_ms"] = _elapsed_ms(phase_start)
        log.info(
            "workflow.refinement.completed",
            duration_ms=timings["refinement_ms"],
            query_count=len(refined_queries),
            new_results=len(refined_results),
        )
        await _emit(
            PhaseCompleteEvent(
                data={
                    "phase": ResearchPhase.REFINEMENT.value,
                    "duration_ms": timings["refinement_ms"],
                    "output_summary": {
                        "queries": [query.text for query in refined_queries],
                        "new_results": len(refined_results),
                    },
                }
            )
        )

    # Phase 4: Clustering (depth >= 2)
    clustering: ClusteringResult | None = None
    if depth >= 2:
        phase_start = perf_counter()
        await _emit(PhaseStartEvent(data={"phase": ResearchPhase.CLUSTERING.value}))
        clustering = cluster_results(ranked)
        timings["clustering_ms"] = _elapsed_ms(phase_start)
        await _emit(
            PhaseCompleteEvent(
                data={
                    "phase": ResearchPhase.CLUSTERING.value,
                    "duration_ms": timings["clustering_ms"],
                    "output_summary": {
                        "categorized": clustering.total_categorized,
                        "uncategorized": clustering.uncategorized_count,
                        "coverage_gaps": clustering.coverage_gaps,
                    },
                }
            )
        )

    # Phase 5: Insights (depth >= 3, failure drops insights only)
    insights: ActionableInsights | None = None
    if depth >= 3 and clustering is not None:
        phase_start = perf_counter()
        await _emit(PhaseStartEvent(data={"phase": ResearchPhase.INSIGHTS.value}))
        synthesizer = InsightSynthesizer(_generator, _settings)
        try:
            insights = await synthesizer.synthesize_insights(topic, clustering)
        except InsightGenerationError as e:
            log.warning("workflow.insights.failed", section=e.section, error=e.reason)
            await _emit(
                PhaseWarningEvent(
                    data={
                        "phase": ResearchPhase.INSIGHTS.value,
                        "warning": "Insight synthesis failed, continuing without insights",
                    }
                )
            )
        timings["insights_ms"] = _elapsed_ms(phase_start)
        await _emit(
            PhaseCompleteEvent(
                data={
                    "phase": ResearchPhase.INSIGHTS.value,
                    "duration_ms": timings["insights_ms"],
                    "output_summary": {"confidence": insights.confidence if insights else None},
                }
            )
        )

    # Phase 6: Summary (fatal)
    phase_start = perf_counter()
    await _emit(PhaseStartEvent(data={"phase": ResearchPhase.SUMMARY.value}))
    if not ranked:
        summary = NO_RESULTS_SUMMARY
    else:
        context = _summary_context(ranked, clustering, insights, _settings.summary_result_limit)
        try:
            async with asyncio.timeout(_settings.generation_timeout_s):
                summary = (await _generator.generate_text(_summary_prompt(topic, context), SUMMARY_OPTIONS)).strip()
        except Exception as e:
            log.error("workflow.summary.failed", error=str(e) or type(e).__name__)
            raise SummaryGenerationError(reason=str(e) or type(e).__name__) from e
    timings["summary_ms"] = _elapsed_ms(phase_start)
    log.info("workflow.summary.completed", duration_ms=timings["summary_ms"], length=len(summary))
    await _emit(
        PhaseCompleteEvent(
            data={
                "phase": ResearchPhase.SUMMARY.value,
                "duration_ms": timings["summary_ms"],
                "output_summary": {"length": len(summary)},
            }
        )
    )

    timings["total_ms"] = _elapsed_ms(workflow_start)
    report = ResearchReport(
        query=topic,
        depth=depth,
        generated_queries=[query.text for query in queries],
        queries=queries,
        results=ranked,
        summary=summary,
        total_results=len(ranked),
        relevance_score=_mean_relevance(ranked),
        clustering=clustering,
        insights=insights,
        timings=PhaseTimings(**timings),
    )
    log.info(
        "workflow.completed",
        total_ms=timings["total_ms"],
        results=report.total_results,
        relevance_score=round(report.relevance_score, 3),
    )
    return report
