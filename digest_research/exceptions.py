"""Domain-specific exceptions for the research pipeline."""


class ResearchPipelineError(Exception):
    """Base exception for research pipeline errors."""


class QueryGenerationError(ResearchPipelineError):
    """Raised when a batch of search queries cannot be generated.

    Only the general batch is fatal to a research run; competitive,
    technical and refinement batches are skipped when this is raised.
    """

    def __init__(self, intent: str, topic: str, reason: str) -> None:
        self.intent = intent
        self.topic = topic
        self.reason = reason
        super().__init__(f"Failed to generate {intent} queries for '{topic}': {reason}")


class SearchExecutionError(ResearchPipelineError):
    """Raised when a single search query fails. Callers skip the query."""

    def __init__(self, query: str, reason: str) -> None:
        self.query = query
        self.reason = reason
        super().__init__(f"Search failed for '{query}': {reason}")


class InsightGenerationError(ResearchPipelineError):
    """Raised when any insight section cannot be generated."""

    def __init__(self, section: str, reason: str) -> None:
        self.section = section
        self.reason = reason
        super().__init__(f"Failed to generate {section} insights: {reason}")


class SummaryGenerationError(ResearchPipelineError):
    """Raised when the research summary cannot be generated."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to generate research summary: {reason}")


class TopicAnalysisError(ResearchPipelineError):
    """Raised when topic analysis over a set of articles fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to analyze topics: {reason}")


class SearchProviderError(ResearchPipelineError):
    """Raised by search provider adapters on transport or payload errors."""

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} search failed: {reason}")


class TextGenerationError(ResearchPipelineError):
    """Raised by text generator adapters when the model call fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Text generation failed: {reason}")
