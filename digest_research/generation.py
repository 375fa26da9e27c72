"""Text generation collaborator backed by a PydanticAI agent."""

from functools import lru_cache
from typing import Any, Protocol

from pydantic import BaseModel
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from digest_research.config import DEFAULT_TEXT_MODEL
from digest_research.exceptions import TextGenerationError
from digest_research.logging import get_logger
from digest_research.models import GenerationOptions

log = get_logger("digest_research.generation")


class TextGenerator(Protocol):
    """Anything that turns a prompt into text."""

    async def generate_text(self, prompt: str, options: GenerationOptions) -> str: ...


def create_text_agent(model: Any = DEFAULT_TEXT_MODEL) -> Agent[None, str]:
    """Uncached factory - use with TestModel for tests."""
    return Agent(
        model,
        instructions="""You are a research assistant working on technology digests.
        Follow the requested output format exactly.
        Stay grounded in the research material you are given and do not
        invent sources, figures or product names.""",
        output_type=str,
        instrument=True,
        name="research_text_agent",
    )


class AgentTextGenerator:
    """`TextGenerator` that delegates to a PydanticAI agent.

    Per-call options map onto the agent run: `max_tokens` and `temperature`
    become model settings, `model` overrides the agent's model and
    `response_schema` switches the run to structured output, returned as JSON.
    """

    def __init__(self, agent: Agent[None, str]) -> None:
        self.agent = agent

    async def generate_text(self, prompt: str, options: GenerationOptions) -> str:
        settings = ModelSettings(max_tokens=options.max_tokens, temperature=options.temperature)
        try:
            if options.response_schema is not None:
                structured = await self.agent.run(
                    prompt,
                    output_type=options.response_schema,
                    model=options.model,
                    model_settings=settings,
                )
                output: BaseModel = structured.output
                return output.model_dump_json()

            result = await self.agent.run(prompt, model=options.model, model_settings=settings)
        except Exception as e:
            log.warning("generation.failed", error=str(e), model=options.model)
            raise TextGenerationError(reason=str(e)) from e

        return result.output


@lru_cache(maxsize=1)
def get_text_generator(model: str = DEFAULT_TEXT_MODEL) -> AgentTextGenerator:
    """Cached getter for production."""
    return AgentTextGenerator(create_text_agent(model))


def clear_generator_cache() -> None:
    get_text_generator.cache_clear()
