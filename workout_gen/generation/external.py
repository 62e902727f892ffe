"""External workout generation.

This module handles:
- The WorkoutProvider protocol for remote generators
- A default provider backed by a pydantic_ai agent with structured output
- The client that wraps one remote call with timeout and retry

The client never falls back to the internal generator itself; that
decision belongs to the orchestrator.
"""

import json
from pathlib import Path
from typing import Protocol

from loguru import logger
from pydantic_ai import Agent

from workout_gen.config.settings import GenerationSettings, settings
from workout_gen.generation.cancellation import CancellationToken
from workout_gen.generation.context import CanonicalVariables
from workout_gen.generation.errors import ApiError
from workout_gen.generation.models import GeneratedWorkout, InternalGenerationResult, Recommendation, WorkoutOrigin
from workout_gen.generation.retry import RetryCallback, with_retry_and_timeout
from workout_gen.generation.schemas import GeneratedWorkoutSchema
from workout_gen.generation.types import GenerationOptions
from workout_gen.llm.model import get_model


class WorkoutProvider(Protocol):
    """Remote workout generator. May raise; latency is unbounded."""

    async def generate_workout(
        self,
        variables: CanonicalVariables,
        recommendations: list[Recommendation],
        prompt: str,
    ) -> GeneratedWorkout: ...


def _load_prompt() -> str:
    """Load workout generator system prompt from the package.

    Returns:
        Prompt content as string

    Raises:
        FileNotFoundError: If prompt file doesn't exist
    """
    prompt_path = Path(__file__).parent / "prompts" / "workout_generator.txt"

    if not prompt_path.exists():
        raise FileNotFoundError(f"Workout generator prompt not found: {prompt_path}")

    return prompt_path.read_text(encoding="utf-8")


def build_user_message(variables: CanonicalVariables, recommendations: list[Recommendation], prompt: str) -> str:
    message_parts = [
        f"Generate a {variables.workout_type} {variables.duration_minutes}-minute workout.",
        "",
        prompt or "No additional guidance.",
    ]
    if recommendations:
        message_parts.extend([
            "",
            "Recommendations (JSON):",
            json.dumps(
                [{"type": rec.type.value, "priority": rec.priority.value, "content": rec.content} for rec in recommendations],
                indent=2,
            ),
        ])
    return "\n".join(message_parts)


class PydanticAIWorkoutProvider:
    """WorkoutProvider backed by a pydantic_ai agent."""

    def __init__(self, config: GenerationSettings | None = None, model_name: str | None = None) -> None:
        self.config = config or settings
        self.model_name = model_name or self.config.generation_model
        self._agent: Agent | None = None

    def _get_agent(self) -> Agent:
        if self._agent is None:
            self._agent = Agent(
                model=get_model("openai", self.model_name, self.config),
                system_prompt=_load_prompt(),
                output_type=GeneratedWorkoutSchema,
            )
        return self._agent

    async def generate_workout(
        self,
        variables: CanonicalVariables,
        recommendations: list[Recommendation],
        prompt: str,
    ) -> GeneratedWorkout:
        agent = self._get_agent()
        user_message = build_user_message(variables, recommendations, prompt)

        logger.debug("Calling LLM for workout", model=self.model_name, focus=variables.focus)
        result = await agent.run(user_message)
        parsed = result.output
        return parsed.to_workout(ai_model=self.model_name)


class ExternalGenerationClient:
    """Invokes a WorkoutProvider under the retry/timeout wrapper."""

    def __init__(self, provider: WorkoutProvider) -> None:
        self.provider = provider

    async def generate(
        self,
        variables: CanonicalVariables,
        internal: InternalGenerationResult,
        options: GenerationOptions,
        *,
        token: CancellationToken | None = None,
        on_retry: RetryCallback | None = None,
    ) -> GeneratedWorkout:
        """Generate a workout remotely.

        Args:
            variables: Canonical variables
            internal: Internal result supplying recommendations and prompt
            options: Attempts, backoff and timeout for this call
            token: Cancellation token of the current attempt
            on_retry: Forwarded to the retry wrapper

        Returns:
            External-origin GeneratedWorkout

        Raises:
            GenerationError: Classified terminal failure
            GenerationCancelledError: If the token is cancelled
        """

        async def call() -> GeneratedWorkout:
            workout = await self.provider.generate_workout(variables, internal.recommendations, internal.prompt)
            if not isinstance(workout, GeneratedWorkout):
                raise ApiError(f"Provider returned {type(workout).__name__} instead of a workout")
            return workout

        workout = await with_retry_and_timeout(
            call,
            attempts=options.retry_attempts,
            base_delay=options.retry_delay_seconds,
            timeout=options.timeout_seconds,
            timeout_message=f"Workout generation timed out after {options.timeout_seconds:g} seconds",
            token=token,
            on_retry=on_retry,
            name="external_generation",
        )

        if workout.origin != WorkoutOrigin.EXTERNAL:
            workout = workout.model_copy(update={"origin": WorkoutOrigin.EXTERNAL})
        return workout
