"""Workout generation orchestrator.

State machine driving one generation attempt at a time:

    idle -> validating -> generating -> enhancing -> complete
    validating | generating | enhancing -> error
    generating | enhancing (or a pending retry) -> cancelled
    generating | enhancing -> idle (superseded by a manual retry)

Each attempt owns a CancellationToken. A new generate_workout call cancels
and supersedes the previous attempt, and every state mutation checks that
its token is still the current, uncancelled one, so a superseded attempt
can never touch state again.
"""

import dataclasses
from collections.abc import Callable
from typing import Protocol

from loguru import logger

from workout_gen.config.settings import GenerationSettings, settings
from workout_gen.generation.cancellation import CancellationToken
from workout_gen.generation.context import CanonicalVariables, build_canonical_variables
from workout_gen.generation.enhancement import enhance_workout
from workout_gen.generation.errors import (
    ApiError,
    ClassifiedError,
    ErrorCode,
    GenerationCancelledError,
    GenerationError,
    InvalidDataError,
    ServiceUnavailableError,
    classify_error,
)
from workout_gen.generation.external import ExternalGenerationClient, PydanticAIWorkoutProvider, WorkoutProvider
from workout_gen.generation.models import GeneratedWorkout
from workout_gen.generation.observability import GenerationStage, log_event, log_stage_event, timing
from workout_gen.generation.progress import ProgressCallback, run_with_progress
from workout_gen.generation.templates.engine import InternalTemplateEngine
from workout_gen.generation.types import GenerationOptions, GenerationRequest, GenerationSnapshot, GenerationStatus

CANCELLED_MESSAGE = "Generation was cancelled"

StateCallback = Callable[[GenerationSnapshot], None]


class ServiceStatus(Protocol):
    """Readiness of the external generation service."""

    def is_ready(self) -> bool: ...

    @property
    def last_error(self) -> str | None: ...


@dataclasses.dataclass
class _Attempt:
    id: str
    token: CancellationToken
    fallback_used: bool = False


class WorkoutGenerationOrchestrator:
    """Owns the generation state and drives validation, generation and fallback."""

    def __init__(
        self,
        provider: WorkoutProvider | None = None,
        *,
        config: GenerationSettings | None = None,
        template_engine: InternalTemplateEngine | None = None,
        on_progress: ProgressCallback | None = None,
        on_state_change: StateCallback | None = None,
        service_status: ServiceStatus | None = None,
    ) -> None:
        self.config = config or settings
        self.provider = provider if provider is not None else PydanticAIWorkoutProvider(self.config)
        self.external_client = ExternalGenerationClient(self.provider)
        self.template_engine = template_engine or InternalTemplateEngine(self.config)
        self._on_progress = on_progress
        self._on_state_change = on_state_change
        self._service_status = service_status

        self._state = GenerationSnapshot()
        self._token: CancellationToken | None = None
        self._retry_token: CancellationToken | None = None
        self._last_request: GenerationRequest | None = None
        self._last_options: GenerationOptions | None = None
        self._attempt_seq = 0

    # -----------------------------
    # Read-only views
    # -----------------------------
    @property
    def state(self) -> GenerationSnapshot:
        return self._state

    @property
    def last_request(self) -> GenerationRequest | None:
        return self._last_request

    @property
    def is_generating(self) -> bool:
        return self._state.is_generating

    @property
    def has_error(self) -> bool:
        return self._state.has_error

    @property
    def can_regenerate(self) -> bool:
        return self._last_request is not None and not self._state.is_generating

    # -----------------------------
    # Operations
    # -----------------------------
    async def generate_workout(
        self,
        request: GenerationRequest,
        options: GenerationOptions | None = None,
    ) -> GeneratedWorkout | None:
        """Run one generation attempt, superseding any attempt in flight.

        Args:
            request: Profile, preferences and workout type
            options: Per-call options (defaults from settings)

        Returns:
            The generated workout, or None on error, cancellation or supersession
        """
        options = options or GenerationOptions.from_settings(self.config)
        self._cancel_in_flight()
        self._last_request = request
        self._last_options = options

        self._attempt_seq += 1
        attempt = _Attempt(id=f"attempt-{self._attempt_seq}", token=CancellationToken(f"attempt-{self._attempt_seq}"))
        self._token = attempt.token

        self._update(
            attempt.token,
            status=GenerationStatus.VALIDATING,
            generation_progress=0,
            error=None,
            message="Validating workout request",
        )
        log_event(
            "generation_attempt_started",
            attempt_id=attempt.id,
            workout_type=request.workout_type,
            use_external_ai=options.use_external_ai,
            fallback_to_internal=options.fallback_to_internal,
            retry_count=self._state.retry_count,
        )

        try:
            return await self._run_attempt(attempt, request, options)
        except GenerationCancelledError:
            log_event("generation_cancelled", attempt_id=attempt.id)
            return None
        finally:
            if self._token is attempt.token:
                self._token = None

    async def retry_generation(self) -> GeneratedWorkout | None:
        """Retry the remembered request after an exponential delay.

        Retry n waits manual_retry_base_seconds * 2^n and runs with a single
        remote attempt. Refused once the retry counter would exceed the limit.

        Returns:
            The generated workout, or None when refused, cancelled or failed
        """
        if self._last_request is None:
            self._set_error(classify_error(InvalidDataError("No previous workout request to retry")))
            return None

        retry_count = self._state.retry_count + 1
        if retry_count > self.config.max_manual_retries:
            refused = dataclasses.replace(
                classify_error(GenerationError("Maximum retry attempts exceeded"), ErrorCode.GENERATION_FAILED),
                retryable=False,
                message="Maximum retry attempts exceeded. Please try again later.",
            )
            if self._state.is_generating:
                # The running attempt owns status and error
                self._set_state(last_error=refused)
            else:
                self._set_error(refused)
            log_event("manual_retry_refused", level="WARNING", retry_count=self._state.retry_count)
            return None

        superseded = self._state.is_generating
        self._cancel_in_flight()
        delay = self.config.manual_retry_base_seconds * (2**retry_count)
        retry_token = CancellationToken(f"retry-{retry_count}")
        self._retry_token = retry_token
        changes: dict = {"retry_count": retry_count, "message": f"Retrying in {delay:g} seconds"}
        if superseded:
            changes.update(status=GenerationStatus.IDLE, generation_progress=0, error=None)
        self._set_state(**changes)
        log_event("manual_retry_scheduled", retry_count=retry_count, delay_seconds=delay)

        try:
            await retry_token.sleep(delay)
        except GenerationCancelledError:
            return None
        if self._retry_token is not retry_token:
            return None
        self._retry_token = None

        base_options = self._last_options or GenerationOptions.from_settings(self.config)
        options = base_options.model_copy(update={"retry_attempts": 1, "enable_detailed_logging": True})
        return await self.generate_workout(self._last_request, options)

    async def regenerate_workout(self, options: GenerationOptions | None = None) -> GeneratedWorkout | None:
        """Generate again from the remembered request, ignoring the retry counter."""
        if self._last_request is None:
            self._set_error(classify_error(InvalidDataError("No previous workout request to regenerate")))
            return None
        return await self.generate_workout(self._last_request, options or self._last_options)

    def cancel_generation(self) -> None:
        """Cancel the attempt in flight and any pending retry.

        No-op when nothing is running. The remembered request is kept.
        """
        in_flight = self._token is not None and not self._token.is_cancelled
        pending_retry = self._retry_token is not None and not self._retry_token.is_cancelled
        if not (in_flight or pending_retry):
            return

        self._cancel_in_flight()
        self._set_state(status=GenerationStatus.CANCELLED, error=None, message=CANCELLED_MESSAGE)
        log_event("generation_cancel_requested", in_flight=in_flight, pending_retry=pending_retry)

    def clear_workout(self) -> None:
        """Cancel everything and return to the initial idle state."""
        self._cancel_in_flight()
        self._last_request = None
        self._last_options = None
        self._state = GenerationSnapshot()
        self._notify()

    # -----------------------------
    # Attempt pipeline
    # -----------------------------
    async def _run_attempt(
        self,
        attempt: _Attempt,
        request: GenerationRequest,
        options: GenerationOptions,
    ) -> GeneratedWorkout | None:
        log_stage_event(GenerationStage.VALIDATE, "start", attempt.id)
        try:
            variables = build_canonical_variables(request)
            if options.use_external_ai:
                self._check_service_ready()
        except GenerationError as e:
            log_stage_event(GenerationStage.VALIDATE, "fail", attempt.id, {"error_code": e.code.value})
            self._fail(attempt, e.classified)
            return None
        log_stage_event(GenerationStage.VALIDATE, "success", attempt.id)

        try:
            workout = await self._generate(attempt, variables, options)
            workout = self._enhance(attempt, workout)
        except GenerationCancelledError:
            raise
        except Exception as e:
            classified = GenerationError.from_exception(e).classified
            fallback = self._last_resort_fallback(attempt, variables, options, classified)
            if fallback is None:
                self._fail(attempt, classified)
                return None
            workout = fallback

        return self._complete(attempt, workout)

    async def _generate(
        self,
        attempt: _Attempt,
        variables: CanonicalVariables,
        options: GenerationOptions,
    ) -> GeneratedWorkout:
        token = attempt.token
        self._update(token, status=GenerationStatus.GENERATING, error=None, message="Building workout template")
        self._set_progress(token, 10)

        log_stage_event(GenerationStage.INTERNAL, "start", attempt.id)

        async def internal_template():
            return self.template_engine.generate(variables, use_external=options.use_external_ai)

        internal = await run_with_progress(
            internal_template(),
            self._progress_callback(token),
            start=10,
            end=40,
            duration=self.config.internal_progress_seconds,
            steps=self.config.progress_steps,
            token=token,
        )
        token.raise_if_cancelled()
        log_stage_event(
            GenerationStage.INTERNAL,
            "success",
            attempt.id,
            {"recommendation_count": len(internal.recommendations)},
        )
        if options.enable_detailed_logging:
            logger.info(
                "Internal generation detail",
                attempt_id=attempt.id,
                recommendations=[rec.content for rec in internal.recommendations],
                prompt=internal.prompt,
            )
        self._set_progress(token, 50)

        if not options.use_external_ai:
            return internal.template

        self._update(token, message="Generating your workout")
        log_stage_event(GenerationStage.EXTERNAL, "start", attempt.id)

        def on_retry(failed_attempt: int, error: GenerationError, delay: float) -> None:
            self._update(token, message=f"Retrying workout generation (attempt {failed_attempt + 1})")

        try:
            with timing("generation.stage.external", attempt.id):
                workout = await run_with_progress(
                    self.external_client.generate(variables, internal, options, token=token, on_retry=on_retry),
                    self._progress_callback(token),
                    start=50,
                    end=90,
                    duration=self.config.external_progress_seconds,
                    steps=self.config.progress_steps,
                    token=token,
                )
        except GenerationCancelledError:
            raise
        except Exception as e:
            error = GenerationError.from_exception(e)
            classified = error.classified
            log_stage_event(GenerationStage.EXTERNAL, "fail", attempt.id, {"error_code": classified.code.value})
            token.raise_if_cancelled()
            if not (options.fallback_to_internal and classified.fallback_available):
                raise error
            attempt.fallback_used = True
            log_event(
                "fallback_engaged",
                level="WARNING",
                attempt_id=attempt.id,
                reason=classified.code.value,
                details=classified.details,
            )
            return internal.template

        token.raise_if_cancelled()
        log_stage_event(GenerationStage.EXTERNAL, "success", attempt.id, {"workout_id": workout.id})
        return workout

    def _enhance(self, attempt: _Attempt, workout: GeneratedWorkout) -> GeneratedWorkout:
        self._update(attempt.token, status=GenerationStatus.ENHANCING, error=None, message="Finalizing workout")
        log_stage_event(GenerationStage.ENHANCE, "start", attempt.id)
        enhanced = enhance_workout(workout, default_confidence=self.config.default_confidence)
        log_stage_event(GenerationStage.ENHANCE, "success", attempt.id, {"origin": enhanced.origin.value})
        return enhanced

    def _last_resort_fallback(
        self,
        attempt: _Attempt,
        variables: CanonicalVariables,
        options: GenerationOptions,
        classified: ClassifiedError,
    ) -> GeneratedWorkout | None:
        if not (options.fallback_to_internal and classified.fallback_available) or attempt.fallback_used:
            return None

        attempt.fallback_used = True
        log_stage_event(GenerationStage.FALLBACK, "start", attempt.id, {"reason": classified.code.value})
        try:
            workout = enhance_workout(
                self.template_engine.generate_fallback(variables),
                default_confidence=self.config.default_confidence,
            )
        except Exception as e:
            log_stage_event(GenerationStage.FALLBACK, "fail", attempt.id, {"error": str(e)})
            return None
        log_stage_event(GenerationStage.FALLBACK, "success", attempt.id)
        return workout

    def _check_service_ready(self) -> None:
        if self._service_status is None:
            return
        try:
            ready = self._service_status.is_ready()
        except Exception as e:
            raise ServiceUnavailableError(f"Service status check failed: {e}") from e
        if ready:
            return
        last_error = self._service_status.last_error
        if last_error:
            raise ApiError(f"Workout generation service error: {last_error}")
        raise ServiceUnavailableError("Workout generation service is not ready")

    def _complete(self, attempt: _Attempt, workout: GeneratedWorkout) -> GeneratedWorkout | None:
        self._set_progress(attempt.token, 100)
        completed = self._update(
            attempt.token,
            status=GenerationStatus.COMPLETE,
            error=None,
            last_error=None,
            message="Workout ready",
            retry_count=0,
            generated_workout=workout,
            last_generated=workout.generated_at,
        )
        if not completed:
            raise GenerationCancelledError()
        log_event(
            "generation_completed",
            attempt_id=attempt.id,
            workout_id=workout.id,
            origin=workout.origin.value,
            confidence=workout.confidence,
            fallback_used=attempt.fallback_used,
        )
        return workout

    def _fail(self, attempt: _Attempt, classified: ClassifiedError) -> None:
        failed = self._update(
            attempt.token,
            status=GenerationStatus.ERROR,
            error=classified,
            last_error=classified,
            message=classified.message,
        )
        if failed:
            log_event(
                "generation_failed",
                level="ERROR",
                attempt_id=attempt.id,
                error_code=classified.code.value,
                retryable=classified.retryable,
                details=classified.details,
            )

    # -----------------------------
    # State plumbing
    # -----------------------------
    def _is_current(self, token: CancellationToken) -> bool:
        return self._token is token and not token.is_cancelled

    def _cancel_in_flight(self) -> None:
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._retry_token is not None:
            self._retry_token.cancel()
            self._retry_token = None

    def _update(self, token: CancellationToken, **changes) -> bool:
        if not self._is_current(token):
            return False
        self._set_state(**changes)
        return True

    def _set_state(self, **changes) -> None:
        self._state = dataclasses.replace(self._state, **changes)
        self._notify()

    def _set_error(self, classified: ClassifiedError) -> None:
        self._set_state(status=GenerationStatus.ERROR, error=classified, last_error=classified, message=classified.message)

    def _set_progress(self, token: CancellationToken, value: int) -> None:
        value = max(0, min(100, value))
        if value <= self._state.generation_progress or not self._update(token, generation_progress=value):
            return
        if self._on_progress is not None:
            try:
                self._on_progress(value)
            except Exception as e:
                logger.warning("Progress callback failed", progress=value, error=str(e))

    def _progress_callback(self, token: CancellationToken) -> ProgressCallback:
        return lambda value: self._set_progress(token, value)

    def _notify(self) -> None:
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(self._state)
        except Exception as e:
            logger.warning("State change callback failed", status=self._state.status.value, error=str(e))
