"""Observability for the generation orchestrator.

This module provides:
- Stage event logging (start/success/fail)
- Stage-level timing
- Best-effort structured events: a failing log sink never changes outcomes
"""

import time
from contextlib import contextmanager
from enum import StrEnum

from loguru import logger

LogValue = str | int | float | bool | None


class GenerationStage(StrEnum):
    """Canonical generation stage enum."""

    VALIDATE = "validate"
    INTERNAL = "internal_template"
    EXTERNAL = "external_generation"
    FALLBACK = "fallback"
    ENHANCE = "enhance"


def log_event(event: str, level: str = "INFO", **kwargs: LogValue) -> None:
    """Log a structured event.

    Standard events:
    - generation_attempt_started: New attempt began
    - generation_stage: Stage start/success/fail
    - fallback_engaged: Internal workout substituted for a failure
    - manual_retry_scheduled: Caller-triggered retry is waiting
    - generation_failed: Attempt ended in the error state
    - generation_cancelled: Attempt was cancelled

    Args:
        event: Event name
        level: Loguru level name
        **kwargs: Additional structured fields to include in the log
    """
    try:
        logger.log(level, event, **kwargs)
    except Exception:
        # Logging must never break generation
        return


def log_stage_event(
    stage: GenerationStage,
    status: str,
    attempt_id: str | None = None,
    meta: dict[str, LogValue] | None = None,
) -> None:
    """Log a stage event (start/success/fail).

    Args:
        stage: Generation stage
        status: Event status ("start", "success", or "fail")
        attempt_id: Optional attempt identifier for correlation
        meta: Optional metadata dictionary to include in log

    Raises:
        ValueError: If status is not one of the allowed values
    """
    allowed_statuses = {"start", "success", "fail"}
    if status not in allowed_statuses:
        raise ValueError(f"Status must be one of {allowed_statuses}, got: {status}")

    log_data: dict[str, LogValue] = {
        "stage": stage.value,
        "status": status,
    }

    if attempt_id:
        log_data["attempt_id"] = attempt_id

    if meta:
        log_data.update(meta)

    log_event("generation_stage", level="WARNING" if status == "fail" else "INFO", **log_data)


@contextmanager
def timing(metric_name: str, attempt_id: str | None = None):
    """Context manager for timing operations.

    Args:
        metric_name: Metric name (e.g., "generation.stage.external")
        attempt_id: Optional attempt identifier for correlation

    Yields:
        None (context manager)
    """
    start_time = time.monotonic()
    try:
        yield
    finally:
        elapsed = time.monotonic() - start_time
        log_event(
            "generation_timing",
            metric=metric_name,
            attempt_id=attempt_id,
            duration_seconds=round(elapsed, 4),
        )
