"""Developer CLI for workout generation.

Runs one orchestrated generation from a JSON request file, exercising the
same orchestrator code path as library callers.
"""

import asyncio
import json
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.text import Text

from workout_gen.config.settings import settings
from workout_gen.core.logger import setup_logger
from workout_gen.generation.orchestrator import WorkoutGenerationOrchestrator
from workout_gen.generation.types import GenerationOptions, GenerationRequest

# Initialize Rich console for output
console = Console()

app = typer.Typer(
    name="workout-gen",
    help="Workout generation CLI - run the orchestrator locally",
    add_completion=False,
)

EXIT_GENERATION_FAILED = 1
EXIT_BAD_REQUEST = 2


def _load_request(path: Path) -> GenerationRequest:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] could not read request JSON from {path}: {e}")
        raise typer.Exit(EXIT_BAD_REQUEST) from e

    try:
        return GenerationRequest.model_validate(raw)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] request does not match the expected schema:\n{e}")
        raise typer.Exit(EXIT_BAD_REQUEST) from e


@app.command()
def generate(
    request_json: Path = typer.Argument(..., help="Path to a GenerationRequest JSON file"),
    internal_only: bool = typer.Option(False, "--internal-only", help="Skip the external generator"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Fail instead of using the internal fallback"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-attempt timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", help="Remote call attempts"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the workout JSON to this file"),
) -> None:
    """Generate one workout and print it as JSON."""
    setup_logger(level=(log_level or settings.log_level).upper())
    request = _load_request(request_json)

    overrides: dict = {
        "use_external_ai": not internal_only,
        "fallback_to_internal": not no_fallback,
    }
    if timeout is not None:
        overrides["timeout_seconds"] = timeout
    if retries is not None:
        overrides["retry_attempts"] = retries

    try:
        options = GenerationOptions.from_settings(settings, **overrides)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] invalid options:\n{e}")
        raise typer.Exit(EXIT_BAD_REQUEST) from e

    orchestrator = WorkoutGenerationOrchestrator(config=settings)
    workout = asyncio.run(orchestrator.generate_workout(request, options))

    if workout is None:
        error = orchestrator.state.error
        message = error.message if error else "Workout generation did not complete"
        subtitle = error.recovery_suggestion if error else None
        console.print(Panel(Text(message, style="bold red"), title=error.code.value if error else None, subtitle=subtitle, border_style="red"))
        raise typer.Exit(EXIT_GENERATION_FAILED)

    payload = workout.model_dump_json(indent=2)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        logger.info("Workout written", path=str(output), workout_id=workout.id)
    else:
        console.print(JSON(payload))

    console.print(
        Panel(
            Text(f"{workout.title} ({workout.origin.value}, confidence {workout.confidence})", style="bold green"),
            border_style="green",
        )
    )


@app.command()
def show_config() -> None:
    """Print the effective generation settings (secrets masked)."""
    data = settings.model_dump()
    data["openai_api_key"] = "***" if settings.openai_api_key else ""
    console.print(JSON(json.dumps(data)))


if __name__ == "__main__":
    app()
