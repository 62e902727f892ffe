from loguru import logger
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from workout_gen.config.models import GENERATION_MODEL


class GenerationSettings(BaseSettings):
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("WORKOUT_GEN_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    generation_model: str = Field(default=GENERATION_MODEL, description="Model used for external generation")
    log_level: str = Field(default="INFO")

    # External generation (per-call defaults, see GenerationOptions)
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-attempt deadline for the remote call")
    retry_attempts: int = Field(default=3, ge=1, description="Remote call attempts before giving up")
    retry_delay_seconds: float = Field(default=1.0, ge=0, description="Base delay for exponential backoff")

    # Manual retries triggered by the caller
    max_manual_retries: int = Field(default=3, ge=0)
    manual_retry_base_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Manual retry n waits manual_retry_base_seconds * 2^n",
    )

    # Simulated progress
    internal_progress_seconds: float = Field(default=3.0, ge=0)
    external_progress_seconds: float = Field(default=5.0, ge=0)
    progress_steps: int = Field(default=8, ge=1)

    # Internal template engine
    confidence_threshold: float = Field(default=0.7, ge=0, le=1)
    max_recommendations: int = Field(default=10, ge=0)
    default_confidence: float = Field(default=0.8, ge=0, le=1)
    fallback_confidence_cap: float = Field(default=0.65, ge=0, le=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WORKOUT_GEN_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("fallback_confidence_cap")
    @classmethod
    def validate_fallback_cap(cls, value: float) -> float:
        """Fallback results must always report lower confidence than external ones."""
        if value >= 0.7:
            raise ValueError("fallback_confidence_cap must be below 0.7")
        return value


settings = GenerationSettings()
