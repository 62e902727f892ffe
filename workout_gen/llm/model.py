"""LLM model factory for the external workout generator."""

import os

from pydantic_ai.models.openai import OpenAIModel

from workout_gen.config.settings import GenerationSettings, settings


def get_model(provider: str, model_name: str, config: GenerationSettings | None = None):
    config = config or settings
    if provider == "openai":
        # pydantic_ai reads the key from the environment
        if config.openai_api_key and not os.getenv("OPENAI_API_KEY"):
            os.environ["OPENAI_API_KEY"] = config.openai_api_key
        return OpenAIModel(model_name)

    raise ValueError(f"Unsupported LLM provider: {provider}")
