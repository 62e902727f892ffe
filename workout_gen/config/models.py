"""LLM model configuration for workout generation.

Centralized model definitions:
- Workout generation: GPT-4o Mini (structured output)
- Fallback label: used on internally generated workouts
"""

# External workout generation
GENERATION_MODEL = "gpt-4o-mini"

# Label attached to workouts produced by the internal template engine
INTERNAL_MODEL_LABEL = "internal-template"
