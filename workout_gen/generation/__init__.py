"""Workout generation: validation, internal templates, external calls and orchestration."""
