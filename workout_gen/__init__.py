"""Workout generation core: orchestrated AI workout generation with internal fallback."""
