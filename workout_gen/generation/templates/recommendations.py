"""Rule-based recommendations derived from canonical variables."""

from workout_gen.generation.context import CanonicalVariables
from workout_gen.generation.models import Priority, Recommendation, RecommendationType
from workout_gen.generation.templates.exercise_library import CARDIO, FLEXIBILITY, focus_category

_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def priority_for(confidence: float) -> Priority:
    if confidence >= 0.8:
        return Priority.HIGH
    if confidence >= 0.6:
        return Priority.MEDIUM
    return Priority.LOW


def _rec(rec_type: RecommendationType, content: str, confidence: float) -> Recommendation:
    return Recommendation(type=rec_type, content=content, confidence=confidence, priority=priority_for(confidence))


def _humanize(slug: str) -> str:
    return " ".join(part for part in slug.split("_") if part)


def _energy(variables: CanonicalVariables) -> list[Recommendation]:
    if variables.energy_category == "low":
        return [_rec(RecommendationType.ENERGY, "Keep intensity light today and prioritize movement quality over volume.", 0.9)]
    if variables.energy_category == "high":
        return [_rec(RecommendationType.ENERGY, "Energy is high: add a set to the main exercises if form stays solid.", 0.75)]
    return [_rec(RecommendationType.ENERGY, "Train at a steady, moderate effort.", 0.6)]


def _soreness(variables: CanonicalVariables) -> list[Recommendation]:
    rating = variables.soreness_rating
    if rating == 0:
        return []
    areas = ", ".join(_humanize(area) for area in variables.soreness_areas) or "sore areas"
    if rating >= 7:
        return [_rec(RecommendationType.SORENESS, f"Significant soreness reported: reduce load and avoid heavy work on {areas}.", 0.95)]
    if rating >= 4:
        return [_rec(RecommendationType.SORENESS, f"Extend the warm-up and include mobility work for {areas}.", 0.8)]
    return [_rec(RecommendationType.SORENESS, f"Light soreness: gentle movement will help {areas} recover.", 0.65)]


def _focus(variables: CanonicalVariables) -> list[Recommendation]:
    category = focus_category(variables.focus)
    if category == CARDIO:
        return [_rec(RecommendationType.FOCUS, "Alternate work and recovery intervals to sustain your effort.", 0.8)]
    if category == FLEXIBILITY:
        return [_rec(RecommendationType.FOCUS, "Hold each stretch for 20 to 30 seconds and breathe steadily.", 0.85)]
    return [_rec(RecommendationType.FOCUS, "Use a controlled tempo and full range of motion on strength moves.", 0.8)]


def _duration(variables: CanonicalVariables) -> list[Recommendation]:
    if variables.duration_category == "short":
        return [_rec(RecommendationType.DURATION, "Short session: pair exercises back to back to keep rest minimal.", 0.75)]
    if variables.duration_category == "long":
        return [_rec(RecommendationType.DURATION, "Long session: hydrate and pace your effort across the main block.", 0.7)]
    return []


def _equipment(variables: CanonicalVariables) -> list[Recommendation]:
    if not variables.equipment:
        return [_rec(RecommendationType.EQUIPMENT, "No equipment selected: the workout uses bodyweight exercises.", 0.85)]
    return [_rec(RecommendationType.EQUIPMENT, "Use your available equipment to add progressive resistance.", 0.7)]


def _injuries(variables: CanonicalVariables) -> list[Recommendation]:
    return [
        _rec(RecommendationType.INJURY, f"Avoid movements that aggravate your {_humanize(injury)}; stop if you feel pain.", 0.95)
        for injury in variables.injuries
    ]


def _goal(variables: CanonicalVariables) -> list[Recommendation]:
    goal = variables.primary_goal
    if "weight_loss" in goal:
        return [_rec(RecommendationType.GOAL, "Keep rest periods short to raise overall calorie burn.", 0.75)]
    if "muscle" in goal or "strength" in goal:
        return [_rec(RecommendationType.GOAL, "Increase resistance gradually from week to week.", 0.75)]
    if "flexibility" in goal or "mobility" in goal:
        return [_rec(RecommendationType.GOAL, "Finish with extra time on the stretches that feel tightest.", 0.7)]
    return [_rec(RecommendationType.GOAL, f"Consistency matters more than intensity for {_humanize(goal)}.", 0.65)]


_RULES = (_injuries, _soreness, _energy, _focus, _duration, _equipment, _goal)


def generate_recommendations(
    variables: CanonicalVariables,
    confidence_threshold: float = 0.7,
    max_recommendations: int = 10,
) -> list[Recommendation]:
    """Generate recommendations from every rule domain.

    Args:
        variables: Canonical variables
        confidence_threshold: Minimum confidence to keep a recommendation
        max_recommendations: Maximum number returned

    Returns:
        Recommendations sorted by priority, then confidence (descending)
    """
    recommendations = [rec for rule in _RULES for rec in rule(variables)]
    kept = [rec for rec in recommendations if rec.confidence >= confidence_threshold]
    kept.sort(key=lambda rec: (_PRIORITY_RANK[rec.priority], -rec.confidence))
    return kept[:max_recommendations]
