"""Exercise library for the internal template engine.

Exercises are grouped by phase and focus category. Each template names the
equipment tags it needs (empty means bodyweight) and the injury areas it
aggravates, so selection can filter without any randomness.
"""

from dataclasses import dataclass

STRENGTH = "strength"
CARDIO = "cardio"
FLEXIBILITY = "flexibility"
WARMUP = "warmup"
COOLDOWN = "cooldown"

FOCUS_CATEGORIES = (STRENGTH, CARDIO, FLEXIBILITY)


@dataclass(frozen=True)
class ExerciseTemplate:
    name: str
    category: str
    equipment: tuple[str, ...] = ()
    timed: bool = False
    contraindications: tuple[str, ...] = ()
    description: str = ""
    form: str = ""

    @property
    def equipment_label(self) -> list[str]:
        return [EQUIPMENT_LABELS[tag] for tag in self.equipment] or ["body weight"]


EQUIPMENT_LABELS = {
    "dumbbell": "dumbbells",
    "kettlebell": "kettlebell",
    "resistance_band": "resistance band",
    "barbell": "barbell",
    "machine": "strength machine",
    "cardio_machine": "cardio machine",
    "suspension": "suspension trainer",
    "foam_roller": "foam roller",
    "yoga_mat": "yoga mat",
}

# Substrings of canonical equipment slugs that unlock each tag
_EQUIPMENT_KEYWORDS = {
    "dumbbell": ("dumbbell",),
    "kettlebell": ("kettlebell",),
    "resistance_band": ("resistance_band", "band"),
    "barbell": ("barbell",),
    "machine": ("strength_machine",),
    "cardio_machine": ("cardio_machine", "treadmill", "bike", "elliptical"),
    "suspension": ("trx", "suspension"),
    "foam_roller": ("foam_roller",),
    "yoga_mat": ("yoga_mat", "mat"),
}

_FOCUS_KEYWORDS = {
    CARDIO: ("cardio", "hiit", "endurance", "conditioning", "weight_loss", "fat_loss", "running"),
    FLEXIBILITY: ("flexib", "mobility", "yoga", "stretch", "recovery", "pilates"),
}


def _ex(name, category, equipment=(), timed=False, contraindications=(), description="", form=""):
    return ExerciseTemplate(
        name=name,
        category=category,
        equipment=tuple(equipment),
        timed=timed,
        contraindications=tuple(contraindications),
        description=description,
        form=form,
    )


EXERCISES: tuple[ExerciseTemplate, ...] = (
    # Warm-up
    _ex("Marching in Place", WARMUP, timed=True, description="Lift knees alternately at an easy pace."),
    _ex("Arm Circles", WARMUP, timed=True, contraindications=("shoulder",), description="Small to large circles, both directions."),
    _ex("Hip Circles", WARMUP, timed=True, contraindications=("hip",), description="Hands on hips, rotate slowly."),
    _ex("Leg Swings", WARMUP, timed=True, contraindications=("hip", "knee"), description="Swing each leg front to back."),
    _ex("Torso Twists", WARMUP, timed=True, contraindications=("lower_back",), description="Rotate the upper body side to side."),
    _ex("Cat-Cow Stretch", WARMUP, timed=True, contraindications=("wrist_or_elbow",), description="Alternate arching and rounding the spine."),
    # Strength
    _ex("Glute Bridges", STRENGTH, form="Drive through the heels and squeeze at the top."),
    _ex("Bird Dog", STRENGTH, contraindications=("wrist_or_elbow",), form="Keep hips level while extending opposite arm and leg."),
    _ex("Dead Bug", STRENGTH, form="Press the lower back into the floor throughout."),
    _ex("Bodyweight Squats", STRENGTH, contraindications=("knee",), form="Knees track over toes, chest up."),
    _ex("Push-ups", STRENGTH, contraindications=("wrist_or_elbow", "shoulder"), form="Body in one straight line."),
    _ex("Reverse Lunges", STRENGTH, contraindications=("knee", "ankle"), form="Step back and lower the back knee under control."),
    _ex("Plank", STRENGTH, timed=True, contraindications=("wrist_or_elbow", "shoulder"), form="Brace the core, do not let the hips sag."),
    _ex("Wall Sit", STRENGTH, timed=True, contraindications=("knee",), form="Thighs parallel to the floor, back flat on the wall."),
    _ex("Dumbbell Goblet Squat", STRENGTH, ("dumbbell",), contraindications=("knee",), form="Hold the dumbbell at chest height."),
    _ex("Dumbbell Bent-Over Row", STRENGTH, ("dumbbell",), contraindications=("lower_back",), form="Hinge at the hips with a neutral spine."),
    _ex("Dumbbell Shoulder Press", STRENGTH, ("dumbbell",), contraindications=("shoulder", "neck"), form="Press overhead without arching the back."),
    _ex("Dumbbell Romanian Deadlift", STRENGTH, ("dumbbell",), contraindications=("lower_back",), form="Push the hips back, soft knees."),
    _ex("Kettlebell Swing", STRENGTH, ("kettlebell",), contraindications=("lower_back", "shoulder"), form="Power comes from the hip hinge."),
    _ex("Kettlebell Goblet Squat", STRENGTH, ("kettlebell",), contraindications=("knee",), form="Elbows inside the knees at the bottom."),
    _ex("Resistance Band Row", STRENGTH, ("resistance_band",), form="Squeeze the shoulder blades together."),
    _ex("Resistance Band Pull-Apart", STRENGTH, ("resistance_band",), form="Arms straight, pull the band to the chest."),
    _ex("Barbell Back Squat", STRENGTH, ("barbell",), contraindications=("knee", "lower_back"), form="Brace before each descent."),
    _ex("Barbell Deadlift", STRENGTH, ("barbell",), contraindications=("lower_back",), form="Bar stays close to the legs."),
    _ex("Barbell Bench Press", STRENGTH, ("barbell",), contraindications=("shoulder", "wrist_or_elbow"), form="Feet planted, controlled descent."),
    _ex("Machine Leg Press", STRENGTH, ("machine",), contraindications=("knee",), form="Do not lock the knees at the top."),
    _ex("Lat Pulldown", STRENGTH, ("machine",), contraindications=("shoulder",), form="Pull to the upper chest, not behind the neck."),
    _ex("Suspension Trainer Row", STRENGTH, ("suspension",), form="Walk the feet forward to increase difficulty."),
    # Cardio
    _ex("Step Jacks", CARDIO, timed=True, description="Low-impact jumping jack, stepping side to side."),
    _ex("Shadow Boxing", CARDIO, timed=True, contraindications=("shoulder",), description="Light punches with constant foot movement."),
    _ex("Jumping Jacks", CARDIO, timed=True, contraindications=("knee", "ankle", "foot_or_arch")),
    _ex("High Knees", CARDIO, timed=True, contraindications=("knee", "ankle", "hip")),
    _ex("Mountain Climbers", CARDIO, timed=True, contraindications=("wrist_or_elbow", "shoulder")),
    _ex("Skater Steps", CARDIO, timed=True, contraindications=("knee", "ankle")),
    _ex("Burpees", CARDIO, contraindications=("knee", "wrist_or_elbow", "lower_back", "shoulder")),
    _ex("Treadmill Intervals", CARDIO, ("cardio_machine",), timed=True, contraindications=("ankle", "foot_or_arch")),
    _ex("Stationary Bike Intervals", CARDIO, ("cardio_machine",), timed=True),
    _ex("Kettlebell Deadlift to High Pull", CARDIO, ("kettlebell",), contraindications=("lower_back", "shoulder")),
    # Flexibility
    _ex("Child's Pose", FLEXIBILITY, timed=True, contraindications=("knee",)),
    _ex("Supine Spinal Twist", FLEXIBILITY, timed=True),
    _ex("Thread the Needle", FLEXIBILITY, timed=True, contraindications=("shoulder",)),
    _ex("Downward Dog", FLEXIBILITY, timed=True, contraindications=("wrist_or_elbow", "shoulder")),
    _ex("Forward Fold", FLEXIBILITY, timed=True, contraindications=("lower_back",)),
    _ex("Hip Flexor Stretch", FLEXIBILITY, timed=True, contraindications=("knee",)),
    _ex("World's Greatest Stretch", FLEXIBILITY, timed=True, contraindications=("hip", "wrist_or_elbow")),
    _ex("Foam Roller Thoracic Extension", FLEXIBILITY, ("foam_roller",), timed=True, contraindications=("neck",)),
    # Cool-down
    _ex("Deep Breathing", COOLDOWN, timed=True, description="Slow nasal breathing, long exhales."),
    _ex("Seated Hamstring Stretch", COOLDOWN, timed=True, contraindications=("lower_back",)),
    _ex("Standing Quad Stretch", COOLDOWN, timed=True, contraindications=("knee", "ankle")),
    _ex("Chest Opener Stretch", COOLDOWN, timed=True, contraindications=("shoulder",)),
    _ex("Figure Four Stretch", COOLDOWN, timed=True, contraindications=("hip", "knee")),
    _ex("Neck Release", COOLDOWN, timed=True, contraindications=("neck",)),
)

# Always allowed: bodyweight, no contraindications
SAFE_EXERCISES = {
    WARMUP: "Marching in Place",
    STRENGTH: "Glute Bridges",
    CARDIO: "Step Jacks",
    FLEXIBILITY: "Supine Spinal Twist",
    COOLDOWN: "Deep Breathing",
}

_BY_NAME = {exercise.name: exercise for exercise in EXERCISES}


def focus_category(focus: str) -> str:
    """Map a canonical focus slug to a library category."""
    for category, keywords in _FOCUS_KEYWORDS.items():
        if any(keyword in focus for keyword in keywords):
            return category
    return STRENGTH


def equipment_tags(equipment: tuple[str, ...]) -> frozenset[str]:
    """Resolve canonical equipment slugs to library equipment tags."""
    tags = set()
    for item in equipment:
        for tag, keywords in _EQUIPMENT_KEYWORDS.items():
            if any(keyword in item for keyword in keywords):
                tags.add(tag)
    return frozenset(tags)


def select_exercises(
    category: str,
    *,
    equipment: frozenset[str],
    injuries: tuple[str, ...] = (),
    excluded: tuple[str, ...] = (),
    limit: int,
) -> list[ExerciseTemplate]:
    """Select up to `limit` exercises of a category, in library order.

    Equipment-backed exercises come first so available gear gets used.
    Never returns an empty list for limit >= 1: when filters leave nothing,
    the category's safe exercise is returned.
    """
    excluded_names = {name.lower() for name in excluded}
    candidates = [
        exercise
        for exercise in EXERCISES
        if exercise.category == category
        and set(exercise.equipment) <= equipment
        and not any(injury in exercise.contraindications for injury in injuries)
        and exercise.name.lower() not in excluded_names
    ]
    candidates.sort(key=lambda exercise: 0 if exercise.equipment else 1)

    selected = candidates[: max(1, limit)]
    if not selected:
        selected = [_BY_NAME[SAFE_EXERCISES[category]]]
    return selected
