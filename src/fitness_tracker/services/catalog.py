"""Fixed catalogs users pick workouts and meals from."""

from fitness_tracker.domain.entries import LedgerKind, MealEntry, WorkoutEntry

WORKOUT_CATALOG: tuple[WorkoutEntry, ...] = (
    WorkoutEntry("Full Body Beginner", met=4.5, duration_min=20, intensity="Easy"),
    WorkoutEntry("Push Day", met=6.0, duration_min=30, intensity="Medium"),
    WorkoutEntry("Pull Day", met=6.0, duration_min=30, intensity="Medium"),
    WorkoutEntry("Legs & Core", met=7.5, duration_min=35, intensity="Hard"),
    WorkoutEntry("HIIT Fat Burn", met=9.0, duration_min=18, intensity="Hard"),
)

MEAL_CATALOG: tuple[MealEntry, ...] = (
    MealEntry("Oats & Banana", kcal=350, protein=12, carbs=60, fat=7),
    MealEntry("Grilled Chicken & Rice", kcal=520, protein=42, carbs=60, fat=12),
    MealEntry("Paneer Wrap", kcal=480, protein=24, carbs=45, fat=22),
    MealEntry("Greek Yogurt & Nuts", kcal=280, protein=18, carbs=15, fat=16),
    MealEntry("Salmon & Quinoa", kcal=560, protein=40, carbs=45, fat=20),
    MealEntry("Veg Khichdi + Curd", kcal=420, protein=16, carbs=68, fat=10),
)


def catalog_for(kind: LedgerKind) -> tuple[WorkoutEntry | MealEntry, ...]:
    return WORKOUT_CATALOG if kind is LedgerKind.WORKOUTS else MEAL_CATALOG


def find_catalog_item(kind: LedgerKind, name: str) -> WorkoutEntry | MealEntry | None:
    """Return the catalog entry with this exact name, if any."""
    for item in catalog_for(kind):
        if item.name == name:
            return item
    return None
