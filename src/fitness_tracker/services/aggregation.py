"""Reducers that turn entry lists into totals and streaks."""

from collections.abc import Iterable

from fitness_tracker.domain.entries import MacroTotals, MealEntry, WorkoutEntry
from fitness_tracker.services.metrics import exercise_kcal

TARGET_TOLERANCE_KCAL = 80


def workout_kcal(entry: WorkoutEntry, weight_kg: float | None) -> int:
    """Resolve the energy of one workout entry.

    Stored kcal wins; otherwise it is recomputed from MET and duration; an
    entry with neither contributes 0.
    """
    if entry.kcal is not None:
        return entry.kcal
    if entry.met is None or entry.duration_min is None:
        return 0
    return exercise_kcal(entry.met, entry.duration_min, weight_kg)


def sum_workout_kcal(
    entries: Iterable[WorkoutEntry], weight_kg: float | None
) -> int:
    return sum(workout_kcal(entry, weight_kg) for entry in entries)


def sum_macros(entries: Iterable[MealEntry]) -> MacroTotals:
    kcal = protein = carbs = fat = 0
    for entry in entries:
        kcal += entry.kcal or 0
        protein += entry.protein or 0
        carbs += entry.carbs or 0
        fat += entry.fat or 0
    return MacroTotals(kcal=kcal, protein=protein, carbs=carbs, fat=fat)


def streak(logged_days: Iterable[int], today: int) -> int:
    """Count consecutive logged days walking back from today.

    The walk always starts at today, so a day without a log today resets the
    streak to 0 even when yesterday was logged.
    """
    days = set(logged_days)
    count = 0
    day = today
    while day in days:
        count += 1
        day -= 1
    return count


def target_verdict(target: float | None, eaten_kcal: int) -> str | None:
    """Describe how today's intake compares to the calorie target."""
    if target is None:
        return None
    diff = int(target) - eaten_kcal
    if diff > TARGET_TOLERANCE_KCAL:
        return f"Under target by {diff} kcal"
    if diff < -TARGET_TOLERANCE_KCAL:
        return f"Over target by {-diff} kcal"
    return "On target"
