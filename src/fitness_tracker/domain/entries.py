"""Domain models for planned and logged entries."""

from dataclasses import dataclass
from enum import Enum


class LedgerKind(str, Enum):
    """Entry domain; each has its own plan set and log collection."""

    WORKOUTS = "workouts"
    MEALS = "meals"

    @property
    def plan_collection(self) -> str:
        return "workoutsToday" if self is LedgerKind.WORKOUTS else "mealPlansToday"

    @property
    def log_collection(self) -> str:
        return "workoutLogs" if self is LedgerKind.WORKOUTS else "mealLogs"


@dataclass(frozen=True)
class WorkoutEntry:
    """Planned or logged workout."""

    name: str
    met: float | None = None
    duration_min: int | None = None
    kcal: int | None = None
    intensity: str | None = None
    date_epoch_day: int | None = None
    created_at: int | None = None
    id: str | None = None


@dataclass(frozen=True)
class MealEntry:
    """Planned or eaten meal."""

    name: str
    kcal: int | None = None
    protein: int | None = None
    carbs: int | None = None
    fat: int | None = None
    date_epoch_day: int | None = None
    created_at: int | None = None
    id: str | None = None


Entry = WorkoutEntry | MealEntry


@dataclass(frozen=True)
class MacroTotals:
    """Summed energy and macronutrients."""

    kcal: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
