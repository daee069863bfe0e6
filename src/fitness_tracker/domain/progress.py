"""Domain models for weigh-ins and progress summaries."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressPoint:
    """Single weigh-in; either metric may be missing."""

    timestamp: int
    weight_kg: float | None
    bmi: float | None
    date_epoch_day: int | None = None


@dataclass(frozen=True)
class MetricsPreview:
    """BMI and calorie target for a candidate weight."""

    weight_kg: float
    bmi: float | None
    calorie_target: float


@dataclass(frozen=True)
class DashboardSummary:
    """Today's logging status and the current streak."""

    today_done: bool
    streak: int


@dataclass(frozen=True)
class AccountSummary:
    """Account screen read model."""

    age: int | None
    height_cm: int | None
    weight_kg: float | None
    bmi: float | None
    calorie_target: float | None
    notifications_enabled: bool
    units: str
    height_display: str
    weight_display: str
