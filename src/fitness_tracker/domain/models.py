"""Domain models for users and their profiles."""

from dataclasses import dataclass
from enum import Enum


class Goal(str, Enum):
    """Weight goal chosen during onboarding."""

    LOSE = "Lose"
    MAINTAIN = "Maintain"
    GAIN = "Gain"


class Units(str, Enum):
    """Display units for the account screen."""

    METRIC = "Metric"
    IMPERIAL = "Imperial"


@dataclass(frozen=True)
class Identity:
    """Authenticated user handed in by the auth collaborator."""

    user_id: str
    email: str | None = None

    @property
    def username(self) -> str:
        """Display name derived from the e-mail local part."""
        if self.email:
            local = self.email.split("@", 1)[0]
            if local:
                return local
        return "User"


@dataclass(frozen=True)
class UserProfile:
    """Profile document including the advisory cached snapshot."""

    age: int | None = None
    height_cm: int | None = None
    legacy_weight_kg: float | None = None
    goal: str = Goal.MAINTAIN.value
    notifications_enabled: bool = False
    units: str = Units.METRIC.value
    current_weight_kg: float | None = None
    last_bmi: float | None = None
    calorie_target: float | None = None
    weight_updated_at: int | None = None
