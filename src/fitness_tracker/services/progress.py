"""Weigh-in logging, history and streaks."""

import logging
from dataclasses import dataclass, field

from fitness_tracker.domain.models import UserProfile
from fitness_tracker.domain.progress import (
    DashboardSummary,
    MetricsPreview,
    ProgressPoint,
)
from fitness_tracker.domain.results import ActionResult
from fitness_tracker.domain.store import OrderBy
from fitness_tracker.errors import StoreUnavailableError
from fitness_tracker.services.aggregation import streak
from fitness_tracker.services.days import Clock, epoch_day, epoch_millis, utc_now
from fitness_tracker.services.identity import IdentityProvider, require_identity
from fitness_tracker.services.metrics import bmi, calorie_target, to_int, to_number
from fitness_tracker.services.profile import PROGRESS_COLLECTION
from fitness_tracker.services.records import (
    profile_from_document,
    progress_from_document,
)
from fitness_tracker.services.store import DocumentStore, user_path

_logger = logging.getLogger(__name__)

HISTORY_LIMIT = 60


@dataclass
class ProgressService:
    """Service for weigh-ins and the derived progress metrics."""

    store: DocumentStore
    identity: IdentityProvider
    clock: Clock = field(default=utc_now)

    async def preview(self, weight_kg: object) -> MetricsPreview | None:
        """Compute BMI and calorie target for a typed weight without saving."""
        weight = _valid_weight(weight_kg)
        if weight is None:
            return None
        profile = await self._profile()
        return MetricsPreview(
            weight_kg=weight,
            bmi=bmi(weight, profile.height_cm),
            calorie_target=calorie_target(weight, profile.goal) or 0.0,
        )

    async def log_weight(self, weight_kg: object) -> ActionResult:
        """Append a weigh-in and refresh the cached snapshot on the profile.

        The cache write is advisory; its failure is logged and the weigh-in
        still counts as saved.
        """
        identity = require_identity(self.identity)
        weight = _valid_weight(weight_kg)
        if weight is None:
            return ActionResult.failure("Enter a valid weight")
        now = self.clock()
        now_ms = epoch_millis(now)
        try:
            profile = await self._profile()
            goal = profile.goal or "Maintain"
            bmi_now = bmi(weight, profile.height_cm)
            target = calorie_target(weight, goal)
            point: dict[str, object] = {
                "timestamp": now_ms,
                "dateEpochDay": epoch_day(now),
                "weightKg": weight,
                "calorieTarget": target,
                "updatedAt": now_ms,
            }
            if bmi_now is not None:
                point["bmi"] = bmi_now
            doc_id = await self.store.add(
                user_path(identity.user_id, PROGRESS_COLLECTION), point
            )
        except StoreUnavailableError as exc:
            _logger.warning("Weigh-in failed: %s", exc)
            return ActionResult.unavailable(exc)

        cache = {
            "currentWeightKg": weight,
            "lastBmi": bmi_now,
            "calorieTarget": target,
            "goal": goal,
            "weightUpdatedAt": now_ms,
        }
        try:
            await self.store.set(
                user_path(identity.user_id), identity.user_id, cache, merge=True
            )
        except StoreUnavailableError as exc:
            _logger.warning("Cached snapshot not updated: %s", exc)
        return ActionResult.success(
            "Saved",
            data={
                "id": doc_id,
                "weightKg": weight,
                "bmi": bmi_now,
                "calorieTarget": target,
            },
        )

    async def history(self, limit: int = HISTORY_LIMIT) -> list[ProgressPoint]:
        """Return the latest weigh-ins, oldest first, for charting."""
        identity = require_identity(self.identity)
        docs = await self.store.query(
            user_path(identity.user_id, PROGRESS_COLLECTION),
            order_by=OrderBy("timestamp", descending=True),
            limit=limit,
        )
        points = [progress_from_document(doc) for doc in docs]
        return sorted(
            (point for point in points if point is not None),
            key=lambda point: point.timestamp,
        )

    async def dashboard(self) -> DashboardSummary:
        """Return whether today is logged and the current streak."""
        identity = require_identity(self.identity)
        docs = await self.store.query(user_path(identity.user_id, PROGRESS_COLLECTION))
        days = {
            day
            for day in (to_int(doc.get("dateEpochDay")) for doc in docs)
            if day is not None
        }
        today = epoch_day(self.clock())
        return DashboardSummary(today_done=today in days, streak=streak(days, today))

    async def _profile(self) -> UserProfile:
        identity = require_identity(self.identity)
        return profile_from_document(
            await self.store.get(user_path(identity.user_id), identity.user_id)
        )


def _valid_weight(value: object) -> float | None:
    weight = to_number(value)
    if weight is None or weight <= 0:
        return None
    return weight
