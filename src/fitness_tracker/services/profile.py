"""Profile onboarding and account settings."""

import logging
from dataclasses import dataclass

from fitness_tracker.domain.models import Goal, Units, UserProfile
from fitness_tracker.domain.progress import AccountSummary
from fitness_tracker.domain.results import ActionResult
from fitness_tracker.domain.store import OrderBy
from fitness_tracker.errors import StoreUnavailableError
from fitness_tracker.services.identity import IdentityProvider, require_identity
from fitness_tracker.services.metrics import format_height, format_weight, to_number
from fitness_tracker.services.records import profile_from_document
from fitness_tracker.services.store import DocumentStore, user_path

_logger = logging.getLogger(__name__)

PROGRESS_COLLECTION = "progress"


async def latest_progress_weight(store: DocumentStore, user_id: str) -> float | None:
    """Return the weight of the most recent weigh-in, if any."""
    docs = await store.query(
        user_path(user_id, PROGRESS_COLLECTION),
        order_by=OrderBy("timestamp", descending=True),
        limit=1,
    )
    if not docs:
        return None
    return to_number(docs[0].get("weightKg"))


def pick_weight(profile: UserProfile, latest_logged: float | None) -> float | None:
    """Apply the fallback chain: cache, latest weigh-in, legacy profile field."""
    if profile.current_weight_kg is not None:
        return profile.current_weight_kg
    if latest_logged is not None:
        return latest_logged
    return profile.legacy_weight_kg


async def resolve_current_weight(store: DocumentStore, user_id: str) -> float | None:
    """Return the best known weight for a user, or None."""
    profile = profile_from_document(await store.get(user_path(user_id), user_id))
    if profile.current_weight_kg is not None:
        return profile.current_weight_kg
    return pick_weight(profile, await latest_progress_weight(store, user_id))


@dataclass
class ProfileService:
    """Service for the profile document and account screen."""

    store: DocumentStore
    identity: IdentityProvider

    async def get_profile(self) -> UserProfile:
        identity = require_identity(self.identity)
        doc = await self.store.get(user_path(identity.user_id), identity.user_id)
        return profile_from_document(doc)

    async def save_profile(
        self, age: int, height_cm: int, weight_kg: float, goal: str
    ) -> ActionResult:
        """Store onboarding answers, keeping the cached snapshot fields."""
        identity = require_identity(self.identity)
        try:
            resolved_goal = Goal(goal)
        except ValueError:
            return ActionResult.failure(f"Unknown goal: {goal}")
        if age <= 0 or height_cm <= 0 or weight_kg <= 0:
            return ActionResult.failure("Age, height and weight must be positive")
        try:
            await self.store.set(
                user_path(identity.user_id),
                identity.user_id,
                {
                    "age": age,
                    "heightCm": height_cm,
                    "weightKg": weight_kg,
                    "goal": resolved_goal.value,
                },
                merge=True,
            )
        except StoreUnavailableError as exc:
            _logger.warning("Profile save failed: %s", exc)
            return ActionResult.unavailable(exc)
        return ActionResult.success("Profile saved")

    async def account(self) -> AccountSummary:
        """Return the account read model with display strings."""
        identity = require_identity(self.identity)
        profile = profile_from_document(
            await self.store.get(user_path(identity.user_id), identity.user_id)
        )
        latest = None
        if profile.current_weight_kg is None:
            latest = await latest_progress_weight(self.store, identity.user_id)
        weight = pick_weight(profile, latest)
        return AccountSummary(
            age=profile.age,
            height_cm=profile.height_cm,
            weight_kg=weight,
            bmi=profile.last_bmi,
            calorie_target=profile.calorie_target,
            notifications_enabled=profile.notifications_enabled,
            units=profile.units,
            height_display=(
                format_height(profile.height_cm, profile.units)
                if profile.height_cm is not None
                else "--"
            ),
            weight_display=(
                format_weight(weight, profile.units) if weight is not None else "--"
            ),
        )

    async def set_notifications(self, enabled: bool) -> ActionResult:
        return await self._merge({"notificationsEnabled": enabled}, "Settings saved")

    async def set_units(self, units: str) -> ActionResult:
        try:
            resolved = Units(units)
        except ValueError:
            return ActionResult.failure(f"Unknown units: {units}")
        return await self._merge({"units": resolved.value}, "Settings saved")

    async def _merge(self, fields: dict[str, object], message: str) -> ActionResult:
        identity = require_identity(self.identity)
        try:
            await self.store.set(
                user_path(identity.user_id), identity.user_id, fields, merge=True
            )
        except StoreUnavailableError as exc:
            _logger.warning("Settings update failed: %s", exc)
            return ActionResult.unavailable(exc)
        return ActionResult.success(message)
