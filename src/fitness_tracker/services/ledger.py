"""Daily ledger: plan entries for today and their completion into logs."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from fitness_tracker.domain.entries import (
    Entry,
    LedgerKind,
    MacroTotals,
    MealEntry,
    WorkoutEntry,
)
from fitness_tracker.domain.ledger import LedgerSnapshot
from fitness_tracker.domain.models import UserProfile
from fitness_tracker.domain.results import ActionResult
from fitness_tracker.domain.store import Document, Filter, OrderBy
from fitness_tracker.errors import PartialReconciliationError, StoreUnavailableError
from fitness_tracker.services.aggregation import (
    sum_macros,
    sum_workout_kcal,
    target_verdict,
)
from fitness_tracker.services.catalog import find_catalog_item
from fitness_tracker.services.days import Clock, epoch_day, utc_now, week_start
from fitness_tracker.services.identity import IdentityProvider, require_identity
from fitness_tracker.services.metrics import exercise_kcal
from fitness_tracker.services.profile import resolve_current_weight
from fitness_tracker.services.records import (
    meal_fields,
    meal_from_document,
    profile_from_document,
    workout_fields,
    workout_from_document,
)
from fitness_tracker.services.store import SERVER_TIMESTAMP, DocumentStore, user_path

_logger = logging.getLogger(__name__)

DEFAULT_PLAN_MET = 6.0
DEFAULT_PLAN_DURATION_MIN = 30


def entry_from_document(kind: LedgerKind, doc: Document) -> Entry:
    if kind is LedgerKind.WORKOUTS:
        return workout_from_document(doc)
    return meal_from_document(doc)


def plan_filters(today: int, name: str | None = None) -> list[Filter]:
    filters = [Filter("dateEpochDay", "==", today)]
    if name is not None:
        filters.append(Filter("name", "==", name))
    return filters


def week_filters(today: int) -> list[Filter]:
    return [Filter("dateEpochDay", ">=", week_start(today))]


def build_snapshot(  # noqa: PLR0913
    kind: LedgerKind,
    today: int,
    profile: UserProfile,
    planned_docs: Sequence[Document],
    week_docs: Sequence[Document],
    loading: bool = False,
    error: str | None = None,
) -> LedgerSnapshot:
    """Recompute every derived total from the latest value of each feed."""
    weight_kg = profile.current_weight_kg or profile.legacy_weight_kg
    if kind is LedgerKind.WORKOUTS:
        workouts = [workout_from_document(doc) for doc in planned_docs]
        workout_logs = [workout_from_document(doc) for doc in week_docs]
        today_workouts = [e for e in workout_logs if e.date_epoch_day == today]
        planned_kcal = sum_workout_kcal(
            [_with_plan_defaults(entry) for entry in workouts], weight_kg
        )
        return LedgerSnapshot(
            kind=kind.value,
            today=today,
            loading=loading,
            weight_kg=weight_kg,
            planned=list(workouts),
            today_logs=list(today_workouts),
            week_logs=list(workout_logs),
            planned_totals=MacroTotals(kcal=planned_kcal),
            today_totals=MacroTotals(kcal=sum_workout_kcal(today_workouts, weight_kg)),
            week_totals=MacroTotals(kcal=sum_workout_kcal(workout_logs, weight_kg)),
            error=error,
        )
    meals = [meal_from_document(doc) for doc in planned_docs]
    meal_logs = [meal_from_document(doc) for doc in week_docs]
    today_meals = [e for e in meal_logs if e.date_epoch_day == today]
    today_totals = sum_macros(today_meals)
    return LedgerSnapshot(
        kind=kind.value,
        today=today,
        loading=loading,
        weight_kg=weight_kg,
        planned=list(meals),
        today_logs=list(today_meals),
        week_logs=list(meal_logs),
        planned_totals=sum_macros(meals),
        today_totals=today_totals,
        week_totals=sum_macros(meal_logs),
        calorie_target=profile.calorie_target,
        target_verdict=target_verdict(profile.calorie_target, today_totals.kcal),
        error=error,
    )


@dataclass
class LedgerService:
    """Plan set and log operations for one entry domain."""

    kind: LedgerKind
    store: DocumentStore
    identity: IdentityProvider
    clock: Clock = field(default=utc_now)

    @property
    def label(self) -> str:
        return "workout" if self.kind is LedgerKind.WORKOUTS else "meal"

    def today(self) -> int:
        return epoch_day(self.clock())

    async def add_to_today(self, name: str) -> ActionResult:
        """Plan a catalog item for today."""
        require_identity(self.identity)
        item = find_catalog_item(self.kind, name)
        if item is None:
            return ActionResult.failure(f"Unknown {self.label}: {name}")
        return await self.add_entry(item)

    async def add_entry(self, entry: Entry) -> ActionResult:
        """Plan an entry for today unless one with the same name exists."""
        identity = require_identity(self.identity)
        today = self.today()
        path = user_path(identity.user_id, self.kind.plan_collection)
        try:
            existing = await self.store.query(
                path, filters=plan_filters(today, entry.name), limit=1
            )
            if existing:
                return ActionResult.success(
                    "Already added for today", data={"added": False}
                )
            fields = self._entry_fields(entry)
            fields["dateEpochDay"] = today
            fields["createdAt"] = SERVER_TIMESTAMP
            doc_id = await self.store.add(path, fields)
        except StoreUnavailableError as exc:
            _logger.warning("Add to today failed: kind=%s error=%s", self.kind, exc)
            return ActionResult.unavailable(exc)
        _logger.info("Planned %s for day %s: %s", self.label, today, entry.name)
        return ActionResult.success(
            "Added to today", data={"added": True, "id": doc_id}
        )

    async def planned(self) -> list[Entry]:
        """Return today's plan set ordered by creation."""
        identity = require_identity(self.identity)
        docs = await self.store.query(
            user_path(identity.user_id, self.kind.plan_collection),
            filters=plan_filters(self.today()),
            order_by=OrderBy("createdAt"),
        )
        return [entry_from_document(self.kind, doc) for doc in docs]

    async def snapshot(self) -> LedgerSnapshot:
        """Return a one-shot ledger snapshot built from single reads."""
        identity = require_identity(self.identity)
        today = self.today()
        profile_doc = await self.store.get(
            user_path(identity.user_id), identity.user_id
        )
        planned_docs = await self.store.query(
            user_path(identity.user_id, self.kind.plan_collection),
            filters=plan_filters(today),
            order_by=OrderBy("createdAt"),
        )
        week_docs = await self.store.query(
            user_path(identity.user_id, self.kind.log_collection),
            filters=week_filters(today),
            order_by=OrderBy("dateEpochDay", descending=True),
        )
        return build_snapshot(
            self.kind,
            today,
            profile_from_document(profile_doc),
            planned_docs,
            week_docs,
        )

    async def complete(
        self, entry: Entry, weight_kg: float | None = None
    ) -> ActionResult:
        """Move one planned entry into today's log.

        The removal and the append are separate writes. When the append fails
        after the removal succeeded the plan entry is lost and the result is
        marked partial.
        """
        identity = require_identity(self.identity)
        try:
            log_id, fields, removed = await self._reconcile(
                identity.user_id, entry, weight_kg
            )
        except PartialReconciliationError as exc:
            _logger.error("Partial completion: kind=%s name=%s", self.kind, entry.name)
            return ActionResult.failure(str(exc), partial=True)
        except StoreUnavailableError as exc:
            _logger.warning("Completion failed: kind=%s error=%s", self.kind, exc)
            return ActionResult.unavailable(exc)
        data = {"id": log_id, "removedPlan": removed, **_public(fields)}
        if self.kind is LedgerKind.WORKOUTS:
            return ActionResult.success(f"Logged {fields['kcal']} kcal", data=data)
        return ActionResult.success("Marked eaten", data=data)

    async def complete_by_name(
        self, name: str, weight_kg: float | None = None
    ) -> ActionResult:
        """Complete the first planned entry named ``name``; none is a no-op."""
        identity = require_identity(self.identity)
        try:
            docs = await self.store.query(
                user_path(identity.user_id, self.kind.plan_collection),
                filters=plan_filters(self.today(), name),
                limit=1,
            )
        except StoreUnavailableError as exc:
            return ActionResult.unavailable(exc)
        if not docs:
            return ActionResult.success(f"Nothing planned named {name} for today")
        return await self.complete(entry_from_document(self.kind, docs[0]), weight_kg)

    async def remove(self, name: str) -> ActionResult:
        """Remove one planned entry with this name from today."""
        identity = require_identity(self.identity)
        path = user_path(identity.user_id, self.kind.plan_collection)
        try:
            docs = await self.store.query(
                path, filters=plan_filters(self.today(), name), limit=1
            )
            if docs:
                await self.store.delete(path, docs[0].id)
        except StoreUnavailableError as exc:
            _logger.warning("Remove failed: kind=%s error=%s", self.kind, exc)
            return ActionResult.unavailable(exc)
        return ActionResult.success("Removed from today", data={"removed": bool(docs)})

    async def _reconcile(
        self, user_id: str, entry: Entry, weight_kg: float | None
    ) -> tuple[str, dict[str, object], bool]:
        today = self.today()
        if self.kind is LedgerKind.WORKOUTS and weight_kg is None:
            weight_kg = await resolve_current_weight(self.store, user_id)
        fields = self._log_fields(entry, weight_kg)
        fields["dateEpochDay"] = today
        fields["createdAt"] = SERVER_TIMESTAMP

        plans_path = user_path(user_id, self.kind.plan_collection)
        matches = await self.store.query(
            plans_path, filters=plan_filters(today, entry.name), limit=1
        )
        if matches:
            await self.store.delete(plans_path, matches[0].id)
        try:
            log_id = await self.store.add(
                user_path(user_id, self.kind.log_collection), fields
            )
        except StoreUnavailableError as exc:
            if not matches:
                raise
            raise PartialReconciliationError(
                f"Removed {entry.name} from today but could not log it: {exc}"
            ) from exc
        _logger.info(
            "Completed %s for day %s: %s removed_plan=%s",
            self.label,
            today,
            entry.name,
            bool(matches),
        )
        return log_id, fields, bool(matches)

    def _log_fields(self, entry: Entry, weight_kg: float | None) -> dict[str, object]:
        if isinstance(entry, WorkoutEntry):
            planned = _with_plan_defaults(entry)
            kcal = exercise_kcal(
                planned.met or 0.0, planned.duration_min or 0, weight_kg
            )
            return workout_fields(replace(planned, kcal=kcal))
        return meal_fields(entry)

    def _entry_fields(self, entry: Entry) -> dict[str, object]:
        if isinstance(entry, WorkoutEntry):
            return workout_fields(entry)
        if isinstance(entry, MealEntry):
            return meal_fields(entry)
        raise TypeError(f"Unsupported entry: {entry!r}")


def _with_plan_defaults(entry: WorkoutEntry) -> WorkoutEntry:
    return replace(
        entry,
        met=entry.met if entry.met is not None else DEFAULT_PLAN_MET,
        duration_min=(
            entry.duration_min
            if entry.duration_min is not None
            else DEFAULT_PLAN_DURATION_MIN
        ),
    )


def _public(fields: dict[str, object]) -> dict[str, object]:
    return {
        key: value for key, value in fields.items() if value is not SERVER_TIMESTAMP
    }
