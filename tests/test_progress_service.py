"""Tests for weigh-ins, history and the dashboard."""

import asyncio

import pytest

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.services.identity import StaticIdentityProvider
from fitness_tracker.services.progress import ProgressService
from tests.conftest import USER_ID, FailingDocumentStore, FixedClock

PROGRESS = f"users/{USER_ID}/progress"


def test_log_weight_appends_point_and_refreshes_cache(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    asyncio.run(store.set("users", USER_ID, {"heightCm": 175, "goal": "Lose"}))
    service = ProgressService(store, identity, clock)

    result = asyncio.run(service.log_weight(70))

    assert result.ok
    assert result.message == "Saved"
    point = store.documents(PROGRESS)[0]
    assert point.get("weightKg") == 70.0
    assert point.get("bmi") == 22.9
    assert point.get("calorieTarget") == 1756.0
    assert point.get("dateEpochDay") == clock.today
    profile = asyncio.run(store.get("users", USER_ID))
    assert profile is not None
    assert profile.get("currentWeightKg") == 70.0
    assert profile.get("lastBmi") == 22.9
    assert profile.get("calorieTarget") == 1756.0
    assert profile.get("heightCm") == 175


def test_log_weight_without_height_skips_bmi(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = ProgressService(store, identity, clock)

    result = asyncio.run(service.log_weight("72.5"))

    assert result.ok
    point = store.documents(PROGRESS)[0]
    assert point.get("weightKg") == 72.5
    assert "bmi" not in point.fields


@pytest.mark.parametrize("raw", ["abc", 0, -3, None, True])
def test_log_weight_rejects_invalid_input(
    raw: object,
    store: InMemoryDocumentStore,
    identity: StaticIdentityProvider,
    clock: FixedClock,
) -> None:
    result = asyncio.run(ProgressService(store, identity, clock).log_weight(raw))

    assert not result.ok
    assert result.message == "Enter a valid weight"
    assert store.documents(PROGRESS) == []


def test_cache_failure_still_saves_weigh_in(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    failing = FailingDocumentStore(store, fail_on={"set": None})

    result = asyncio.run(ProgressService(failing, identity, clock).log_weight(70))

    assert result.ok
    assert len(store.documents(PROGRESS)) == 1
    assert asyncio.run(store.get("users", USER_ID)) is None


def test_history_is_sorted_and_skips_points_without_timestamp(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    for timestamp, weight in ((3000, 71.0), (1000, 73.0), (2000, 72.0)):
        asyncio.run(store.add(PROGRESS, {"timestamp": timestamp, "weightKg": weight}))
    asyncio.run(store.add(PROGRESS, {"weightKg": 99.0}))

    points = asyncio.run(ProgressService(store, identity, clock).history())

    assert [point.weight_kg for point in points] == [73.0, 72.0, 71.0]


def test_history_keeps_latest_points(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    for timestamp in range(1, 6):
        asyncio.run(store.add(PROGRESS, {"timestamp": timestamp, "weightKg": 70.0}))

    points = asyncio.run(ProgressService(store, identity, clock).history(limit=2))

    assert [point.timestamp for point in points] == [4, 5]


def test_dashboard_streak(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = ProgressService(store, identity, clock)
    clock.advance(days=-1)
    asyncio.run(service.log_weight(71))
    clock.advance(days=1)
    asyncio.run(service.log_weight(70.5))

    summary = asyncio.run(service.dashboard())

    assert summary.today_done
    assert summary.streak == 2


def test_dashboard_without_todays_weigh_in(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = ProgressService(store, identity, clock)
    clock.advance(days=-1)
    asyncio.run(service.log_weight(71))
    clock.advance(days=1)

    summary = asyncio.run(service.dashboard())

    assert not summary.today_done
    assert summary.streak == 0


def test_preview_does_not_write(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    asyncio.run(store.set("users", USER_ID, {"heightCm": 175, "goal": "Lose"}))
    service = ProgressService(store, identity, clock)

    preview = asyncio.run(service.preview("70"))
    invalid = asyncio.run(service.preview("heavy"))

    assert preview is not None
    assert preview.bmi == 22.9
    assert preview.calorie_target == 1756.0
    assert invalid is None
    assert store.documents(PROGRESS) == []
