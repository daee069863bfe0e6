"""Tests for profile onboarding and the account screen."""

import asyncio

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.services.identity import StaticIdentityProvider
from fitness_tracker.services.profile import ProfileService
from tests.conftest import USER_ID


def test_save_profile_keeps_cached_snapshot(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    asyncio.run(store.set("users", USER_ID, {"currentWeightKg": 68.0, "lastBmi": 22.2}))
    service = ProfileService(store, identity)

    result = asyncio.run(service.save_profile(30, 175, 70.0, "Lose"))
    profile = asyncio.run(service.get_profile())

    assert result.ok
    assert result.message == "Profile saved"
    assert profile.age == 30
    assert profile.height_cm == 175
    assert profile.legacy_weight_kg == 70.0
    assert profile.goal == "Lose"
    assert profile.current_weight_kg == 68.0


def test_save_profile_validates_input(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    service = ProfileService(store, identity)

    bad_goal = asyncio.run(service.save_profile(30, 175, 70.0, "Bulk"))
    bad_age = asyncio.run(service.save_profile(0, 175, 70.0, "Gain"))

    assert bad_goal.message == "Unknown goal: Bulk"
    assert not bad_age.ok
    assert store.documents("users") == []


def test_account_formats_imperial_units(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    service = ProfileService(store, identity)
    asyncio.run(service.save_profile(30, 175, 70.0, "Maintain"))
    asyncio.run(service.set_notifications(True))
    asyncio.run(service.set_units("Imperial"))

    account = asyncio.run(service.account())

    assert account.units == "Imperial"
    assert account.notifications_enabled
    assert account.height_display == "5′ 8″"
    assert account.weight_display == "154.3 lb"


def test_account_reads_legacy_calorie_target_and_latest_weigh_in(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    asyncio.run(
        store.set("users", USER_ID, {"heightCm": 180, "lastCalorieTarget": 2200.0})
    )
    progress = f"users/{USER_ID}/progress"
    asyncio.run(store.add(progress, {"timestamp": 1, "weightKg": 90.0}))
    asyncio.run(store.add(progress, {"timestamp": 2, "weightKg": 88.0}))

    account = asyncio.run(ProfileService(store, identity).account())

    assert account.weight_kg == 88.0
    assert account.weight_display == "88.0 kg"
    assert account.height_display == "180 cm"
    assert account.calorie_target == 2200.0


def test_account_without_profile(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    account = asyncio.run(ProfileService(store, identity).account())

    assert account.weight_display == "--"
    assert account.height_display == "--"
    assert account.units == "Metric"


def test_set_units_rejects_unknown_value(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider
) -> None:
    result = asyncio.run(ProfileService(store, identity).set_units("Stone"))

    assert not result.ok
    assert result.message == "Unknown units: Stone"
