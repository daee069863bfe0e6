"""Tests for container wiring."""

import asyncio

import pytest

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.adapters.supabase_document_store import SupabaseDocumentStore
from fitness_tracker.config import Settings
from fitness_tracker.containers import build_container
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.domain.models import Identity
from fitness_tracker.services.identity import StaticIdentityProvider


def test_build_container_with_memory_store(settings: Settings) -> None:
    container = build_container(settings)
    scope = container.scope(StaticIdentityProvider(Identity(user_id="u1")))

    assert isinstance(container.store, InMemoryDocumentStore)
    assert scope.ledger(LedgerKind.WORKOUTS) is scope.workouts
    assert scope.ledger(LedgerKind.MEALS).kind is LedgerKind.MEALS
    asyncio.run(container.close_resources())


def test_build_container_with_supabase_store(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[tuple[str, str]] = []

    def fake_create_client(url: str, key: str) -> object:
        created.append((url, key))
        return object()

    monkeypatch.setattr("fitness_tracker.containers.create_client", fake_create_client)
    settings = Settings(
        api_token="api-token",
        store_backend="supabase",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        poll_interval_seconds=0.5,
    )

    container = build_container(settings)

    assert created == [("https://example.supabase.co", "service-key")]
    assert isinstance(container.store, SupabaseDocumentStore)
    assert container.store.poll_interval_seconds == 0.5
    asyncio.run(container.close_resources())


def test_supabase_backend_requires_credentials() -> None:
    settings = Settings(
        api_token="api-token",
        store_backend="supabase",
        supabase_url=None,
        supabase_service_key=None,
    )

    with pytest.raises(ValueError, match="SUPABASE_URL"):
        build_container(settings)
