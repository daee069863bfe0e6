"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from supabase import create_client

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.adapters.supabase_document_store import SupabaseDocumentStore
from fitness_tracker.config import Settings
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.services.community import CommunityService
from fitness_tracker.services.days import Clock, utc_now
from fitness_tracker.services.identity import IdentityProvider
from fitness_tracker.services.ledger import LedgerService
from fitness_tracker.services.live import CommunityFeedView, LiveLedgerView
from fitness_tracker.services.profile import ProfileService
from fitness_tracker.services.progress import ProgressService
from fitness_tracker.services.store import DocumentStore


@dataclass
class UserScope:
    """Services bound to the identity of one request."""

    identity: IdentityProvider
    workouts: LedgerService
    meals: LedgerService
    progress: ProgressService
    profile: ProfileService
    community: CommunityService

    def ledger(self, kind: LedgerKind) -> LedgerService:
        return self.workouts if kind is LedgerKind.WORKOUTS else self.meals


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: DocumentStore
    close_resources: Callable[[], Awaitable[None]]
    clock: Clock = field(default=utc_now)

    def scope(self, identity: IdentityProvider) -> UserScope:
        """Build the per-user services for one identity."""
        return UserScope(
            identity=identity,
            workouts=LedgerService(
                LedgerKind.WORKOUTS, self.store, identity, self.clock
            ),
            meals=LedgerService(LedgerKind.MEALS, self.store, identity, self.clock),
            progress=ProgressService(self.store, identity, self.clock),
            profile=ProfileService(self.store, identity),
            community=CommunityService(self.store, identity, self.clock),
        )

    def live_ledger(
        self, kind: LedgerKind, identity: IdentityProvider
    ) -> LiveLedgerView:
        return LiveLedgerView(kind, self.store, identity, self.clock)

    def live_feed(self) -> CommunityFeedView:
        return CommunityFeedView(self.store)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if resolved_settings.store_backend == "memory":
        memory_store = InMemoryDocumentStore(
            transaction_attempts=resolved_settings.transaction_attempts
        )

        async def close_memory() -> None:
            return None

        return AppContainer(
            settings=resolved_settings,
            store=memory_store,
            close_resources=close_memory,
        )

    url, key = resolved_settings.supabase_credentials()
    supabase_client = create_client(url, key)
    supabase_store = SupabaseDocumentStore(
        client=supabase_client,
        table=resolved_settings.documents_table,
        poll_interval_seconds=resolved_settings.poll_interval_seconds,
        transaction_attempts=resolved_settings.transaction_attempts,
    )

    async def close_resources() -> None:
        supabase_store.close()

    return AppContainer(
        settings=resolved_settings,
        store=supabase_store,
        close_resources=close_resources,
    )
