"""Shared test fixtures."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TypeVar

import pytest

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.config import Settings
from fitness_tracker.containers import AppContainer
from fitness_tracker.domain.models import Identity
from fitness_tracker.domain.store import Document, Filter, OrderBy
from fitness_tracker.errors import StoreUnavailableError
from fitness_tracker.services.days import epoch_day
from fitness_tracker.services.identity import StaticIdentityProvider
from fitness_tracker.services.store import (
    ErrorListener,
    SnapshotListener,
    Subscription,
    Transaction,
)

T = TypeVar("T")

USER_ID = "user-1"
USER_EMAIL = "alex@example.com"


@dataclass
class FixedClock:
    """Clock that stays put until a test moves it."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 3, 10, 9, 30, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)

    @property
    def today(self) -> int:
        return epoch_day(self.now)


@dataclass
class FailingDocumentStore:
    """Wraps a store and fails the operations named in ``fail_on``.

    ``fail_on`` maps an operation to a path fragment; a ``None``
    fragment fails every call of that operation.
    """

    inner: InMemoryDocumentStore
    fail_on: dict[str, str | None] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    def _check(self, op: str, path: str) -> None:
        self.calls.append((op, path))
        if op in self.fail_on:
            fragment = self.fail_on[op]
            if fragment is None or fragment in path:
                raise StoreUnavailableError(f"{op} unavailable")

    async def get(self, path: str, doc_id: str) -> Document | None:
        self._check("get", path)
        return await self.inner.get(path, doc_id)

    async def query(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        self._check("query", path)
        return await self.inner.query(path, filters, order_by, limit)

    def subscribe(  # noqa: PLR0913
        self,
        path: str,
        listener: SnapshotListener,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        return self.inner.subscribe(path, listener, filters, order_by, limit, on_error)

    async def add(self, path: str, fields: dict[str, object]) -> str:
        self._check("add", path)
        return await self.inner.add(path, fields)

    async def set(
        self, path: str, doc_id: str, fields: dict[str, object], merge: bool = False
    ) -> None:
        self._check("set", path)
        await self.inner.set(path, doc_id, fields, merge=merge)

    async def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self._check("update", path)
        await self.inner.update(path, doc_id, fields)

    async def delete(self, path: str, doc_id: str) -> None:
        self._check("delete", path)
        await self.inner.delete(path, doc_id)

    async def run_transaction(
        self, body: Callable[[Transaction], Awaitable[T]]
    ) -> T:
        self._check("run_transaction", "")
        return await self.inner.run_transaction(body)


@pytest.fixture
def settings() -> Settings:
    return Settings(api_token="api-token", store_backend="memory")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store(clock: FixedClock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def identity() -> StaticIdentityProvider:
    return StaticIdentityProvider(Identity(user_id=USER_ID, email=USER_EMAIL))


@pytest.fixture
def anonymous() -> StaticIdentityProvider:
    return StaticIdentityProvider(None)


@pytest.fixture
def container(
    settings: Settings, store: InMemoryDocumentStore, clock: FixedClock
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        close_resources=close_resources,
        clock=clock,
    )
