"""In-memory document store for local runs and tests."""

import copy
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import uuid4

from fitness_tracker.domain.store import Document, Filter, OrderBy
from fitness_tracker.errors import (
    DocumentNotFoundError,
    TransactionConflictError,
    TransactionUsageError,
)
from fitness_tracker.services.days import Clock, epoch_millis, utc_now
from fitness_tracker.services.store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    ErrorListener,
    SnapshotListener,
    Transaction,
    matches,
)

T = TypeVar("T")

_logger = logging.getLogger(__name__)

DocKey = tuple[str, str]


@dataclass
class _MemorySubscription:
    store: "InMemoryDocumentStore"
    path: str
    listener: SnapshotListener
    filters: Sequence[Filter]
    order_by: OrderBy | None
    limit: int | None
    on_error: ErrorListener | None
    _active: bool = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self.store._subscriptions.remove(self)

    def deliver(self) -> None:
        if not self._active:
            return
        docs = self.store._select(self.path, self.filters, self.order_by, self.limit)
        try:
            self.listener(docs)
        except Exception:
            _logger.exception("Snapshot listener failed for %s", self.path)


@dataclass
class _Write:
    kind: str
    path: str
    doc_id: str
    fields: dict[str, object] = field(default_factory=dict)


class _MemoryTransaction(Transaction):
    def __init__(self, store: "InMemoryDocumentStore") -> None:
        self._store = store
        self.read_versions: dict[DocKey, int] = {}
        self.writes: list[_Write] = []

    async def get(self, path: str, doc_id: str) -> Document | None:
        if self.writes:
            raise TransactionUsageError("Transaction reads must come before writes")
        key = (path, doc_id)
        self.read_versions[key] = self._store._versions.get(key, 0)
        return self._store._read(path, doc_id)

    def new_id(self) -> str:
        return uuid4().hex

    def set(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self.writes.append(_Write("set", path, doc_id, dict(fields)))

    def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self.writes.append(_Write("update", path, doc_id, dict(fields)))

    def delete(self, path: str, doc_id: str) -> None:
        self.writes.append(_Write("delete", path, doc_id))


class InMemoryDocumentStore(DocumentStore):
    """Dictionary-backed store with live queries and optimistic transactions.

    Listeners are called synchronously: once on subscribe and again after
    every write to the subscribed collection.
    """

    def __init__(self, clock: Clock = utc_now, transaction_attempts: int = 5) -> None:
        self._clock = clock
        self._transaction_attempts = transaction_attempts
        self._collections: dict[str, dict[str, dict[str, object]]] = {}
        self._versions: dict[DocKey, int] = {}
        self._subscriptions: list[_MemorySubscription] = []
        self._last_timestamp = 0

    async def get(self, path: str, doc_id: str) -> Document | None:
        return self._read(path, doc_id)

    async def query(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        return self._select(path, filters, order_by, limit)

    def subscribe(  # noqa: PLR0913
        self,
        path: str,
        listener: SnapshotListener,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        on_error: ErrorListener | None = None,
    ) -> _MemorySubscription:
        subscription = _MemorySubscription(
            store=self,
            path=path,
            listener=listener,
            filters=tuple(filters),
            order_by=order_by,
            limit=limit,
            on_error=on_error,
        )
        self._subscriptions.append(subscription)
        subscription.deliver()
        return subscription

    async def add(self, path: str, fields: dict[str, object]) -> str:
        doc_id = uuid4().hex
        self._apply([_Write("set", path, doc_id, dict(fields))])
        return doc_id

    async def set(
        self, path: str, doc_id: str, fields: dict[str, object], merge: bool = False
    ) -> None:
        self._apply([_Write("merge" if merge else "set", path, doc_id, dict(fields))])

    async def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self._apply([_Write("update", path, doc_id, dict(fields))])

    async def delete(self, path: str, doc_id: str) -> None:
        self._apply([_Write("delete", path, doc_id)])

    async def run_transaction(
        self, body: Callable[[Transaction], Awaitable[T]]
    ) -> T:
        for attempt in range(1, self._transaction_attempts + 1):
            tx = _MemoryTransaction(self)
            result = await body(tx)
            stale = [
                key
                for key, version in tx.read_versions.items()
                if self._versions.get(key, 0) != version
            ]
            if not stale:
                self._apply(tx.writes)
                return result
            _logger.info("Transaction conflict on %s (attempt %s)", stale, attempt)
        raise TransactionConflictError("Transaction kept conflicting; try again")

    def documents(self, path: str) -> list[Document]:
        """Return every document in a collection, unordered."""
        return self._select(path, (), None, None)

    def _read(self, path: str, doc_id: str) -> Document | None:
        fields = self._collections.get(path, {}).get(doc_id)
        if fields is None:
            return None
        return Document(id=doc_id, path=path, fields=copy.deepcopy(fields))

    def _select(
        self,
        path: str,
        filters: Sequence[Filter],
        order_by: OrderBy | None,
        limit: int | None,
    ) -> list[Document]:
        docs = [
            Document(id=doc_id, path=path, fields=copy.deepcopy(fields))
            for doc_id, fields in self._collections.get(path, {}).items()
        ]
        docs = [doc for doc in docs if matches(doc, filters)]
        if order_by is not None:
            docs = [doc for doc in docs if order_by.field in doc.fields]
            docs.sort(
                key=lambda doc: _sort_key(doc.fields[order_by.field]),
                reverse=order_by.descending,
            )
        if limit is not None:
            docs = docs[:limit]
        return docs

    def _apply(self, writes: Sequence[_Write]) -> None:
        for write in writes:
            if write.kind == "update" and self._read(write.path, write.doc_id) is None:
                raise DocumentNotFoundError(f"{write.path}/{write.doc_id}")
        touched: set[str] = set()
        for write in writes:
            collection = self._collections.setdefault(write.path, {})
            if write.kind == "delete":
                collection.pop(write.doc_id, None)
            elif write.kind == "set":
                collection[write.doc_id] = self._resolve(write.fields)
            else:
                merged = dict(collection.get(write.doc_id, {}))
                merged.update(self._resolve(write.fields))
                collection[write.doc_id] = merged
            key = (write.path, write.doc_id)
            self._versions[key] = self._versions.get(key, 0) + 1
            touched.add(write.path)
        for subscription in list(self._subscriptions):
            if subscription.path in touched:
                subscription.deliver()

    def _resolve(self, fields: dict[str, object]) -> dict[str, object]:
        resolved: dict[str, object] = {}
        for key, value in fields.items():
            if value is SERVER_TIMESTAMP:
                resolved[key] = self._server_timestamp()
            else:
                resolved[key] = copy.deepcopy(value)
        return resolved

    def _server_timestamp(self) -> int:
        now_ms = epoch_millis(self._clock())
        self._last_timestamp = max(now_ms, self._last_timestamp + 1)
        return self._last_timestamp


def _sort_key(value: object) -> tuple[int, object]:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))
