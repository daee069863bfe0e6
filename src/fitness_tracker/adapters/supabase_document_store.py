"""Supabase implementation of the document store.

Every document lives in one ``documents`` table keyed by ``(collection, id)``
with its fields in a ``jsonb`` column. Writes go through the
``commit_documents`` function so that transactional writes are checked
against the versions read and applied atomically.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar
from uuid import uuid4

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from fitness_tracker.domain.store import DOCUMENT_ID, Document, Filter, OrderBy
from fitness_tracker.errors import (
    DocumentNotFoundError,
    StoreUnavailableError,
    TransactionConflictError,
    TransactionUsageError,
)
from fitness_tracker.services.store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    ErrorListener,
    SnapshotListener,
    Transaction,
)

T = TypeVar("T")

_logger = logging.getLogger(__name__)

_OPERATORS = {"==": "eq", "<": "lt", "<=": "lte", ">": "gt", ">=": "gte"}

COMMIT_OK = "ok"
COMMIT_CONFLICT = "conflict"
COMMIT_MISSING = "missing"


def field_column(name: str, value: object = None) -> str:
    """Return the PostgREST column expression for a document field."""
    if name == DOCUMENT_ID:
        return "id"
    if isinstance(value, str):
        return f"fields->>{name}"
    return f"fields->{name}"


def filter_criteria(value: object) -> str:
    """Render a filter value the way PostgREST expects it in a query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def write_payload(
    op: str, path: str, doc_id: str, fields: dict[str, object] | None = None
) -> dict[str, object]:
    """Build one write for ``commit_documents``; timestamps are set server side."""
    values = fields or {}
    return {
        "collection": path,
        "id": doc_id,
        "op": op,
        "fields": {
            key: value for key, value in values.items() if value is not SERVER_TIMESTAMP
        },
        "timestamps": [
            key for key, value in values.items() if value is SERVER_TIMESTAMP
        ],
    }


@dataclass
class _PollingSubscription:
    """Live query emulated by polling; delivers only when the result changes."""

    store: "SupabaseDocumentStore"
    path: str
    listener: SnapshotListener
    filters: Sequence[Filter]
    order_by: OrderBy | None
    limit: int | None
    on_error: ErrorListener | None
    _task: asyncio.Task[None] | None = None
    _last: list[tuple[str, dict[str, object]]] | None = None
    _active: bool = True

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._task is not None:
            self._task.cancel()

    async def _run(self) -> None:
        while self._active:
            try:
                docs = await self.store.query(
                    self.path, self.filters, self.order_by, self.limit
                )
            except StoreUnavailableError as exc:
                _logger.warning("Live query on %s failed: %s", self.path, exc)
                if self.on_error is not None and self._active:
                    self.on_error(exc)
            except Exception:
                _logger.exception("Live query on %s failed", self.path)
            else:
                current = [(doc.id, doc.fields) for doc in docs]
                if self._active and current != self._last:
                    self._last = current
                    try:
                        self.listener(docs)
                    except Exception:
                        _logger.exception("Snapshot listener failed for %s", self.path)
            await asyncio.sleep(self.store.poll_interval_seconds)


class _SupabaseTransaction(Transaction):
    def __init__(self, store: "SupabaseDocumentStore") -> None:
        self._store = store
        self.expected: list[dict[str, object]] = []
        self.writes: list[dict[str, object]] = []

    async def get(self, path: str, doc_id: str) -> Document | None:
        if self.writes:
            raise TransactionUsageError("Transaction reads must come before writes")
        row = await self._store._fetch_row(path, doc_id)
        version = int(row["version"]) if row else 0
        self.expected.append({"collection": path, "id": doc_id, "version": version})
        return _document(path, row) if row else None

    def new_id(self) -> str:
        return uuid4().hex

    def set(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self.writes.append(write_payload("set", path, doc_id, fields))

    def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        self.writes.append(write_payload("update", path, doc_id, fields))

    def delete(self, path: str, doc_id: str) -> None:
        self.writes.append(write_payload("delete", path, doc_id))


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Document store backed by a Supabase ``documents`` table."""

    client: Client
    table: str = "documents"
    poll_interval_seconds: float = 2.0
    transaction_attempts: int = 5
    _subscriptions: list[_PollingSubscription] = field(default_factory=list)

    async def get(self, path: str, doc_id: str) -> Document | None:
        row = await self._fetch_row(path, doc_id)
        return _document(path, row) if row else None

    async def query(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        def run() -> Any:
            builder = (
                self.client.table(self.table)
                .select("id, fields, version")
                .eq("collection", path)
            )
            for item in filters:
                builder = builder.filter(
                    field_column(item.field, item.value),
                    _OPERATORS[item.op],
                    filter_criteria(item.value),
                )
            if order_by is not None:
                column = field_column(order_by.field)
                builder = builder.not_.is_(column, "null").order(
                    column, desc=order_by.descending
                )
            if limit is not None:
                builder = builder.limit(limit)
            return builder.execute()

        response = await self._call(run)
        return [_document(path, row) for row in response.data or []]

    def subscribe(  # noqa: PLR0913
        self,
        path: str,
        listener: SnapshotListener,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        on_error: ErrorListener | None = None,
    ) -> _PollingSubscription:
        subscription = _PollingSubscription(
            store=self,
            path=path,
            listener=listener,
            filters=tuple(filters),
            order_by=order_by,
            limit=limit,
            on_error=on_error,
        )
        subscription.start()
        self._subscriptions = [sub for sub in self._subscriptions if sub.active]
        self._subscriptions.append(subscription)
        return subscription

    async def add(self, path: str, fields: dict[str, object]) -> str:
        doc_id = uuid4().hex
        await self._commit([], [write_payload("set", path, doc_id, fields)])
        return doc_id

    async def set(
        self, path: str, doc_id: str, fields: dict[str, object], merge: bool = False
    ) -> None:
        op = "merge" if merge else "set"
        await self._commit([], [write_payload(op, path, doc_id, fields)])

    async def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        status = await self._commit([], [write_payload("update", path, doc_id, fields)])
        if status == COMMIT_MISSING:
            raise DocumentNotFoundError(f"{path}/{doc_id}")

    async def delete(self, path: str, doc_id: str) -> None:
        await self._commit([], [write_payload("delete", path, doc_id)])

    async def run_transaction(
        self, body: Callable[[Transaction], Awaitable[T]]
    ) -> T:
        for attempt in range(1, self.transaction_attempts + 1):
            tx = _SupabaseTransaction(self)
            result = await body(tx)
            if not tx.writes:
                return result
            status = await self._commit(tx.expected, tx.writes)
            if status == COMMIT_OK:
                return result
            if status == COMMIT_MISSING:
                raise DocumentNotFoundError("Transaction updated a missing document")
            _logger.info("Transaction conflict (attempt %s)", attempt)
        raise TransactionConflictError("Transaction kept conflicting; try again")

    def close(self) -> None:
        """Cancel every live subscription."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()

    async def _fetch_row(self, path: str, doc_id: str) -> dict[str, Any] | None:
        response = await self._call(
            lambda: self.client.table(self.table)
            .select("id, fields, version")
            .eq("collection", path)
            .eq("id", doc_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    async def _commit(
        self, expected: list[dict[str, object]], writes: list[dict[str, object]]
    ) -> str:
        response = await self._call(
            lambda: self.client.rpc(
                "commit_documents", {"expected": expected, "writes": writes}
            ).execute()
        )
        status = response.data
        if isinstance(status, list):
            status = status[0] if status else None
        if status not in {COMMIT_OK, COMMIT_CONFLICT, COMMIT_MISSING}:
            raise StoreUnavailableError(f"Unexpected commit response: {status!r}")
        return str(status)

    async def _call(self, run: Callable[[], Any]) -> Any:
        try:
            return await asyncio.to_thread(run)
        except (APIError, httpx.HTTPError) as exc:
            _logger.warning("Supabase request failed: %s", exc)
            raise StoreUnavailableError(str(exc)) from exc


def _document(path: str, row: dict[str, Any]) -> Document:
    return Document(id=str(row["id"]), path=path, fields=dict(row.get("fields") or {}))
