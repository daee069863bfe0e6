"""Document store interface consumed by every service."""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, TypeVar

from fitness_tracker.domain.store import DOCUMENT_ID, Document, Filter, OrderBy

T = TypeVar("T")

SnapshotListener = Callable[[list[Document]], None]
ErrorListener = Callable[[Exception], None]


class _ServerTimestamp:
    """Sentinel replaced by the store with a monotonic server timestamp."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class Subscription(Protocol):
    """Handle for a live query."""

    @property
    def active(self) -> bool:
        """Return True until the subscription is cancelled."""

    def cancel(self) -> None:
        """Stop delivering snapshots; safe to call more than once."""


class Transaction(Protocol):
    """Reads and buffered writes committed atomically by the store."""

    async def get(self, path: str, doc_id: str) -> Document | None:
        """Read a document; all reads must happen before any write."""

    def new_id(self) -> str:
        """Return a fresh document id for a write in this transaction."""

    def set(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        """Create or replace a document."""

    def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        """Merge fields into an existing document."""

    def delete(self, path: str, doc_id: str) -> None:
        """Delete a document."""


class DocumentStore(Protocol):
    """Managed document database with live queries and transactions."""

    async def get(self, path: str, doc_id: str) -> Document | None:
        """Return a document by id, if present."""

    async def query(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        """Return documents in a collection matching all filters."""

    def subscribe(  # noqa: PLR0913
        self,
        path: str,
        listener: SnapshotListener,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        on_error: ErrorListener | None = None,
    ) -> Subscription:
        """Deliver the query result now and after every change."""

    async def add(self, path: str, fields: dict[str, object]) -> str:
        """Create a document with a generated id and return the id."""

    async def set(
        self, path: str, doc_id: str, fields: dict[str, object], merge: bool = False
    ) -> None:
        """Create or replace a document, or merge into it."""

    async def update(self, path: str, doc_id: str, fields: dict[str, object]) -> None:
        """Merge fields into an existing document."""

    async def delete(self, path: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is a no-op."""

    async def run_transaction(
        self, body: Callable[[Transaction], Awaitable[T]]
    ) -> T:
        """Run ``body`` and commit its writes atomically, retrying on conflict."""


def user_path(user_id: str, collection: str | None = None) -> str:
    """Return the users collection path, or a subcollection of one user."""
    if collection is None:
        return "users"
    return f"users/{user_id}/{collection}"


def matches(doc: Document, filters: Sequence[Filter]) -> bool:
    """Evaluate filters against a document; missing fields never match."""
    for item in filters:
        if item.field == DOCUMENT_ID:
            value: object = doc.id
        elif item.field in doc.fields:
            value = doc.fields[item.field]
        else:
            return False
        try:
            if item.op == "==":
                ok = value == item.value
            elif item.op == "<":
                ok = value < item.value  # type: ignore[operator]
            elif item.op == "<=":
                ok = value <= item.value  # type: ignore[operator]
            elif item.op == ">":
                ok = value > item.value  # type: ignore[operator]
            elif item.op == ">=":
                ok = value >= item.value  # type: ignore[operator]
            else:
                raise ValueError(f"Unsupported filter operator: {item.op}")
        except TypeError:
            ok = False
        if not ok:
            return False
    return True
