"""Live read models built from store subscriptions."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, time, timedelta
from types import TracebackType
from typing import Self

from fitness_tracker.domain.community import FeedSnapshot
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.domain.ledger import LedgerSnapshot
from fitness_tracker.domain.store import DOCUMENT_ID, Document, Filter, OrderBy
from fitness_tracker.services.community import (
    FEED_LIMIT,
    POSTS_COLLECTION,
    feed_order,
)
from fitness_tracker.services.days import Clock, epoch_day, utc_now
from fitness_tracker.services.identity import IdentityProvider, require_identity
from fitness_tracker.services.ledger import build_snapshot, plan_filters, week_filters
from fitness_tracker.services.observable import SnapshotChannel
from fitness_tracker.services.records import post_from_document, profile_from_document
from fitness_tracker.services.store import DocumentStore, Subscription, user_path

_logger = logging.getLogger(__name__)


class _LiveView(ABC):
    """Owns subscriptions and tears them all down on close."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def start(self) -> None:
        if self._started or self._closed:
            return
        self._started = True
        self._open()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self._on_close()

    @abstractmethod
    def _open(self) -> None: ...

    @abstractmethod
    def _on_close(self) -> None: ...

    def _guard(
        self, handler: Callable[[list[Document]], None]
    ) -> Callable[[list[Document]], None]:
        def deliver(docs: list[Document]) -> None:
            if self._closed:
                return
            handler(docs)

        return deliver


class LiveLedgerView(_LiveView):
    """Profile, plan and trailing-week feeds merged into one snapshot.

    Feeds may arrive in any order; every delivery recomputes the totals from
    the latest value of each feed. Used as an async context manager the view
    moves its plan and week feeds to the new day at UTC midnight.
    """

    def __init__(
        self,
        kind: LedgerKind,
        store: DocumentStore,
        identity: IdentityProvider,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__()
        self.kind = kind
        self.store = store
        self.identity = identity
        self.clock = clock
        self.today = epoch_day(clock())
        self._profile: Document | None = None
        self._planned: list[Document] = []
        self._week: list[Document] = []
        self._received: set[str] = set()
        self._errors: dict[str, str] = {}
        self._midnight: asyncio.TimerHandle | None = None
        self.snapshots: SnapshotChannel[LedgerSnapshot] = SnapshotChannel(
            LedgerSnapshot(kind=kind.value, today=self.today)
        )

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self.snapshots.value

    async def __aenter__(self) -> Self:
        await super().__aenter__()
        self._schedule_midnight()
        return self

    def roll_over(self) -> bool:
        """Resubscribe for the current day if the clock has passed midnight."""
        today = epoch_day(self.clock())
        if not self._started or self._closed or today == self.today:
            return False
        _logger.info(
            "Live %s view moving from day %s to %s", self.kind.value, self.today, today
        )
        for subscription in self._subscriptions:
            subscription.cancel()
        self.today = today
        self._planned = []
        self._week = []
        self._received -= {"plan", "logs"}
        self._errors.pop("plan", None)
        self._errors.pop("logs", None)
        self._recompute()
        self._open()
        return True

    def _schedule_midnight(self) -> None:
        if self._closed:
            return
        now = self.clock()
        midnight = datetime.combine(now.date() + timedelta(days=1), time(), tzinfo=UTC)
        delay = max((midnight - now).total_seconds(), 0.0)
        self._midnight = asyncio.get_running_loop().call_later(delay, self._on_midnight)

    def _on_midnight(self) -> None:
        self.roll_over()
        self._schedule_midnight()

    def _open(self) -> None:
        identity = require_identity(self.identity)
        user_id = identity.user_id
        self._subscriptions = [
            self.store.subscribe(
                user_path(user_id),
                self._guard(self._on_profile),
                filters=[Filter(DOCUMENT_ID, "==", user_id)],
                on_error=self._error_handler("profile"),
            ),
            self.store.subscribe(
                user_path(user_id, self.kind.plan_collection),
                self._guard(self._on_planned),
                filters=plan_filters(self.today),
                order_by=OrderBy("createdAt"),
                on_error=self._error_handler("plan"),
            ),
            self.store.subscribe(
                user_path(user_id, self.kind.log_collection),
                self._guard(self._on_week),
                filters=week_filters(self.today),
                order_by=OrderBy("dateEpochDay", descending=True),
                on_error=self._error_handler("logs"),
            ),
        ]
        _logger.info("Live %s view opened for user %s", self.kind.value, user_id)

    def _on_close(self) -> None:
        if self._midnight is not None:
            self._midnight.cancel()
            self._midnight = None
        self.snapshots.close()

    def _on_profile(self, docs: list[Document]) -> None:
        identity = self.identity.current()
        user_id = identity.user_id if identity else None
        self._profile = next((doc for doc in docs if doc.id == user_id), None)
        self._update("profile")

    def _on_planned(self, docs: list[Document]) -> None:
        self._planned = docs
        self._update("plan")

    def _on_week(self, docs: list[Document]) -> None:
        self._week = docs
        self._update("logs")

    def _update(self, feed: str) -> None:
        self._received.add(feed)
        self._errors.pop(feed, None)
        self._recompute()

    def _error_handler(self, feed: str) -> Callable[[Exception], None]:
        def handle(exc: Exception) -> None:
            if self._closed:
                return
            _logger.warning("Live %s %s feed error: %s", self.kind.value, feed, exc)
            self._errors[feed] = f"{feed.capitalize()} listener error: {exc}"
            self._received.add(feed)
            self._recompute()

        return handle

    def _recompute(self) -> None:
        self.snapshots.publish(
            build_snapshot(
                self.kind,
                self.today,
                profile_from_document(self._profile),
                self._planned,
                self._week,
                loading=len(self._received) < 3,
                error="; ".join(self._errors.values()) or None,
            )
        )


class CommunityFeedView(_LiveView):
    """Live newest-first feed of community posts."""

    def __init__(self, store: DocumentStore, limit: int = FEED_LIMIT) -> None:
        super().__init__()
        self.store = store
        self.limit = limit
        self.snapshots: SnapshotChannel[FeedSnapshot] = SnapshotChannel(FeedSnapshot())

    def _open(self) -> None:
        self._subscriptions = [
            self.store.subscribe(
                POSTS_COLLECTION,
                self._guard(self._on_posts),
                order_by=feed_order(),
                limit=self.limit,
                on_error=self._on_error,
            )
        ]

    def _on_close(self) -> None:
        self.snapshots.close()

    def _on_posts(self, docs: list[Document]) -> None:
        posts = [post_from_document(doc) for doc in docs]
        self.snapshots.publish(FeedSnapshot(loading=False, posts=posts))

    def _on_error(self, exc: Exception) -> None:
        if self._closed:
            return
        _logger.warning("Community feed error: %s", exc)
        current = self.snapshots.value
        self.snapshots.publish(
            FeedSnapshot(loading=False, posts=current.posts, error=str(exc))
        )
