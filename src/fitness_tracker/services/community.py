"""Community feed: posts, shares, likes and comments."""

import logging
from dataclasses import dataclass, field

from fitness_tracker.domain.community import Comment, CommunityPost, PostType
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.domain.models import Identity
from fitness_tracker.domain.results import ActionResult
from fitness_tracker.domain.store import Filter, OrderBy
from fitness_tracker.errors import StoreUnavailableError
from fitness_tracker.services.aggregation import sum_macros, sum_workout_kcal
from fitness_tracker.services.days import Clock, epoch_day, utc_now
from fitness_tracker.services.identity import IdentityProvider, require_identity
from fitness_tracker.services.ledger import plan_filters
from fitness_tracker.services.profile import resolve_current_weight
from fitness_tracker.services.records import (
    comment_from_document,
    meal_from_document,
    post_from_document,
    profile_from_document,
    workout_from_document,
)
from fitness_tracker.services.store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    Transaction,
    user_path,
)

_logger = logging.getLogger(__name__)

POSTS_COLLECTION = "communityPosts"
FEED_LIMIT = 100


def likes_path(post_id: str) -> str:
    return f"{POSTS_COLLECTION}/{post_id}/likes"


def comments_path(post_id: str) -> str:
    return f"{POSTS_COLLECTION}/{post_id}/comments"


def feed_order() -> OrderBy:
    return OrderBy("createdAt", descending=True)


@dataclass
class CommunityService:
    """Service for the shared community feed."""

    store: DocumentStore
    identity: IdentityProvider
    clock: Clock = field(default=utc_now)

    async def feed(self, limit: int = FEED_LIMIT) -> list[CommunityPost]:
        """Return the newest posts from all users."""
        docs = await self.store.query(
            POSTS_COLLECTION, order_by=feed_order(), limit=limit
        )
        return [post_from_document(doc) for doc in docs]

    async def comments(self, post_id: str) -> list[Comment]:
        docs = await self.store.query(
            comments_path(post_id), order_by=OrderBy("createdAt")
        )
        return [comment_from_document(doc) for doc in docs]

    async def create_post(self, text: str) -> ActionResult:
        """Publish a plain text post."""
        identity = require_identity(self.identity)
        cleaned = text.strip()
        if not cleaned:
            return ActionResult.failure("Post text is empty")
        return await self._publish(identity, PostType.TEXT, cleaned, {}, "Posted")

    async def share_meals(self) -> ActionResult:
        """Publish today's eaten macro totals."""
        identity = require_identity(self.identity)
        try:
            docs = await self.store.query(
                user_path(identity.user_id, LedgerKind.MEALS.log_collection),
                filters=self._today(),
            )
        except StoreUnavailableError as exc:
            return ActionResult.unavailable(exc)
        totals = sum_macros(meal_from_document(doc) for doc in docs)
        payload = {
            "kcal": totals.kcal,
            "protein": totals.protein,
            "carbs": totals.carbs,
            "fat": totals.fat,
        }
        return await self._publish(
            identity, PostType.MEALS, None, payload, "Shared today's meals"
        )

    async def share_workout(self) -> ActionResult:
        """Publish today's burned calories and completed sessions."""
        identity = require_identity(self.identity)
        try:
            docs = await self.store.query(
                user_path(identity.user_id, LedgerKind.WORKOUTS.log_collection),
                filters=self._today(),
            )
            logs = [workout_from_document(doc) for doc in docs]
            weight = None
            if any(entry.kcal is None for entry in logs):
                weight = await resolve_current_weight(self.store, identity.user_id)
        except StoreUnavailableError as exc:
            return ActionResult.unavailable(exc)
        payload = {
            "kcal": sum_workout_kcal(logs, weight),
            "workouts": [entry.name for entry in logs],
        }
        return await self._publish(
            identity, PostType.WORKOUT, None, payload, "Shared today's workout"
        )

    async def share_progress(self) -> ActionResult:
        """Publish the latest cached weigh-in."""
        identity = require_identity(self.identity)
        try:
            profile = profile_from_document(
                await self.store.get(user_path(identity.user_id), identity.user_id)
            )
        except StoreUnavailableError as exc:
            return ActionResult.unavailable(exc)
        if profile.current_weight_kg is None:
            return ActionResult.failure("Log your weight first")
        text = f"Weighed in at {profile.current_weight_kg} kg"
        if profile.last_bmi is not None:
            text += f" (BMI {profile.last_bmi})"
        payload: dict[str, object] = {
            "weightKg": profile.current_weight_kg,
            "bmi": profile.last_bmi,
        }
        return await self._publish(
            identity, PostType.PROGRESS, text, payload, "Shared progress"
        )

    async def toggle_like(self, post_id: str) -> ActionResult:
        """Like or unlike a post, keeping the counter in step with the markers."""
        identity = require_identity(self.identity)

        async def body(tx: Transaction) -> tuple[bool, int] | None:
            like = await tx.get(likes_path(post_id), identity.user_id)
            post = await tx.get(POSTS_COLLECTION, post_id)
            if post is None:
                return None
            current = post_from_document(post).likes_count
            if like is not None:
                tx.delete(likes_path(post_id), identity.user_id)
                tx.update(POSTS_COLLECTION, post_id, {"likesCount": current - 1})
                return False, current - 1
            tx.set(
                likes_path(post_id),
                identity.user_id,
                {"userId": identity.user_id, "createdAt": SERVER_TIMESTAMP},
            )
            tx.update(POSTS_COLLECTION, post_id, {"likesCount": current + 1})
            return True, current + 1

        try:
            outcome = await self.store.run_transaction(body)
        except StoreUnavailableError as exc:
            _logger.warning("Like toggle failed: post=%s error=%s", post_id, exc)
            return ActionResult.unavailable(exc)
        if outcome is None:
            return ActionResult.success("Post no longer available")
        liked, count = outcome
        return ActionResult.success(
            "Liked" if liked else "Unliked", data={"liked": liked, "likesCount": count}
        )

    async def add_comment(self, post_id: str, text: str) -> ActionResult:
        """Append a comment and bump the post's comment counter atomically."""
        identity = require_identity(self.identity)
        cleaned = text.strip()
        if not cleaned:
            return ActionResult.failure("Comment is empty")

        async def body(tx: Transaction) -> tuple[str, int] | None:
            post = await tx.get(POSTS_COLLECTION, post_id)
            if post is None:
                return None
            count = post_from_document(post).comments_count + 1
            comment_id = tx.new_id()
            tx.set(
                comments_path(post_id),
                comment_id,
                {
                    "userId": identity.user_id,
                    "username": identity.username,
                    "text": cleaned,
                    "createdAt": SERVER_TIMESTAMP,
                },
            )
            tx.update(POSTS_COLLECTION, post_id, {"commentsCount": count})
            return comment_id, count

        try:
            outcome = await self.store.run_transaction(body)
        except StoreUnavailableError as exc:
            _logger.warning("Comment failed: post=%s error=%s", post_id, exc)
            return ActionResult.unavailable(exc)
        if outcome is None:
            return ActionResult.success("Post no longer available")
        comment_id, count = outcome
        return ActionResult.success(
            "Comment added", data={"id": comment_id, "commentsCount": count}
        )

    def _today(self) -> list[Filter]:
        return plan_filters(epoch_day(self.clock()))

    async def _publish(  # noqa: PLR0913
        self,
        identity: Identity,
        post_type: PostType,
        text: str | None,
        payload: dict[str, object],
        message: str,
    ) -> ActionResult:
        fields = {
            "userId": identity.user_id,
            "username": identity.username,
            "type": post_type.value,
            "text": text,
            "payload": payload,
            "createdAt": SERVER_TIMESTAMP,
            "likesCount": 0,
            "commentsCount": 0,
        }
        try:
            post_id = await self.store.add(POSTS_COLLECTION, fields)
        except StoreUnavailableError as exc:
            _logger.warning("Post failed: type=%s error=%s", post_type, exc)
            return ActionResult.unavailable(exc)
        _logger.info("Published %s post %s", post_type.value, post_id)
        return ActionResult.success(message, data={"id": post_id})
