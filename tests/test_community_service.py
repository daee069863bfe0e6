"""Tests for the community feed service."""

import asyncio

import pytest

from fitness_tracker.adapters.memory_document_store import InMemoryDocumentStore
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.domain.models import Identity
from fitness_tracker.errors import NotAuthenticatedError
from fitness_tracker.services.community import CommunityService
from fitness_tracker.services.identity import StaticIdentityProvider
from fitness_tracker.services.ledger import LedgerService
from fitness_tracker.services.progress import ProgressService
from tests.conftest import USER_ID, FailingDocumentStore, FixedClock


def _post(service: CommunityService, text: str = "hello") -> str:
    result = asyncio.run(service.create_post(text))
    assert result.data is not None
    return str(result.data["id"])


def test_create_post_and_feed(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)

    result = asyncio.run(service.create_post("  morning run done  "))
    asyncio.run(service.create_post("second"))
    feed = asyncio.run(service.feed())

    assert result.message == "Posted"
    assert [post.text for post in feed] == ["second", "morning run done"]
    assert feed[1].username == "alex"
    assert feed[1].user_id == USER_ID
    assert feed[1].type == "TEXT"
    assert feed[1].likes_count == 0


def test_empty_post_is_rejected(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    result = asyncio.run(CommunityService(store, identity, clock).create_post("   "))

    assert not result.ok
    assert result.message == "Post text is empty"


def test_username_falls_back_without_email(
    store: InMemoryDocumentStore, clock: FixedClock
) -> None:
    service = CommunityService(
        store, StaticIdentityProvider(Identity(user_id="u2")), clock
    )
    _post(service)

    assert asyncio.run(service.feed())[0].username == "User"


def test_double_like_toggle_restores_counter(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)
    post_id = _post(service)

    liked = asyncio.run(service.toggle_like(post_id))
    unliked = asyncio.run(service.toggle_like(post_id))

    assert liked.message == "Liked"
    assert liked.data == {"liked": True, "likesCount": 1}
    assert unliked.message == "Unliked"
    assert unliked.data == {"liked": False, "likesCount": 0}
    assert asyncio.run(service.feed())[0].likes_count == 0
    assert store.documents(f"communityPosts/{post_id}/likes") == []


def test_likes_from_two_users(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)
    other = CommunityService(
        store, StaticIdentityProvider(Identity(user_id="u2")), clock
    )
    post_id = _post(service)

    asyncio.run(service.toggle_like(post_id))
    result = asyncio.run(other.toggle_like(post_id))

    assert result.data == {"liked": True, "likesCount": 2}
    assert len(store.documents(f"communityPosts/{post_id}/likes")) == 2


def test_like_missing_post_is_a_noop(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    result = asyncio.run(CommunityService(store, identity, clock).toggle_like("gone"))

    assert result.ok
    assert result.message == "Post no longer available"
    assert store.documents("communityPosts/gone/likes") == []


def test_add_comment_bumps_counter(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)
    post_id = _post(service)

    first = asyncio.run(service.add_comment(post_id, "nice"))
    second = asyncio.run(service.add_comment(post_id, "keep going"))
    comments = asyncio.run(service.comments(post_id))

    assert first.message == "Comment added"
    assert second.data is not None
    assert second.data["commentsCount"] == 2
    assert [comment.text for comment in comments] == ["nice", "keep going"]
    assert comments[0].username == "alex"
    assert asyncio.run(service.feed())[0].comments_count == 2


def test_empty_comment_is_rejected(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)
    post_id = _post(service)

    result = asyncio.run(service.add_comment(post_id, " "))

    assert result.message == "Comment is empty"
    assert store.documents(f"communityPosts/{post_id}/comments") == []


def test_share_meals_posts_todays_totals(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    meals = LedgerService(LedgerKind.MEALS, store, identity, clock)
    asyncio.run(meals.add_to_today("Paneer Wrap"))
    asyncio.run(meals.complete_by_name("Paneer Wrap"))
    service = CommunityService(store, identity, clock)

    result = asyncio.run(service.share_meals())
    post = asyncio.run(service.feed())[0]

    assert result.message == "Shared today's meals"
    assert post.type == "MEALS"
    assert post.payload == {"kcal": 480, "protein": 24, "carbs": 45, "fat": 22}


def test_share_workout_posts_burned_kcal(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    asyncio.run(
        store.add(
            f"users/{USER_ID}/workoutLogs",
            {
                "name": "Legacy",
                "met": 4.5,
                "durationMin": 20,
                "dateEpochDay": clock.today,
            },
        )
    )
    asyncio.run(store.set("users", USER_ID, {"currentWeightKg": 80}))
    service = CommunityService(store, identity, clock)

    result = asyncio.run(service.share_workout())
    post = asyncio.run(service.feed())[0]

    assert result.message == "Shared today's workout"
    assert post.payload == {"kcal": 126, "workouts": ["Legacy"]}


def test_share_progress_needs_a_weigh_in(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    service = CommunityService(store, identity, clock)

    before = asyncio.run(service.share_progress())
    asyncio.run(store.set("users", USER_ID, {"heightCm": 175}))
    asyncio.run(ProgressService(store, identity, clock).log_weight(70))
    after = asyncio.run(service.share_progress())
    post = asyncio.run(service.feed())[0]

    assert before.message == "Log your weight first"
    assert after.ok
    assert post.type == "PROGRESS"
    assert post.text == "Weighed in at 70.0 kg (BMI 22.9)"


def test_store_failure_becomes_failed_result(
    store: InMemoryDocumentStore, identity: StaticIdentityProvider, clock: FixedClock
) -> None:
    failing = FailingDocumentStore(store, fail_on={"add": None})

    result = asyncio.run(CommunityService(failing, identity, clock).create_post("hi"))

    assert not result.ok
    assert result.retryable
    assert result.message == "Failed: add unavailable"


def test_posting_requires_identity(
    store: InMemoryDocumentStore, anonymous: StaticIdentityProvider, clock: FixedClock
) -> None:
    with pytest.raises(NotAuthenticatedError):
        asyncio.run(CommunityService(store, anonymous, clock).create_post("hi"))
