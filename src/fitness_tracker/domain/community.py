"""Domain models for the community feed."""

from dataclasses import dataclass, field
from enum import Enum


class PostType(str, Enum):
    """Kinds of community posts."""

    TEXT = "TEXT"
    MEALS = "MEALS"
    WORKOUT = "WORKOUT"
    PROGRESS = "PROGRESS"


@dataclass(frozen=True)
class CommunityPost:
    """Post with its denormalized counters."""

    id: str
    user_id: str
    username: str
    type: str
    text: str | None
    payload: dict[str, object] = field(default_factory=dict)
    likes_count: int = 0
    comments_count: int = 0
    created_at: int | None = None


@dataclass(frozen=True)
class Comment:
    """Comment attached to a post."""

    id: str
    user_id: str
    username: str
    text: str
    created_at: int | None = None


@dataclass(frozen=True)
class FeedSnapshot:
    """Read model of the live community feed."""

    loading: bool = True
    posts: list[CommunityPost] = field(default_factory=list)
    error: str | None = None
