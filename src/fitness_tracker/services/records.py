"""Conversion between raw store documents and typed domain records."""

from fitness_tracker.domain.community import Comment, CommunityPost, PostType
from fitness_tracker.domain.entries import MealEntry, WorkoutEntry
from fitness_tracker.domain.models import Goal, Units, UserProfile
from fitness_tracker.domain.progress import ProgressPoint
from fitness_tracker.domain.store import Document
from fitness_tracker.services.metrics import to_int, to_number


def workout_from_document(doc: Document) -> WorkoutEntry:
    return WorkoutEntry(
        id=doc.id,
        name=_text(doc.get("name"), "Workout"),
        met=to_number(doc.get("met")),
        duration_min=to_int(doc.get("durationMin")),
        kcal=to_int(doc.get("kcal")),
        intensity=_optional_text(doc.get("intensity")),
        date_epoch_day=to_int(doc.get("dateEpochDay")),
        created_at=to_int(doc.get("createdAt")),
    )


def meal_from_document(doc: Document) -> MealEntry:
    return MealEntry(
        id=doc.id,
        name=_text(doc.get("name"), "Meal"),
        kcal=to_int(doc.get("kcal")),
        protein=to_int(doc.get("protein")),
        carbs=to_int(doc.get("carbs")),
        fat=to_int(doc.get("fat")),
        date_epoch_day=to_int(doc.get("dateEpochDay")),
        created_at=to_int(doc.get("createdAt")),
    )


def workout_fields(entry: WorkoutEntry) -> dict[str, object]:
    """Return the stored shape of a workout entry (without bookkeeping)."""
    fields: dict[str, object] = {"name": entry.name}
    if entry.intensity is not None:
        fields["intensity"] = entry.intensity
    if entry.met is not None:
        fields["met"] = entry.met
    if entry.duration_min is not None:
        fields["durationMin"] = entry.duration_min
    if entry.kcal is not None:
        fields["kcal"] = entry.kcal
    return fields


def meal_fields(entry: MealEntry) -> dict[str, object]:
    return {
        "name": entry.name,
        "kcal": entry.kcal or 0,
        "protein": entry.protein or 0,
        "carbs": entry.carbs or 0,
        "fat": entry.fat or 0,
    }


def profile_from_document(doc: Document | None) -> UserProfile:
    """Parse the profile; a missing document yields an empty profile."""
    if doc is None:
        return UserProfile()
    height = to_number(doc.get("heightCm"))
    calorie_target = to_number(doc.get("calorieTarget"))
    if calorie_target is None:
        calorie_target = to_number(doc.get("lastCalorieTarget"))
    return UserProfile(
        age=to_int(doc.get("age")),
        height_cm=int(height) if height is not None and height > 0 else None,
        legacy_weight_kg=to_number(doc.get("weightKg")),
        goal=_text(doc.get("goal"), Goal.MAINTAIN.value),
        notifications_enabled=doc.get("notificationsEnabled") is True,
        units=_text(doc.get("units"), Units.METRIC.value),
        current_weight_kg=to_number(doc.get("currentWeightKg")),
        last_bmi=to_number(doc.get("lastBmi")),
        calorie_target=calorie_target,
        weight_updated_at=to_int(doc.get("weightUpdatedAt")),
    )


def progress_from_document(doc: Document) -> ProgressPoint | None:
    """Parse a weigh-in; documents without a timestamp are skipped."""
    timestamp = to_int(doc.get("timestamp"))
    if timestamp is None:
        return None
    return ProgressPoint(
        timestamp=timestamp,
        weight_kg=to_number(doc.get("weightKg")),
        bmi=to_number(doc.get("bmi")),
        date_epoch_day=to_int(doc.get("dateEpochDay")),
    )


def post_from_document(doc: Document) -> CommunityPost:
    payload = doc.get("payload")
    return CommunityPost(
        id=doc.id,
        user_id=_text(doc.get("userId"), ""),
        username=_text(doc.get("username"), "User"),
        type=_text(doc.get("type"), PostType.TEXT.value),
        text=_optional_text(doc.get("text")),
        payload={str(key): value for key, value in payload.items()}
        if isinstance(payload, dict)
        else {},
        likes_count=to_int(doc.get("likesCount")) or 0,
        comments_count=to_int(doc.get("commentsCount")) or 0,
        created_at=to_int(doc.get("createdAt")),
    )


def comment_from_document(doc: Document) -> Comment:
    return Comment(
        id=doc.id,
        user_id=_text(doc.get("userId"), ""),
        username=_text(doc.get("username"), "User"),
        text=_text(doc.get("text"), ""),
        created_at=to_int(doc.get("createdAt")),
    )


def _text(value: object, default: str) -> str:
    return value if isinstance(value, str) and value else default


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) else None
