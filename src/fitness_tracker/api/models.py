"""Pydantic models for API request bodies."""

from pydantic import BaseModel, Field


class AddEntryRequest(BaseModel):
    """Catalog item to plan for today."""

    name: str = Field(min_length=1)


class WeightRequest(BaseModel):
    """Weigh-in as typed by the user; validated by the progress service."""

    weight_kg: float | str | None = None


class ProfileRequest(BaseModel):
    """Onboarding answers."""

    age: int
    height_cm: int
    weight_kg: float
    goal: str = "Maintain"


class SettingsRequest(BaseModel):
    """Account settings; omitted fields are left unchanged."""

    notifications_enabled: bool | None = None
    units: str | None = None


class PostRequest(BaseModel):
    """Text post."""

    text: str


class CommentRequest(BaseModel):
    """Comment on a post."""

    text: str
