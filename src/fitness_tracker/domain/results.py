"""Result type returned by user-triggered actions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action with a human-readable message.

    ``partial`` marks failures after which store state may have diverged from
    what the caller last saw; callers should re-sync from a live view.
    ``retryable`` marks failures caused by the store being unreachable.
    """

    ok: bool
    message: str
    partial: bool = False
    retryable: bool = False
    data: dict[str, object] | None = None

    @classmethod
    def success(
        cls, message: str, data: dict[str, object] | None = None
    ) -> "ActionResult":
        return cls(ok=True, message=message, data=data)

    @classmethod
    def failure(cls, message: str, partial: bool = False) -> "ActionResult":
        return cls(ok=False, message=message, partial=partial, retryable=partial)

    @classmethod
    def unavailable(cls, exc: Exception) -> "ActionResult":
        return cls(ok=False, message=f"Failed: {exc}", retryable=True)
