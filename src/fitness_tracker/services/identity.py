"""Identity handles passed into per-user services."""

from dataclasses import dataclass
from typing import Protocol

from fitness_tracker.domain.models import Identity
from fitness_tracker.errors import NotAuthenticatedError


class IdentityProvider(Protocol):
    """Source of the currently signed-in user."""

    def current(self) -> Identity | None:
        """Return the signed-in identity, or None."""


@dataclass(frozen=True)
class StaticIdentityProvider(IdentityProvider):
    """Identity fixed for the lifetime of one request or session."""

    identity: Identity | None

    def current(self) -> Identity | None:
        return self.identity


def require_identity(provider: IdentityProvider) -> Identity:
    """Return the identity or raise before any store call is made."""
    identity = provider.current()
    if identity is None or not identity.user_id:
        raise NotAuthenticatedError()
    return identity
