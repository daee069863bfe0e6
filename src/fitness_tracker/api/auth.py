"""Request authentication: shared API token plus the caller's identity."""

from fastapi import Depends, Header, HTTPException, Request, status

from fitness_tracker.containers import AppContainer, UserScope
from fitness_tracker.domain.models import Identity
from fitness_tracker.services.identity import StaticIdentityProvider


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include the shared API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def current_identity(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> StaticIdentityProvider:
    """Identity forwarded by the auth gateway; absent when no user header is set."""
    if not x_user_id:
        return StaticIdentityProvider(None)
    return StaticIdentityProvider(Identity(user_id=x_user_id, email=x_user_email))


def user_scope(
    request: Request,
    identity: StaticIdentityProvider = Depends(current_identity),
) -> UserScope:
    """Services bound to the calling user."""
    container: AppContainer = request.app.state.container
    return container.scope(identity)
