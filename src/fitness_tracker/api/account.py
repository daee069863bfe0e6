"""Progress, dashboard and account endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fitness_tracker.api.auth import require_api_token, user_scope
from fitness_tracker.api.models import ProfileRequest, SettingsRequest, WeightRequest
from fitness_tracker.api.responses import action_response, to_json
from fitness_tracker.containers import UserScope
from fitness_tracker.domain.results import ActionResult
from fitness_tracker.services.progress import HISTORY_LIMIT

router = APIRouter(tags=["account"], dependencies=[Depends(require_api_token)])


@router.get("/progress")
async def progress_history(
    limit: int = HISTORY_LIMIT, scope: UserScope = Depends(user_scope)
) -> Any:
    """Return recent weigh-ins, oldest first."""
    return to_json(await scope.progress.history(limit))


@router.post("/progress")
async def log_weight(
    body: WeightRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Record a weigh-in."""
    return action_response(await scope.progress.log_weight(body.weight_kg))


@router.get("/progress/preview")
async def preview(
    weight_kg: str, scope: UserScope = Depends(user_scope)
) -> Any:
    """Return BMI and calorie target for a typed weight without saving it."""
    return {"preview": to_json(await scope.progress.preview(weight_kg))}


@router.get("/dashboard")
async def dashboard(scope: UserScope = Depends(user_scope)) -> Any:
    return to_json(await scope.progress.dashboard())


@router.get("/account")
async def account(scope: UserScope = Depends(user_scope)) -> Any:
    return to_json(await scope.profile.account())


@router.put("/profile")
async def save_profile(
    body: ProfileRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Store onboarding answers."""
    return action_response(
        await scope.profile.save_profile(
            age=body.age,
            height_cm=body.height_cm,
            weight_kg=body.weight_kg,
            goal=body.goal,
        )
    )


@router.patch("/account/settings")
async def update_settings(
    body: SettingsRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Update notification and unit preferences."""
    result = ActionResult.failure("Nothing to update")
    if body.notifications_enabled is not None:
        result = await scope.profile.set_notifications(body.notifications_enabled)
        if not result.ok:
            return action_response(result)
    if body.units is not None:
        result = await scope.profile.set_units(body.units)
    return action_response(result)
