"""Community feed endpoints."""

import json
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from fitness_tracker.api.auth import require_api_token, user_scope
from fitness_tracker.api.models import CommentRequest, PostRequest
from fitness_tracker.api.responses import action_response, to_json
from fitness_tracker.containers import AppContainer, UserScope
from fitness_tracker.services.community import FEED_LIMIT

router = APIRouter(
    prefix="/community", tags=["community"], dependencies=[Depends(require_api_token)]
)


@router.get("/posts")
async def feed(
    limit: int = FEED_LIMIT, scope: UserScope = Depends(user_scope)
) -> Any:
    """Return the newest posts."""
    return to_json(await scope.community.feed(limit))


@router.get("/live")
async def live_feed(request: Request) -> StreamingResponse:
    """Stream feed snapshots as server-sent events."""
    container: AppContainer = request.app.state.container

    async def events() -> AsyncIterator[str]:
        async with container.live_feed() as view:
            async for snapshot in view.snapshots.stream():
                yield f"data: {json.dumps(to_json(snapshot))}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")


@router.post("/posts")
async def create_post(
    body: PostRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    return action_response(await scope.community.create_post(body.text))


@router.post("/share/meals")
async def share_meals(scope: UserScope = Depends(user_scope)) -> JSONResponse:
    return action_response(await scope.community.share_meals())


@router.post("/share/workout")
async def share_workout(scope: UserScope = Depends(user_scope)) -> JSONResponse:
    return action_response(await scope.community.share_workout())


@router.post("/share/progress")
async def share_progress(scope: UserScope = Depends(user_scope)) -> JSONResponse:
    return action_response(await scope.community.share_progress())


@router.post("/posts/{post_id}/like")
async def toggle_like(
    post_id: str, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Like the post, or take the like back."""
    return action_response(await scope.community.toggle_like(post_id))


@router.get("/posts/{post_id}/comments")
async def comments(
    post_id: str, scope: UserScope = Depends(user_scope)
) -> Any:
    return to_json(await scope.community.comments(post_id))


@router.post("/posts/{post_id}/comments")
async def add_comment(
    post_id: str, body: CommentRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    return action_response(await scope.community.add_comment(post_id, body.text))
