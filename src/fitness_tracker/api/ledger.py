"""Workout and meal ledger endpoints."""

import json
from collections.abc import AsyncIterator
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from fitness_tracker.api.auth import current_identity, require_api_token, user_scope
from fitness_tracker.api.models import AddEntryRequest
from fitness_tracker.api.responses import action_response, to_json
from fitness_tracker.containers import AppContainer, UserScope
from fitness_tracker.domain.entries import LedgerKind
from fitness_tracker.services.catalog import catalog_for
from fitness_tracker.services.identity import StaticIdentityProvider, require_identity

router = APIRouter(tags=["ledger"], dependencies=[Depends(require_api_token)])


@router.get("/catalog/{kind}")
async def catalog(kind: LedgerKind) -> list[dict[str, Any]]:
    """Return the fixed catalog for a domain."""
    return [asdict(item) for item in catalog_for(kind)]


@router.get("/{kind}/today")
async def today(kind: LedgerKind, scope: UserScope = Depends(user_scope)) -> Any:
    """Return a one-shot snapshot of today's plan, logs and totals."""
    return to_json(await scope.ledger(kind).snapshot())


@router.get("/{kind}/live")
async def live(
    kind: LedgerKind,
    request: Request,
    identity: StaticIdentityProvider = Depends(current_identity),
) -> StreamingResponse:
    """Stream ledger snapshots as server-sent events until the client leaves."""
    require_identity(identity)
    container: AppContainer = request.app.state.container

    async def events() -> AsyncIterator[str]:
        async with container.live_ledger(kind, identity) as view:
            async for snapshot in view.snapshots.stream():
                yield f"data: {json.dumps(to_json(snapshot))}\n\n"

    return StreamingResponse(events(), media_type="text/event-stream")


@router.post("/{kind}/today")
async def add_to_today(
    kind: LedgerKind, body: AddEntryRequest, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Plan a catalog item for today."""
    return action_response(await scope.ledger(kind).add_to_today(body.name))


@router.post("/{kind}/today/{name}/complete")
async def complete(
    kind: LedgerKind, name: str, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Mark a planned workout complete or a planned meal eaten."""
    return action_response(await scope.ledger(kind).complete_by_name(name))


@router.delete("/{kind}/today/{name}")
async def remove(
    kind: LedgerKind, name: str, scope: UserScope = Depends(user_scope)
) -> JSONResponse:
    """Remove a planned entry from today."""
    return action_response(await scope.ledger(kind).remove(name))
