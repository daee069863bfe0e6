"""Helpers that turn service results into HTTP responses."""

from dataclasses import asdict
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from fitness_tracker.domain.results import ActionResult


def action_response(result: ActionResult) -> JSONResponse:
    """Serialize an action result; failures map to 400 or 503."""
    if result.ok:
        status_code = status.HTTP_200_OK
    elif result.retryable or result.partial:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(asdict(result))
    )


def to_json(value: Any) -> Any:
    """Encode dataclasses (and lists of them) as JSON-compatible values."""
    return jsonable_encoder(value)
