"""JSON handlers for the room API.

Each handler maps one route onto one RoomService call. Room errors are not
caught here; they propagate to ``room_error_handler`` which turns them into
``{"error", "kind"}`` responses.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import structlog
from starlette.responses import JSONResponse

from mafia.rooms.errors import (
    AlreadyStarted,
    AuthError,
    ConflictError,
    GameInProgress,
    IncompletePlayers,
    InternalError,
    InvalidInput,
    InvalidSession,
    MissingSession,
    NotFoundError,
    NotHost,
    RoomError,
    RoomFull,
    ValidationError,
)

if TYPE_CHECKING:
    from pydantic import BaseModel
    from starlette.requests import Request

    from mafia.rooms.service import RoomService

logger = structlog.get_logger()

# Most specific class first; the first isinstance match wins.
_ERROR_STATUS: list[tuple[type[RoomError], HTTPStatus]] = [
    (MissingSession, HTTPStatus.UNAUTHORIZED),
    (InvalidSession, HTTPStatus.FORBIDDEN),
    (NotHost, HTTPStatus.FORBIDDEN),
    (GameInProgress, HTTPStatus.FORBIDDEN),
    (RoomFull, HTTPStatus.FORBIDDEN),
    (IncompletePlayers, HTTPStatus.BAD_REQUEST),
    (AlreadyStarted, HTTPStatus.CONFLICT),
    (ValidationError, HTTPStatus.BAD_REQUEST),
    (ConflictError, HTTPStatus.CONFLICT),
    (AuthError, HTTPStatus.FORBIDDEN),
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (InternalError, HTTPStatus.INTERNAL_SERVER_ERROR),
]

BEARER_PREFIX = "Bearer "


def status_for(exc: RoomError) -> HTTPStatus:
    for error_cls, status in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


async def room_error_handler(request: Request, exc: Exception) -> JSONResponse:
    room_exc = exc if isinstance(exc, RoomError) else InternalError()
    status = status_for(room_exc)
    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("room operation failed", path=request.url.path, kind=room_exc.kind, error=room_exc.message)
    else:
        logger.debug("room operation rejected", path=request.url.path, kind=room_exc.kind)
    return JSONResponse({"error": room_exc.message, "kind": room_exc.kind}, status_code=status)


def _service(request: Request) -> RoomService:
    return request.app.state.room_service


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


async def _json_object(request: Request) -> dict[str, Any]:
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except ValueError as e:
        raise InvalidInput("Invalid JSON body.") from e
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object.")
    return body


def _respond(model: BaseModel, status_code: int = HTTPStatus.OK) -> JSONResponse:
    return JSONResponse(model.model_dump(mode="json", by_alias=True), status_code=status_code)


async def create_room(request: Request) -> JSONResponse:
    """POST /api/rooms - create a room and return the host's session."""
    body = await _json_object(request)
    grant = _service(request).create_room(
        host_name=body.get("hostName"),
        total_players=body.get("totalPlayers"),
        mafia_count=body.get("mafiaCount"),
        angel_count=body.get("angelCount"),
    )
    return _respond(grant, HTTPStatus.CREATED)


async def join_room(request: Request) -> JSONResponse:
    """POST /api/rooms/{code}/join - join a waiting room by code."""
    body = await _json_object(request)
    grant = _service(request).join_room(request.path_params["code"], body.get("name"))
    return _respond(grant, HTTPStatus.CREATED)


async def get_room(request: Request) -> JSONResponse:
    """GET /api/rooms/{code} - the room as seen by the caller."""
    view = _service(request).view_room(request.path_params["code"], _bearer_token(request))
    return _respond(view)


async def start_room(request: Request) -> JSONResponse:
    """POST /api/rooms/{code}/start - host assigns roles."""
    result = _service(request).start_room(request.path_params["code"], _bearer_token(request))
    return _respond(result)


async def reset_room(request: Request) -> JSONResponse:
    """POST /api/rooms/{code}/reset - host clears roles for another round."""
    result = _service(request).reset_room(request.path_params["code"], _bearer_token(request))
    return _respond(result)


async def my_role(request: Request) -> JSONResponse:
    """GET /api/rooms/{code}/my-role - the caller's own role."""
    reveal = _service(request).my_role(request.path_params["code"], _bearer_token(request))
    return _respond(reveal)
