from __future__ import annotations

import contextlib
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from mafia.rooms import RoomError, RoomReaper, RoomRegistry, RoomService
from mafia.server.middleware import SecurityHeadersMiddleware, SlashNormalizationMiddleware
from mafia.server.settings import MafiaServerSettings
from mafia.views import create_room, get_room, join_room, my_role, reset_room, room_error_handler, start_room
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request


async def health(request: Request) -> JSONResponse:
    registry: RoomRegistry = request.app.state.registry
    return JSONResponse({"status": "ok", "rooms": len(registry)})


def create_app(
    settings: MafiaServerSettings | None = None,
    registry: RoomRegistry | None = None,
) -> Starlette:
    """Build the server around one registry.

    Tests pass their own registry to inspect room state directly.
    """
    if settings is None:  # pragma: no cover
        settings = MafiaServerSettings()
    if registry is None:
        registry = RoomRegistry(code_attempts=settings.room_code_attempts)

    routes: list[Route | Mount] = [
        Route("/health", health, methods=["GET"], name="health"),
        Route("/api/rooms", create_room, methods=["POST"], name="create_room"),
        Route("/api/rooms/{code}", get_room, methods=["GET"], name="get_room"),
        Route("/api/rooms/{code}/join", join_room, methods=["POST"], name="join_room"),
        Route("/api/rooms/{code}/start", start_room, methods=["POST"], name="start_room"),
        Route("/api/rooms/{code}/reset", reset_room, methods=["POST"], name="reset_room"),
        Route("/api/rooms/{code}/my-role", my_role, methods=["GET"], name="my_role"),
    ]

    if settings.static_dir:
        static_dir = Path(settings.static_dir).resolve()
        if static_dir.is_dir():
            routes.append(Mount("/", app=StaticFiles(directory=str(static_dir), html=True), name="static"))
        else:
            logger.warning("static directory not found, client will not be served", path=str(static_dir))

    reaper: RoomReaper | None = None
    if settings.room_ttl_seconds > 0:
        reaper = RoomReaper(
            registry,
            ttl_seconds=settings.room_ttl_seconds,
            interval_seconds=settings.reaper_interval_seconds,
        )

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        if reaper is not None:
            reaper.start()
        yield
        if reaper is not None:
            await reaper.stop()

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={RoomError: room_error_handler},
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]

    app.state.settings = settings
    app.state.registry = registry
    app.state.room_service = RoomService(registry)
    app.state.reaper = reaper

    logger.info("room server ready", room_ttl_seconds=settings.room_ttl_seconds)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory mafia.server.app:get_app."""
    s = MafiaServerSettings()
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s)
