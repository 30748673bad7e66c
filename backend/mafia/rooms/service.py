"""Room operations as seen by the transport layer.

One method per operation. Each resolves its inputs (room code, session
token), runs exactly one lifecycle operation and returns an immutable view.
Failures propagate as RoomError subclasses; nothing here retries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from mafia.rooms.errors import InvalidName
from mafia.rooms.lifecycle import RoomLifecycle
from mafia.rooms.models import clean_name, parse_config
from mafia.rooms.sessions import SessionAuthenticator
from mafia.rooms.views import build_grant

if TYPE_CHECKING:
    from mafia.rooms.registry import RoomRegistry
    from mafia.rooms.views import RoleReveal, RoomView, RoundReset, RoundStarted, SessionGrant

logger = structlog.get_logger()


class RoomService:
    def __init__(self, registry: RoomRegistry, lifecycle: RoomLifecycle | None = None) -> None:
        self._registry = registry
        self._lifecycle = lifecycle or RoomLifecycle()
        self._sessions = SessionAuthenticator(registry)

    @property
    def registry(self) -> RoomRegistry:
        return self._registry

    def create_room(
        self,
        host_name: Any,  # noqa: ANN401
        total_players: Any,  # noqa: ANN401
        mafia_count: Any,  # noqa: ANN401
        angel_count: Any,  # noqa: ANN401
    ) -> SessionGrant:
        """Validate the host name, then the config, then allocate a room."""
        name = clean_name(host_name)
        if name is None:
            raise InvalidName("Host name is required.")
        config = parse_config(total_players, mafia_count, angel_count)
        room, host = self._registry.allocate(config, name)
        return build_grant(room, host)

    def join_room(self, code: str, name: Any) -> SessionGrant:  # noqa: ANN401
        room = self._registry.lookup(code)
        player = self._lifecycle.join(room, name)
        return build_grant(room, player)

    def view_room(self, code: str, token: str | None) -> RoomView:
        session = self._sessions.resolve(code, token)
        session.room.touch()
        return self._lifecycle.view(session.room, session.player.id)

    def start_room(self, code: str, token: str | None) -> RoundStarted:
        session = self._sessions.resolve(code, token)
        return self._lifecycle.start(session.room, session.player)

    def reset_room(self, code: str, token: str | None) -> RoundReset:
        session = self._sessions.resolve(code, token)
        return self._lifecycle.reset(session.room, session.player)

    def my_role(self, code: str, token: str | None) -> RoleReveal:
        session = self._sessions.resolve(code, token)
        session.room.touch()
        reveal = self._lifecycle.my_role(session.room, session.player)
        logger.debug("role revealed", room_code=session.room.code, player_id=session.player.id)
        return reveal
