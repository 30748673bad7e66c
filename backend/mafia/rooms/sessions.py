"""Resolve a (room code, session token) pair to a room and one of its players."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mafia.rooms.errors import InvalidSession, MissingSession, RoomNotFound

if TYPE_CHECKING:
    from mafia.rooms.models import Player, Room
    from mafia.rooms.registry import RoomRegistry


@dataclass(frozen=True)
class Session:
    room: Room
    player: Player


class SessionAuthenticator:
    """Check a bearer token against the players of one room.

    Order of checks: a missing token fails with MissingSession before the room
    is looked up; an unknown or closed room then fails with RoomNotFound; a
    token that matches no player fails with InvalidSession. A caller holding
    any token can therefore tell whether a room code is live. Room codes are
    not secrets (they are shared aloud to invite players), so this is accepted.
    """

    def __init__(self, registry: RoomRegistry) -> None:
        self._registry = registry

    def resolve(self, code: str, token: str | None) -> Session:
        if not token or not token.strip():
            raise MissingSession
        room = self._registry.lookup(code)
        with room.lock:
            if room.closed:
                raise RoomNotFound
            player = room.player_with_token(token.strip())
        if player is None:
            raise InvalidSession
        return Session(room=room, player=player)
