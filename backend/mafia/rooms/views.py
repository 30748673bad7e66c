"""Immutable projections of room state and operation results.

Built by pure functions from the entities; these are what leave the core.
Serialized with ``model_dump(by_alias=True)`` to the camelCase wire format.
No view ever carries a session token or another player's role.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mafia.rooms.models import Role, RoomStatus

if TYPE_CHECKING:
    from mafia.rooms.models import Player, Room


class _View(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PlayerView(_View):
    id: str
    name: str
    is_host: bool
    is_you: bool


class RoleCounts(_View):
    mafia: int
    angels: int
    citizens: int


class RoundInfo(_View):
    started_at: str
    seed: str


class RoomView(_View):
    code: str
    status: RoomStatus
    expected_players: int
    joined_players: int
    can_start: bool
    counts: RoleCounts
    players: tuple[PlayerView, ...]
    round: RoundInfo | None


class SessionGrant(_View):
    """Credentials issued once, at create or join time."""

    room_code: str
    token: str
    player_id: str
    is_host: bool


class RoundStarted(_View):
    message: str
    started_at: str
    seed: str


class RoundReset(_View):
    message: str


class RoleReveal(_View):
    role: Role


def build_player_view(player: Player, requester_id: str | None) -> PlayerView:
    return PlayerView(id=player.id, name=player.name, is_host=player.is_host, is_you=player.id == requester_id)


def build_room_view(room: Room, requester_id: str | None) -> RoomView:
    """Project ``room`` as seen by the player with ``requester_id``. Caller holds the room lock."""
    config = room.config
    round_info = None
    if room.status == RoomStatus.STARTED and room.started_at and room.round_seed:
        round_info = RoundInfo(started_at=room.started_at, seed=room.round_seed)
    return RoomView(
        code=room.code,
        status=room.status,
        expected_players=config.total_players,
        joined_players=room.player_count,
        can_start=room.can_start,
        counts=RoleCounts(
            mafia=config.mafia_count,
            angels=config.angel_count,
            citizens=config.citizen_count,
        ),
        players=tuple(build_player_view(p, requester_id) for p in room.players),
        round=round_info,
    )


def build_grant(room: Room, player: Player) -> SessionGrant:
    return SessionGrant(room_code=room.code, token=player.session_token, player_id=player.id, is_host=player.is_host)
