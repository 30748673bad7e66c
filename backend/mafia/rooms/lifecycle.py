"""Room state machine: WAITING <-> STARTED.

There is no terminal state; a host can start and reset a room as often as
they like. Every operation takes the room lock for its whole duration and
checks all preconditions before mutating anything, so a failure leaves the
room exactly as it was.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from mafia.rooms.errors import (
    AlreadyStarted,
    GameInProgress,
    IncompletePlayers,
    InvalidName,
    NameTaken,
    NotHost,
    NotStarted,
    RoleMissing,
    RoomFull,
    RoomNotFound,
)
from mafia.rooms.models import Player, RoomStatus, clean_name
from mafia.rooms.roles import RoleAssigner
from mafia.rooms.views import RoleReveal, RoundReset, RoundStarted, build_room_view

if TYPE_CHECKING:
    from collections.abc import Callable

    from mafia.rooms.models import Room
    from mafia.rooms.views import RoomView

ROUND_SEED_BYTES = 16
START_MESSAGE = "Roles assigned securely."
RESET_MESSAGE = "Round reset. Host can start again when all players are present."

logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require_open(room: Room) -> None:
    if room.closed:
        raise RoomNotFound


class RoomLifecycle:
    def __init__(
        self,
        assigner: RoleAssigner | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._assigner = assigner or RoleAssigner()
        self._clock = clock

    def join(self, room: Room, name: object) -> Player:
        """Admit a new non-host player. Check and append are one atomic step."""
        with room.lock:
            _require_open(room)
            if room.status != RoomStatus.WAITING:
                raise GameInProgress
            if room.is_full:
                raise RoomFull
            cleaned = clean_name(name)
            if cleaned is None:
                raise InvalidName
            if room.has_name(cleaned):
                raise NameTaken
            player = Player.create(cleaned)
            room.players.append(player)
            room.touch()
        logger.info("player joined", room_code=room.code, player_id=player.id, joined=room.player_count)
        return player

    def start(self, room: Room, requester: Player) -> RoundStarted:
        with room.lock:
            _require_open(room)
            if not requester.is_host:
                raise NotHost
            if room.status != RoomStatus.WAITING:
                raise AlreadyStarted
            if room.player_count != room.config.total_players:
                raise IncompletePlayers
            self._assigner.assign(room)
            room.status = RoomStatus.STARTED
            room.started_at = format_timestamp(self._clock())
            room.round_seed = secrets.token_hex(ROUND_SEED_BYTES)
            room.touch()
            result = RoundStarted(message=START_MESSAGE, started_at=room.started_at, seed=room.round_seed)
        logger.info("round started", room_code=room.code, round_seed=result.seed)
        return result

    def reset(self, room: Room, requester: Player) -> RoundReset:
        """Return the room to WAITING. Players and their tokens are kept."""
        with room.lock:
            _require_open(room)
            if not requester.is_host:
                raise NotHost
            previous = room.status
            for player in room.players:
                player.role = None
            room.status = RoomStatus.WAITING
            room.round_seed = None
            room.started_at = None
            room.touch()
        logger.info("round reset", room_code=room.code, previous_status=previous)
        return RoundReset(message=RESET_MESSAGE)

    def view(self, room: Room, requester_id: str | None) -> RoomView:
        with room.lock:
            _require_open(room)
            return build_room_view(room, requester_id)

    def my_role(self, room: Room, requester: Player) -> RoleReveal:
        with room.lock:
            _require_open(room)
            if room.status != RoomStatus.STARTED:
                raise NotStarted
            role = requester.role
        if role is None:
            logger.error("started room has player without role", room_code=room.code, player_id=requester.id)
            raise RoleMissing
        return RoleReveal(role=role)
