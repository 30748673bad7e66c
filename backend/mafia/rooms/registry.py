"""Room registry: the code -> Room mapping for one server process."""

from __future__ import annotations

import secrets
import threading
from typing import TYPE_CHECKING

import structlog

from mafia.rooms.errors import CapacityExhausted, RoomNotFound
from mafia.rooms.models import Player, Room

if TYPE_CHECKING:
    from mafia.rooms.models import RoomConfig

# No 0/O/1/I: codes are read aloud and typed by hand.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6
DEFAULT_CODE_ATTEMPTS = 50

logger = structlog.get_logger()


def generate_code() -> str:
    """Return a 6-character room code, each character drawn from the OS CSPRNG."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


class RoomRegistry:
    """Holds every live room.

    Constructed once at startup and passed to whatever needs it. The registry
    lock guards only the mapping itself; room state is guarded by each room's
    own lock, so operations on different rooms never contend.
    """

    def __init__(self, code_attempts: int = DEFAULT_CODE_ATTEMPTS) -> None:
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()
        self._code_attempts = code_attempts

    def __len__(self) -> int:
        return len(self._rooms)

    def generate_code(self) -> str:
        return generate_code()

    def allocate(self, config: RoomConfig, host_name: str) -> tuple[Room, Player]:
        """Create a WAITING room with ``host_name`` as its only player.

        ``host_name`` must already be cleaned. Returns the room and the host,
        whose session token is the one to hand back to the caller.
        """
        with self._lock:
            code = self._unused_code()
            host = Player.create(host_name, is_host=True)
            room = Room(code=code, config=config, players=[host])
            self._rooms[code] = room
        logger.info("room created", room_code=code, total_players=config.total_players)
        return room, host

    def _unused_code(self) -> str:
        for _ in range(self._code_attempts):
            code = self.generate_code()
            if code not in self._rooms:
                return code
        logger.critical("room code space exhausted", attempts=self._code_attempts, live_rooms=len(self._rooms))
        raise CapacityExhausted

    def lookup(self, code: str) -> Room:
        room = self._rooms.get(normalize_code(code))
        if room is None:
            raise RoomNotFound
        return room

    def remove(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.pop(normalize_code(code), None)

    def rooms(self) -> list[Room]:
        """Snapshot of live rooms."""
        with self._lock:
            return list(self._rooms.values())
