"""Room and player entities."""

from __future__ import annotations

import hmac
import secrets
import threading
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, StrictInt, model_validator
from pydantic import ValidationError as PydanticValidationError

from mafia.rooms.errors import InvalidConfig

MIN_TOTAL_PLAYERS = 3
MAX_NAME_LENGTH = 40
SESSION_TOKEN_BYTES = 24
PLAYER_ID_BYTES = 8


class RoomStatus(StrEnum):
    WAITING = "waiting"
    STARTED = "started"


class Role(StrEnum):
    MAFIA = "Mafia"
    ANGEL = "Angel"
    CITIZEN = "Citizen"


class RoomConfig(BaseModel, frozen=True):
    """Role counts fixed at room creation. Checked once, never re-checked."""

    total_players: StrictInt
    mafia_count: StrictInt
    angel_count: StrictInt

    @model_validator(mode="after")
    def _validate_counts(self) -> Self:
        if self.total_players < MIN_TOTAL_PLAYERS:
            raise ValueError(f"Minimum total players is {MIN_TOTAL_PLAYERS}.")
        if self.mafia_count < 1:
            raise ValueError("At least 1 Mafia is required.")
        if self.angel_count < 0:
            raise ValueError("Angel count cannot be negative.")
        if self.mafia_count + self.angel_count >= self.total_players:
            raise ValueError("Mafia + Angels must be less than total players.")
        return self

    @property
    def citizen_count(self) -> int:
        return self.total_players - self.mafia_count - self.angel_count


def parse_config(total_players: Any, mafia_count: Any, angel_count: Any) -> RoomConfig:  # noqa: ANN401
    """Build a RoomConfig from untrusted values, raising InvalidConfig with a player-facing message."""
    try:
        return RoomConfig(total_players=total_players, mafia_count=mafia_count, angel_count=angel_count)
    except PydanticValidationError as e:
        first = e.errors()[0]
        if first["type"] == "value_error":
            raise InvalidConfig(str(first["ctx"]["error"])) from e
        raise InvalidConfig("All counts must be whole numbers.") from e


def clean_name(raw: Any) -> str | None:  # noqa: ANN401
    """Trim and cap a display name. Returns None if nothing usable is left."""
    if not isinstance(raw, str):
        return None
    trimmed = raw.strip()[:MAX_NAME_LENGTH]
    return trimmed or None


def new_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


def new_player_id() -> str:
    return secrets.token_hex(PLAYER_ID_BYTES)


@dataclass
class Player:
    """Participant in exactly one room. The session token is its only credential."""

    id: str
    name: str
    session_token: str = field(repr=False)
    is_host: bool = False
    role: Role | None = None

    @classmethod
    def create(cls, name: str, *, is_host: bool = False) -> Player:
        return cls(id=new_player_id(), name=name, session_token=new_session_token(), is_host=is_host)

    def holds_token(self, token: str) -> bool:
        return hmac.compare_digest(self.session_token.encode(), token.encode())


@dataclass
class Room:
    """One game instance.

    ``players`` is in join order and its first entry is the host. ``round_seed``
    and ``started_at`` are only set while the room is STARTED. All reads and
    writes of mutable fields happen under ``lock``. A ``closed`` room has been
    dropped from the registry and accepts no further operations.
    """

    code: str
    config: RoomConfig
    status: RoomStatus = RoomStatus.WAITING
    players: list[Player] = field(default_factory=list)
    round_seed: str | None = None
    started_at: str | None = None
    created_at: float = field(default_factory=time.monotonic)
    last_active_at: float = field(default_factory=time.monotonic)
    closed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.config.total_players

    @property
    def can_start(self) -> bool:
        return self.status == RoomStatus.WAITING and self.player_count == self.config.total_players

    @property
    def host(self) -> Player:
        return self.players[0]

    def has_name(self, name: str) -> bool:
        folded = name.casefold()
        return any(p.name.casefold() == folded for p in self.players)

    def player_with_token(self, token: str) -> Player | None:
        # Scan every player so timing does not reveal which one matched.
        found = None
        for player in self.players:
            if player.holds_token(token):
                found = player
        return found

    def touch(self) -> None:
        self.last_active_at = time.monotonic()
