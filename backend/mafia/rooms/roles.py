"""Secret role assignment.

Roles are a fixed multiset built from the room config, shuffled with
Fisher-Yates and zipped onto players in join order. Each swap index comes
from ``secrets.randbelow`` so every arrangement of the multiset is equally
likely and no modulo bias creeps in. The round seed is not an input: knowing
it tells a player nothing about who holds which role.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING

import structlog

from mafia.rooms.errors import RoleCountMismatch
from mafia.rooms.models import Role

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from mafia.rooms.models import Room, RoomConfig

logger = structlog.get_logger()


def build_roles(config: RoomConfig) -> list[Role]:
    return (
        [Role.MAFIA] * config.mafia_count
        + [Role.ANGEL] * config.angel_count
        + [Role.CITIZEN] * config.citizen_count
    )


class RoleAssigner:
    """Assign a uniformly random arrangement of the configured roles.

    ``randbelow(n)`` must return an integer uniformly from ``[0, n)``. It
    defaults to the OS CSPRNG; tests inject a seeded generator.
    """

    def __init__(self, randbelow: Callable[[int], int] = secrets.randbelow) -> None:
        self._randbelow = randbelow

    def shuffle(self, values: Sequence[Role]) -> list[Role]:
        arr = list(values)
        for i in range(len(arr) - 1, 0, -1):
            j = self._randbelow(i + 1)
            arr[i], arr[j] = arr[j], arr[i]
        return arr

    def assign(self, room: Room) -> None:
        """Give every player in ``room`` exactly one role. Caller holds the room lock."""
        roles = self.shuffle(build_roles(room.config))
        if len(roles) != room.player_count:
            logger.error(
                "role count mismatch",
                room_code=room.code,
                roles=len(roles),
                players=room.player_count,
            )
            raise RoleCountMismatch(
                f"Role count {len(roles)} does not match player count {room.player_count}.",
            )
        for player, role in zip(room.players, roles, strict=True):
            player.role = role
