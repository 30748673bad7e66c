"""Optional idle-room expiry.

Rooms otherwise live until the process exits. When enabled, the reaper drops
rooms nobody has touched for ``ttl_seconds``. An expired room is marked
closed and removed from the registry; its status and players are left alone.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from mafia.rooms.registry import RoomRegistry

DEFAULT_REAP_INTERVAL_SECONDS = 30

logger = structlog.get_logger()


class RoomReaper:
    def __init__(
        self,
        registry: RoomRegistry,
        ttl_seconds: float,
        interval_seconds: float = DEFAULT_REAP_INTERVAL_SECONDS,
    ) -> None:
        self._registry = registry
        self._ttl_seconds = ttl_seconds
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    def reap_expired(self, now: float | None = None) -> list[str]:
        """Remove idle rooms. Returns the removed codes."""
        if now is None:
            now = time.monotonic()
        expired: list[str] = []
        for room in self._registry.rooms():
            # Close and remove under the room lock so no operation that already
            # looked the room up can still succeed on it.
            with room.lock:
                idle = now - room.last_active_at
                if idle <= self._ttl_seconds:
                    continue
                room.closed = True
                self._registry.remove(room.code)
            expired.append(room.code)
            logger.info("room expired", room_code=room.code, idle_seconds=round(idle))
        return expired

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._reaper_loop())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _reaper_loop(self) -> None:  # pragma: no cover - long-running background loop
        while True:
            await asyncio.sleep(self._interval_seconds)
            self.reap_expired()
