"""Shared fixtures for room tests."""

from __future__ import annotations

import pytest

from mafia.rooms import RoomRegistry, RoomService
from mafia.rooms.views import SessionGrant

SCENARIO_NAMES = ["Bo", "Cy", "Dee", "Evy"]


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture
def service(registry) -> RoomService:
    return RoomService(registry)


@pytest.fixture
def host_grant(service) -> SessionGrant:
    """Ana hosts a 5-player room with 1 Mafia and 1 Angel."""
    return service.create_room("Ana", 5, 1, 1)


@pytest.fixture
def full_room(service, host_grant) -> list[SessionGrant]:
    """Grants for all five players of the scenario room, host first."""
    return [host_grant, *(service.join_room(host_grant.room_code, name) for name in SCENARIO_NAMES)]
