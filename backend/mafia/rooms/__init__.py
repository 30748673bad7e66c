"""Room lifecycle, session resolution and secret role assignment."""

from mafia.rooms.errors import (
    AuthError,
    ConflictError,
    InternalError,
    NotFoundError,
    RoomError,
    ValidationError,
)
from mafia.rooms.lifecycle import RoomLifecycle
from mafia.rooms.models import Player, Role, Room, RoomConfig, RoomStatus
from mafia.rooms.reaper import RoomReaper
from mafia.rooms.registry import RoomRegistry
from mafia.rooms.roles import RoleAssigner
from mafia.rooms.service import RoomService
from mafia.rooms.sessions import Session, SessionAuthenticator

__all__ = [
    "AuthError",
    "ConflictError",
    "InternalError",
    "NotFoundError",
    "Player",
    "Role",
    "RoleAssigner",
    "Room",
    "RoomConfig",
    "RoomError",
    "RoomLifecycle",
    "RoomReaper",
    "RoomRegistry",
    "RoomService",
    "RoomStatus",
    "Session",
    "SessionAuthenticator",
    "ValidationError",
]
