"""Room operation failures.

Every failure a room operation can produce is a RoomError subclass. The five
category classes group them by what the caller can do about it; the leaf
classes carry a stable ``kind`` string and a default message shown to players.
"""

from __future__ import annotations


class RoomError(Exception):
    """Base for all room operation failures."""

    kind: str = "room_error"
    default_message: str = "Room operation failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RoomError):
    """Malformed or out-of-range input. Not retryable until corrected."""


class ConflictError(RoomError):
    """Operation not legal in the room's current state."""


class AuthError(RoomError):
    """Missing or insufficient credentials. Never retryable with the same token."""


class NotFoundError(RoomError):
    """Unknown room code."""


class InternalError(RoomError):
    """System-level fault. Not user-correctable."""


# -- validation --


class InvalidName(ValidationError):
    kind = "invalid_name"
    default_message = "Player name is required."


class InvalidConfig(ValidationError):
    kind = "invalid_config"
    default_message = "Invalid room configuration."


class InvalidInput(ValidationError):
    kind = "invalid_input"
    default_message = "Invalid request body."


# -- conflict --


class NameTaken(ConflictError):
    kind = "name_taken"
    default_message = "Name already taken in this room."


class RoomFull(ConflictError):
    kind = "room_full"
    default_message = "Room is full."


class GameInProgress(ConflictError):
    kind = "game_in_progress"
    default_message = "Game already started. No new joins allowed."


class AlreadyStarted(ConflictError):
    kind = "already_started"
    default_message = "Game already started. Reset required."


class IncompletePlayers(ConflictError):
    kind = "incomplete_players"
    default_message = "Cannot start until all expected players join."


class NotStarted(ConflictError):
    kind = "not_started"
    default_message = "Game has not started yet."


# -- auth --


class InvalidSession(AuthError):
    kind = "invalid_session"
    default_message = "Invalid session for this room."


class MissingSession(InvalidSession):
    """No bearer token at all, as opposed to one that matches nobody."""

    default_message = "Missing session token."


class NotHost(AuthError):
    kind = "not_host"
    default_message = "Only host can perform this action."


# -- not found --


class RoomNotFound(NotFoundError):
    kind = "not_found"
    default_message = "Room not found."


# -- internal --


class CapacityExhausted(InternalError):
    kind = "capacity_exhausted"
    default_message = "Unable to generate unique room code."


class RoleCountMismatch(InternalError):
    kind = "role_count_mismatch"
    default_message = "Role count does not match player count."


class RoleMissing(InternalError):
    kind = "role_missing"
    default_message = "Role not found for player."
