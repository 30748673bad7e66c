"""Server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from mafia.rooms.reaper import DEFAULT_REAP_INTERVAL_SECONDS
from mafia.rooms.registry import DEFAULT_CODE_ATTEMPTS
from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class MafiaServerSettings(BaseSettings):
    model_config = {"env_prefix": "MAFIA_"}

    log_dir: str = "backend/logs/server"
    cors_origins: list[str] = []
    static_dir: str | None = None  # serve a client build from here when set
    room_code_attempts: int = Field(default=DEFAULT_CODE_ATTEMPTS, ge=1)
    room_ttl_seconds: int = Field(default=0, ge=0)  # 0 keeps rooms until shutdown
    reaper_interval_seconds: int = Field(default=DEFAULT_REAP_INTERVAL_SECONDS, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v, allow_empty=True)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings)
