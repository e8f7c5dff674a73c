"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .content_types import CONTENT_TYPE_KEYS, CONTENT_TYPES, ContentTypeDefinition


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="PopContent", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./popcontent.db", alias="DATABASE_URL"
    )
    page_size: int = Field(default=50, alias="PAGE_SIZE", ge=1, le=500)

    content_types: tuple[str, ...] = Field(
        default=CONTENT_TYPE_KEYS,
        alias="CONTENT_TYPES",
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("content_types", mode="before")
    @classmethod
    def _parse_content_types(cls, value: object) -> tuple[str, ...]:
        """Normalise content type selections from environment values."""

        if value is None:
            return CONTENT_TYPE_KEYS
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError("CONTENT_TYPES must be a string or iterable of strings")

        cleaned: list[str] = []
        for entry in raw_values:
            key = entry.lower()
            if not key:
                continue
            if key not in CONTENT_TYPE_KEYS:
                raise ValueError("Unknown content types configured")
            if key not in cleaned:
                cleaned.append(key)
        if not cleaned:
            return CONTENT_TYPE_KEYS
        return tuple(cleaned)

    @property
    def content_type_definitions(self) -> tuple[ContentTypeDefinition, ...]:
        """Return the definitions for the enabled content types, in order."""

        definition_map = {definition.key: definition for definition in CONTENT_TYPES}
        return tuple(definition_map[key] for key in self.content_types)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
