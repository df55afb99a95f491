from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    project_name: str = "Quiz Prep Service"
    api_prefix: str = "/api/v1"
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("QUIZPREP_MONGO_URI", "MONGO_URI"),
    )
    mongo_db_name: str = Field(
        default="quizprep",
        validation_alias=AliasChoices("QUIZPREP_MONGO_DB_NAME", "MONGO_DB_NAME"),
    )
    store_backend: Literal["mongo", "memory"] = Field(
        default="mongo",
        description="Document store used by the service ('memory' keeps everything in-process)",
        validation_alias=AliasChoices("QUIZPREP_STORE_BACKEND", "STORE_BACKEND"),
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Comma-separated origins allowed for CORS (use '*' for all)",
        validation_alias=AliasChoices("QUIZPREP_CORS_ORIGINS", "CORS_ORIGINS"),
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("QUIZPREP_LOG_LEVEL", "LOG_LEVEL"))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        """Allow comma-separated or JSON array strings for CORS origins."""

        if isinstance(value, str):
            if value.strip() == "":
                return []
            # If provided as JSON array, let pydantic parse it
            if value.strip().startswith("["):
                return value
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
