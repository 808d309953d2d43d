"""Centralized configuration for docs-lexicon using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``LEXICON_*`` environment variables.

    Scoring constants are deliberately absent: k1, b and the prefix and title
    weights are fixed so that scores stay comparable across deployments.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEXICON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    cache_path: Path = Field(
        default=Path("cache/docs_index.json"), description="Cache file the engine is saved to and loaded from"
    )

    default_top_k: int = Field(default=5, ge=1, description="Results returned when the caller gives no limit")
    excerpt_max_chars: int = Field(default=300, ge=50, description="Maximum excerpt length in characters")

    engine_name: str = Field(default="default", min_length=1, description="Label attached to metrics and logs")

    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Logging level"
    )
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("log_level", mode="before")
    @classmethod
    def _lowercase_level(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    def resolved_cache_path(self) -> Path:
        """Cache path with ``~`` expanded."""
        return self.cache_path.expanduser()
