"""Centralised configuration loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings — values are sourced from env vars or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    site_title: str = "Moves"

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(
        default=f"sqlite:///{_PROJECT_ROOT / 'data' / 'movewiki.db'}",
        description="SQLAlchemy connection URL for the moves / listings store",
    )

    # ── Listing pages ────────────────────────────────────────────────────
    page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=50, ge=1)
    max_page: int = Field(default=10_000, ge=1)
    feed_size: int = Field(default=20, ge=1)

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False


settings = Settings()
