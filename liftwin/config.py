"""
Central configuration via pydantic-settings.
Values are read from environment variables / .env file.
"""
from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ───────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./liftwin.db"

    # Namespace for every key written to the key-value store
    STORAGE_PREFIX: str = "liftwin"

    @property
    def async_database_url(self) -> str:
        """
        Hosted PostgreSQL usually hands out 'postgresql://...' URLs.
        SQLAlchemy async requires 'postgresql+asyncpg://...'
        This property fixes the prefix automatically.
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://") or url.startswith("postgres://"):
            return url.replace("://", "+asyncpg://", 1)
        return url

    # ── Preferences ───────────────────────────────────────────────────────────
    # Used when no theme has been stored yet
    DEFAULT_THEME: Literal["light", "dark"] = "light"

    # ── Events ────────────────────────────────────────────────────────────────
    DEFAULT_EVENT_TITLE: str = "Monthly Meet"
    AUTOSAVE_DELAY_MS: int = 350

    # ── Sharing ───────────────────────────────────────────────────────────────
    SHARE_BASE_URL: str = "http://localhost:5173/"

    # ─────────────────────────────────────────────────────────────────────────

    @property
    def autosave_delay(self) -> float:
        """Debounce delay in seconds."""
        return max(self.AUTOSAVE_DELAY_MS, 0) / 1000.0


settings = Settings()
