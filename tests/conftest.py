"""
Shared pytest fixtures for Liftwin tests.

Sets environment variables BEFORE any liftwin module is imported so that
pydantic-settings and the SQLAlchemy engine use safe test values.
"""
from __future__ import annotations

import os
from typing import AsyncGenerator, Dict, Optional

# ── Set env vars before any liftwin import ────────────────────────────────────
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_PREFIX", "liftwin")
os.environ.setdefault("DEFAULT_THEME", "light")

# ── Third-party ───────────────────────────────────────────────────────────────
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# ── Liftwin imports (safe after env vars are set) ─────────────────────────────
from liftwin.models.base import create_tables
from liftwin.schemas import Athlete, EventState
from liftwin.services.storage_service import SqlKeyValueStore


# ── Store fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
async def kv_store() -> AsyncGenerator[SqlKeyValueStore, None]:
    """
    Yield a SqlKeyValueStore backed by an isolated in-memory SQLite database.
    StaticPool keeps every session on the same connection (and so the same
    in-memory database); the engine is always disposed on teardown.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    await create_tables(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield SqlKeyValueStore(factory)
    finally:
        await engine.dispose()


class _MemoryStore:
    """
    Dict-backed KeyValueStore with switchable failures.

    ``fail_writes`` simulates a full disk / exceeded quota,
    ``fail_reads`` an unreadable backend.
    """

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.fail_reads  = False
        self.fail_writes = False

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("backend unavailable")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.data[key] = value

    async def delete(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.data.pop(key, None)


@pytest.fixture
def memory_store() -> _MemoryStore:
    return _MemoryStore()


# ── Snapshot helpers ──────────────────────────────────────────────────────────

def _athlete(
    athlete_id: str,
    name: str = "",
    sex: str = "M",
    bodyweight: Optional[float] = 85.0,
    squat: Optional[float] = None,
    bench: Optional[float] = None,
    deadlift: Optional[float] = None,
    run_time: str = "",
    age: Optional[float] = None,
) -> Athlete:
    return Athlete(
        id=athlete_id,
        name=name or athlete_id.upper(),
        sex=sex,
        age=age,
        bodyweight=bodyweight,
        squat=squat,
        bench=bench,
        deadlift=deadlift,
        run_time=run_time,
    )


@pytest.fixture
def make_athlete():
    """Factory fixture — returns a callable that builds an Athlete."""
    return _athlete


@pytest.fixture
def sample_state() -> EventState:
    """Small meet: two lifters, one runner-only entrant, one unscored sex."""
    return EventState(
        title="October Meet",
        points_preset="F1",
        athletes=[
            _athlete("a", "Alex",  "M", 85.0, 180, 120, 220, "22:30"),
            _athlete("b", "Blake", "F", 62.0, 110,  60, 140, "24:10"),
            _athlete("c", "Casey", "M", 90.0, None, None, None, "19:45"),
            _athlete("d", "Drew",  "X", 70.0, 150, 100, 190, ""),
        ],
    )
