"""
Event store — keyed persistence of event snapshots, the event index and
user preferences.

Storage layout (logical key → value)
-------------------------------------
  <prefix>:index          → JSON list of EventMeta
  <prefix>:event:<eid>    → JSON EventState
  <prefix>:theme          → "light" | "dark"
  <prefix>:lastOpen       → event id (key absent when none)

Persistence is best-effort. Write failures are logged and swallowed, read
failures (missing or corrupt data) return an empty default, so callers never
have to handle storage errors.

All event-store functions receive a ``KeyValueStore`` as their first
parameter, the same way the rest of the services receive their backend.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from liftwin.config import settings
from liftwin.models.models import KeyValue, Theme
from liftwin.schemas import EID, EventIndex, EventMeta, EventState

logger = logging.getLogger(__name__)


# ─────────────────────────── Backends ────────────────────────────────────────

class KeyValueStore(Protocol):
    """Minimal async string-keyed store the event store is written against."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class SqlKeyValueStore:
    """
    KeyValueStore backed by the ``kv_store`` table.

    Every call opens its own short session and commits immediately, so a
    failed write never leaves a half-finished transaction behind.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(KeyValue.value).where(KeyValue.key == key)
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            row = await session.get(KeyValue, key)
            if row is None:
                session.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(KeyValue).where(KeyValue.key == key))
            await session.commit()


# ─────────────────────────── Keys ────────────────────────────────────────────

def index_key() -> str:
    return f"{settings.STORAGE_PREFIX}:index"


def event_key(eid: EID) -> str:
    return f"{settings.STORAGE_PREFIX}:event:{eid}"


def theme_key() -> str:
    return f"{settings.STORAGE_PREFIX}:theme"


def last_open_key() -> str:
    return f"{settings.STORAGE_PREFIX}:lastOpen"


# ─────────────────────────── Safe primitives ─────────────────────────────────

async def _read(store: KeyValueStore, key: str) -> Optional[str]:
    try:
        return await store.get(key)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Storage read failed for %s: %s", key, exc)
        return None


async def _write(store: KeyValueStore, key: str, value: str) -> bool:
    try:
        await store.set(key, value)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Storage write failed for %s: %s", key, exc)
        return False
    return True


async def _remove(store: KeyValueStore, key: str) -> bool:
    try:
        await store.delete(key)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Storage delete failed for %s: %s", key, exc)
        return False
    return True


# ─────────────────────────── Index ───────────────────────────────────────────

async def load_index(store: KeyValueStore) -> List[EventMeta]:
    """All known events; corrupt or missing data yields an empty list."""
    raw = await _read(store, index_key())
    if not raw:
        return []
    try:
        return EventIndex.validate_json(raw)
    except ValidationError as exc:
        logger.warning("Event index is corrupt, ignoring it: %s", exc.error_count())
        return []


async def save_index(store: KeyValueStore, entries: List[EventMeta]) -> bool:
    raw = EventIndex.dump_json(entries, by_alias=True).decode("utf-8")
    return await _write(store, index_key(), raw)


# ─────────────────────────── Events ──────────────────────────────────────────

async def load_event(store: KeyValueStore, eid: EID) -> Optional[EventState]:
    """Snapshot stored under ``eid``, or None if missing / unreadable."""
    raw = await _read(store, event_key(eid))
    if not raw:
        return None
    try:
        return EventState.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning("Event %s is corrupt, ignoring it: %s", eid, exc.error_count())
        return None


async def save_event(store: KeyValueStore, eid: EID, state: EventState) -> bool:
    return await _write(store, event_key(eid), state.to_json())


async def delete_event(store: KeyValueStore, eid: EID) -> bool:
    return await _remove(store, event_key(eid))


# ─────────────────────────── Last open ───────────────────────────────────────

async def get_last_open(store: KeyValueStore) -> Optional[EID]:
    return await _read(store, last_open_key()) or None


async def set_last_open(store: KeyValueStore, eid: Optional[EID]) -> bool:
    if eid:
        return await _write(store, last_open_key(), eid)
    return await _remove(store, last_open_key())


# ─────────────────────────── Theme ───────────────────────────────────────────

async def get_theme(store: KeyValueStore) -> str:
    """Stored theme, or the configured platform default when unset."""
    saved = await _read(store, theme_key())
    if saved in Theme.ALL:
        return saved
    return settings.DEFAULT_THEME


async def set_theme(store: KeyValueStore, theme: str) -> bool:
    if theme not in Theme.ALL:
        raise ValueError(f"theme must be one of {Theme.ALL}, got {theme!r}")
    return await _write(store, theme_key(), theme)
