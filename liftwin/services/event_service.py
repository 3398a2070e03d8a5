"""
Event service — event lifecycle, index bookkeeping and import reconciliation.

All functions receive a KeyValueStore parameter and are intentionally pure
async functions (no class coupling) for easy unit testing.

Reconciliation policy
---------------------
An imported snapshot is matched by event id:
  - unknown id            → adopted as-is
  - identical snapshot    → already synced, local copy returned
  - different snapshot    → forked under a brand-new id; the local event
                            is left untouched
Conflicting copies always end up as two events, never overwritten or merged.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from liftwin.config import settings
from liftwin.schemas import EID, EventMeta, EventState
from liftwin.services.export_service import read_event_json
from liftwin.services.share_service import (
    build_share_link,
    decode_share_link,
    extract_event_id_from_url,
)
from liftwin.services.storage_service import (
    KeyValueStore,
    delete_event as remove_event_snapshot,
    get_last_open,
    load_event,
    load_index,
    save_event,
    save_index,
    set_last_open,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportOutcome:
    """Where an incoming snapshot ended up."""
    eid:    EID
    state:  EventState
    action: Literal["adopted", "unchanged", "forked"]


@dataclass
class BootResult:
    """What the app should show after start-up."""
    mode:     Literal["manager", "event"]
    eid:      Optional[EID] = None
    state:    Optional[EventState] = None
    imported: Optional[ImportOutcome] = None


def new_eid() -> EID:
    """Generate a random UUID4 event id."""
    return str(uuid.uuid4())


def now_ms() -> int:
    return int(time.time() * 1000)


def default_state(title: Optional[str] = None) -> EventState:
    """Fresh snapshot with an empty roster."""
    clean = (title or "").strip()
    return EventState(title=clean or settings.DEFAULT_EVENT_TITLE)


# ── Index ─────────────────────────────────────────────────────────────────────

async def _add_to_index(store: KeyValueStore, eid: EID, title: str) -> EventMeta:
    """Prepend a fresh entry, replacing any stale entry for the same id."""
    ts   = now_ms()
    meta = EventMeta(eid=eid, title=title, created_at=ts, updated_at=ts)
    entries = [m for m in await load_index(store) if m.eid != eid]
    await save_index(store, [meta] + entries)
    return meta


async def touch_index(
    store: KeyValueStore,
    eid: EID,
    state: EventState,
    now: Optional[int] = None,
) -> EventMeta:
    """
    Refresh the index entry after a save: new title, later ``updated_at``.
    ``updated_at`` never moves backwards, even if the clock does.
    """
    ts = now_ms() if now is None else now
    entries = await load_index(store)
    for i, meta in enumerate(entries):
        if meta.eid == eid:
            meta = meta.model_copy(update={
                "title":      state.title,
                "updated_at": max(meta.updated_at, ts),
            })
            entries[i] = meta
            break
    else:
        meta = EventMeta(eid=eid, title=state.title, created_at=ts, updated_at=ts)
        entries.append(meta)
    await save_index(store, entries)
    return meta


async def list_events(store: KeyValueStore, query: str = "") -> List[EventMeta]:
    """Index entries, most recently updated first, optionally filtered by title."""
    q = query.strip().lower()
    entries = sorted(await load_index(store), key=lambda m: m.updated_at, reverse=True)
    if q:
        entries = [m for m in entries if q in m.title.lower()]
    return entries


# ── Lifecycle ─────────────────────────────────────────────────────────────────

async def create_event(
    store: KeyValueStore,
    title: Optional[str] = None,
) -> Tuple[EID, EventState]:
    """Create, persist and index a new empty event. Returns (eid, snapshot)."""
    eid   = new_eid()
    state = default_state(title)
    await save_event(store, eid, state)
    await _add_to_index(store, eid, state.title)
    logger.info("Created event %s (%s)", eid, state.title)
    return eid, state


async def open_event(store: KeyValueStore, eid: EID) -> EventState:
    """Load an event for editing and remember it for the next start-up."""
    state = await load_event(store, eid)
    if state is None:
        state = default_state()
    await set_last_open(store, eid)
    return state


async def delete_event(store: KeyValueStore, eid: EID) -> bool:
    """
    Remove an event snapshot and its index entry.
    Returns False when the id is not in the index.
    """
    entries = await load_index(store)
    remaining = [m for m in entries if m.eid != eid]
    if len(remaining) == len(entries):
        return False

    await remove_event_snapshot(store, eid)
    await save_index(store, remaining)
    if await get_last_open(store) == eid:
        await set_last_open(store, None)
    logger.info("Deleted event %s", eid)
    return True


# ── Import / reconciliation ───────────────────────────────────────────────────

async def resolve_incoming(
    store: KeyValueStore,
    eid: Optional[EID],
    state: EventState,
) -> ImportOutcome:
    """Store an incoming snapshot according to the fork-on-conflict policy."""
    incoming_eid = eid or new_eid()

    existing = await load_event(store, incoming_eid)
    if existing is None:
        await save_event(store, incoming_eid, state)
        await _add_to_index(store, incoming_eid, state.title)
        logger.info("Imported event %s", incoming_eid)
        return ImportOutcome(eid=incoming_eid, state=state, action="adopted")

    if existing == state:
        return ImportOutcome(eid=incoming_eid, state=existing, action="unchanged")

    forked_eid = new_eid()
    await save_event(store, forked_eid, state)
    await _add_to_index(store, forked_eid, state.title)
    logger.info("Event %s diverged locally, imported copy forked as %s", incoming_eid, forked_eid)
    return ImportOutcome(eid=forked_eid, state=state, action="forked")


async def import_from_url(store: KeyValueStore, url: Optional[str]) -> Optional[ImportOutcome]:
    """Decode a ``#k=`` share link and reconcile it; None if it is not a valid link."""
    payload = decode_share_link(url)
    if payload is None:
        return None
    return await resolve_incoming(store, payload.eid, payload.state)


async def import_from_json(store: KeyValueStore, text: str) -> Optional[ImportOutcome]:
    """Reconcile a JSON export file the same way as a share link."""
    parsed = read_event_json(text)
    if parsed is None:
        return None
    eid, state = parsed
    return await resolve_incoming(store, eid, state)


async def boot(store: KeyValueStore, url: Optional[str] = None) -> BootResult:
    """
    Decide what to open on start-up:
      1. a share link in ``url`` is imported and opened
      2. a legacy ``#event=<id>`` fragment opens that event if stored locally
      3. otherwise the last opened event, if it still exists
      4. otherwise the event manager
    """
    imported = await import_from_url(store, url)
    if imported is not None:
        await set_last_open(store, imported.eid)
        return BootResult(mode="event", eid=imported.eid, state=imported.state, imported=imported)

    for candidate in (extract_event_id_from_url(url), await get_last_open(store)):
        if not candidate:
            continue
        state = await load_event(store, candidate)
        if state is not None:
            await set_last_open(store, candidate)
            return BootResult(mode="event", eid=candidate, state=state)

    return BootResult(mode="manager")


async def share_link_for(
    store: KeyValueStore,
    eid: EID,
    base_url: Optional[str] = None,
) -> Optional[str]:
    """Share link for a stored event, None if it cannot be loaded."""
    state = await load_event(store, eid)
    if state is None:
        logger.warning("Cannot build share link, event %s not found", eid)
        return None
    return build_share_link(base_url or settings.SHARE_BASE_URL, eid, state)


# ── Formatting helpers ────────────────────────────────────────────────────────

def format_ago(ts: int, now: Optional[int] = None) -> str:
    """Relative age of an epoch-ms timestamp: "5s ago", "3m ago", "2h ago", "4d ago"."""
    current = now_ms() if now is None else now
    s = max(1, (current - ts) // 1000)
    if s < 60:
        return f"{s}s ago"
    m = s // 60
    if m < 60:
        return f"{m}m ago"
    h = m // 60
    if h < 24:
        return f"{h}h ago"
    return f"{h // 24}d ago"
