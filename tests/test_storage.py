"""
Integration tests — Event store (storage_service.py).

Each test receives either a fresh in-memory SQLite store (``kv_store``) or
a dict-backed store whose reads / writes can be made to fail
(``memory_store``). No files are touched.

Coverage:
  - index / event / last-open / theme round-trips through SQLite
  - corrupt values degrade to empty defaults
  - backend failures are swallowed
"""
from __future__ import annotations

import pytest

from liftwin.schemas import EventMeta, EventState
from liftwin.services.storage_service import (
    delete_event,
    event_key,
    get_last_open,
    get_theme,
    index_key,
    load_event,
    load_index,
    save_event,
    save_index,
    set_last_open,
    set_theme,
    theme_key,
)


# ─────────────────────────── Keys ────────────────────────────────────────────

def test_key_layout() -> None:
    assert index_key() == "liftwin:index"
    assert event_key("abc") == "liftwin:event:abc"
    assert theme_key() == "liftwin:theme"


# ─────────────────────────── Index ───────────────────────────────────────────

async def test_index_empty_by_default(kv_store) -> None:
    assert await load_index(kv_store) == []


async def test_index_round_trip(kv_store) -> None:
    entries = [
        EventMeta(eid="e1", title="January", created_at=1, updated_at=5),
        EventMeta(eid="e2", title="February", created_at=2, updated_at=3),
    ]
    assert await save_index(kv_store, entries) is True
    assert await load_index(kv_store) == entries


async def test_index_serialized_with_camel_case_keys(memory_store) -> None:
    await save_index(memory_store, [EventMeta(eid="e1", title="T", created_at=1, updated_at=2)])
    raw = memory_store.data[index_key()]
    assert '"createdAt":1' in raw
    assert '"updatedAt":2' in raw


@pytest.mark.parametrize("raw", ["not json", '{"eid": "x"}', '[{"title": "no id"}]'])
async def test_corrupt_index_yields_empty_list(memory_store, raw: str) -> None:
    memory_store.data[index_key()] = raw
    assert await load_index(memory_store) == []


# ─────────────────────────── Events ──────────────────────────────────────────

async def test_event_round_trip(kv_store, sample_state: EventState) -> None:
    await save_event(kv_store, "e1", sample_state)
    assert await load_event(kv_store, "e1") == sample_state


async def test_event_overwrite(kv_store, sample_state: EventState) -> None:
    await save_event(kv_store, "e1", sample_state)
    renamed = sample_state.model_copy(update={"title": "Renamed"})
    await save_event(kv_store, "e1", renamed)
    loaded = await load_event(kv_store, "e1")
    assert loaded is not None and loaded.title == "Renamed"


async def test_missing_event_is_none(kv_store) -> None:
    assert await load_event(kv_store, "nope") is None


async def test_delete_event(kv_store, sample_state: EventState) -> None:
    await save_event(kv_store, "e1", sample_state)
    await delete_event(kv_store, "e1")
    assert await load_event(kv_store, "e1") is None


async def test_delete_missing_event_is_harmless(kv_store) -> None:
    assert await delete_event(kv_store, "nope") is True


@pytest.mark.parametrize("raw", [
    "{{{",
    '{"athletes": [{"name": "no id"}]}',
    '{"athletes": [{"id": "a"}, {"id": "a"}]}',      # duplicate ids
    '{"athletes": [{"id": "a", "squat": "NaN"}]}',   # non-finite number
])
async def test_corrupt_event_is_none(memory_store, raw: str) -> None:
    memory_store.data[event_key("e1")] = raw
    assert await load_event(memory_store, "e1") is None


async def test_event_stored_in_original_wire_format(memory_store, sample_state: EventState) -> None:
    await save_event(memory_store, "e1", sample_state)
    raw = memory_store.data[event_key("e1")]
    assert '"pointsPreset":"F1"' in raw
    assert '"runTime":"22:30"' in raw


# ─────────────────────────── Last open ───────────────────────────────────────

async def test_last_open_round_trip(kv_store) -> None:
    assert await get_last_open(kv_store) is None
    await set_last_open(kv_store, "e1")
    assert await get_last_open(kv_store) == "e1"
    await set_last_open(kv_store, None)
    assert await get_last_open(kv_store) is None


# ─────────────────────────── Theme ───────────────────────────────────────────

async def test_theme_defaults_to_platform_setting(kv_store) -> None:
    assert await get_theme(kv_store) == "light"


async def test_theme_round_trip(kv_store) -> None:
    await set_theme(kv_store, "dark")
    assert await get_theme(kv_store) == "dark"


async def test_unknown_stored_theme_falls_back(memory_store) -> None:
    memory_store.data[theme_key()] = "purple"
    assert await get_theme(memory_store) == "light"


async def test_set_theme_rejects_unknown_value(kv_store) -> None:
    with pytest.raises(ValueError):
        await set_theme(kv_store, "purple")


# ─────────────────────────── Failures are swallowed ──────────────────────────

async def test_write_failures_are_swallowed(memory_store, sample_state: EventState) -> None:
    memory_store.fail_writes = True

    assert await save_event(memory_store, "e1", sample_state) is False
    assert await save_index(memory_store, []) is False
    assert await set_last_open(memory_store, "e1") is False
    assert await set_last_open(memory_store, None) is False
    assert await set_theme(memory_store, "dark") is False
    assert await delete_event(memory_store, "e1") is False
    assert memory_store.data == {}


async def test_read_failures_yield_defaults(memory_store) -> None:
    memory_store.fail_reads = True

    assert await load_index(memory_store) == []
    assert await load_event(memory_store, "e1") is None
    assert await get_last_open(memory_store) is None
    assert await get_theme(memory_store) == "light"
