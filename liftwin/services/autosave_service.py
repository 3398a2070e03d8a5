"""
Debounced autosave for the active event.

Every edit reschedules a single delayed write, so a burst of keystrokes is
coalesced into one snapshot save and one index update. The persisted
snapshot is always the last one of the burst.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from liftwin.config import settings
from liftwin.schemas import EID, EventState
from liftwin.services.event_service import touch_index
from liftwin.services.storage_service import KeyValueStore, save_event

logger = logging.getLogger(__name__)

AsyncCallback = Callable[[], Awaitable[Any]]


class Debouncer:
    """
    Keyed delayed calls on the running event loop.

    Scheduling a key cancels whatever was still pending for that key.
    """

    def __init__(self) -> None:
        self._handles: Dict[str, asyncio.TimerHandle] = {}
        self._callbacks: Dict[str, AsyncCallback] = {}
        self._running: Set[asyncio.Task] = set()

    def schedule(self, key: str, delay: float, fn: AsyncCallback) -> None:
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._callbacks[key] = fn
        self._handles[key] = loop.call_later(delay, self._fire, key)

    def cancel(self, key: str) -> bool:
        """Drop the pending call for ``key``. Returns False if nothing was pending."""
        self._callbacks.pop(key, None)
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def is_pending(self, key: str) -> bool:
        return key in self._handles

    def _fire(self, key: str) -> None:
        self._handles.pop(key, None)
        fn = self._callbacks.pop(key, None)
        if fn is None:
            return
        task = asyncio.ensure_future(fn())
        self._running.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced call failed", exc_info=task.exception())

    async def flush(self) -> None:
        """Run every pending call now and wait for calls already in flight."""
        for key in list(self._handles):
            fn = self._callbacks.get(key)
            self.cancel(key)
            if fn is not None:
                await fn()
        if self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)


class AutoSaver:
    """
    Persists edits of open events after a quiet period.

    Parameters
    ----------
    store : key-value backend the snapshots are written to
    delay : quiet period in seconds (default: AUTOSAVE_DELAY_MS setting)
    """

    def __init__(
        self,
        store: KeyValueStore,
        delay: Optional[float] = None,
        debouncer: Optional[Debouncer] = None,
    ) -> None:
        self._store     = store
        self._delay     = settings.autosave_delay if delay is None else delay
        self._debouncer = debouncer or Debouncer()
        # Writes for one store never interleave
        self._lock      = asyncio.Lock()

    def edit(self, eid: EID, state: EventState) -> None:
        """Record the latest snapshot of ``eid``; written once edits settle."""
        self._debouncer.schedule(eid, self._delay, lambda: self._write(eid, state))

    def discard(self, eid: EID) -> bool:
        """Forget unsaved edits, e.g. when the event is deleted."""
        return self._debouncer.cancel(eid)

    def is_dirty(self, eid: EID) -> bool:
        return self._debouncer.is_pending(eid)

    async def flush(self) -> None:
        await self._debouncer.flush()

    async def _write(self, eid: EID, state: EventState) -> None:
        async with self._lock:
            await save_event(self._store, eid, state)
            await touch_index(self._store, eid, state)
        logger.debug("Autosaved event %s", eid)
