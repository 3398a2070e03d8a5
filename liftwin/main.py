"""
LIFTWIN — Monthly Meet scoring engine
Entry point: prepares the local store, boots the app state (importing a share
link when one is given) and logs the active event's leaderboard.

    python -m liftwin.main ["https://host/#k=<token>"]
"""
import asyncio
import logging
import sys
from typing import Optional

from liftwin.config import settings
from liftwin.models.base import AsyncSessionFactory, create_tables, engine
from liftwin.services.event_service import boot, list_events
from liftwin.services.ranking_service import (
    format_athlete_line,
    format_leaderboard,
)
from liftwin.services.storage_service import SqlKeyValueStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


async def prepare_store() -> SqlKeyValueStore:
    """Create the kv table if needed and return a store bound to it."""
    try:
        await create_tables(engine)
    except Exception as e:
        logger.critical(
            "❌ Cannot open the local store!\n"
            "   URL: %s\n"
            "   Error: %s",
            settings.DATABASE_URL.split("@")[-1],   # hide credentials in log
            e,
        )
        sys.exit(1)
    logger.info("Local store ready.")
    return SqlKeyValueStore(AsyncSessionFactory)


async def main(link: Optional[str] = None) -> None:
    store = await prepare_store()
    try:
        result = await boot(store, link)
        if result.imported is not None:
            logger.info("Share link %s → event %s", result.imported.action, result.imported.eid)

        if result.mode == "manager":
            events = await list_events(store)
            logger.info("%d event(s) stored, none open.", len(events))
            for meta in events:
                logger.info("  %s  %s", meta.eid, meta.title)
            return

        logger.info("🏆 %s (%s)", result.state.title, result.eid)
        for athlete in result.state.athletes:
            logger.debug("  %s", format_athlete_line(athlete))
        for line in format_leaderboard(result.state):
            logger.info(line)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
