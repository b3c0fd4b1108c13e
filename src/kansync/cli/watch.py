"""Handler for 'kansync watch': follow the change feed."""

import asyncio
import logging
import signal
import sys

from kansync.backend.sqlite import SqliteBackend
from kansync.cli._common import error, load_settings
from kansync.events import Created, Deleted, RowEvent, Updated, parse_change
from kansync.ids import short_id
from kansync.model.card import Card, Note, RowError, TodoItem
from kansync.session import TABLES

logger = logging.getLogger(__name__)


def format_event(table: str, event: RowEvent) -> str:
    """One line describing an event."""
    if isinstance(event, Deleted):
        return f"deleted  {table} {short_id(event.key)}"
    verb = "created" if isinstance(event, Created) else "updated"
    row = event.row
    if isinstance(row, Card):
        detail = f"{row.column_id.value}#{row.position}  {row.title}"
        return f"{verb}  {table} {short_id(row.id)}  {detail}"
    if isinstance(row, TodoItem):
        mark = "x" if row.completed else " "
        return f"{verb}  {table} {short_id(row.id)}  [{mark}] {row.text}"
    if isinstance(row, Note):
        return f"{verb}  {table}  {len(row.content)} chars"
    return f"{verb}  {table}"


async def _follow(backend, user: str, stop: asyncio.Event) -> None:
    subs = [backend.subscribe(table, user) for table in TABLES]

    async def _pump(table, sub):
        async for payload in sub:
            try:
                event = parse_change(table, payload)
            except RowError as e:
                logger.warning("skipping malformed %s event: %s", table, e)
                continue
            print(format_event(table, event), flush=True)

    pumps = [asyncio.create_task(_pump(t, s)) for t, s in zip(TABLES, subs)]
    await stop.wait()
    for sub in subs:
        sub.close()
    await asyncio.gather(*pumps, return_exceptions=True)
    await backend.close()


def watch(args) -> int:
    """Print every change to the user's rows until SIGINT/SIGTERM."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        level=logging.INFO,
    )
    settings = load_settings(args)
    if not settings["user"]:
        error("no user: pass --user or set git config user.email", args.json)

    async def _main():
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, stop.set)
        backend = SqliteBackend(settings["database"], poll_interval=settings["poll_interval_ms"] / 1000)
        logger.info("watching %s as %s", settings["database"], settings["user"])
        await _follow(backend, settings["user"], stop)

    asyncio.run(_main())
    logger.info("stopped")
    return 0
