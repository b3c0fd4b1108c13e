"""Shared helpers for CLI command handlers."""

import asyncio
import json
import sys
from typing import Any, Callable

from kansync.backend.sqlite import SqliteBackend
from kansync.config import read_config
from kansync.ids import match_ids, short_id
from kansync.model.card import COLUMN_TITLES, COLUMNS, Card, ColumnId
from kansync.session import CLOSE_TIMEOUT, Session


class CommandError(Exception):
    """A handler cannot continue; reported as ``error: ...`` with exit 1."""


def load_settings(args) -> dict[str, Any]:
    """Git-config settings overridden by --db / --user."""
    settings = read_config(args.repo)
    if getattr(args, "db", None):
        settings["database"] = args.db
    if getattr(args, "user", None):
        settings["user"] = args.user
    return settings


def run_session(args, fn: Callable[[Session], Any]) -> Any:
    """Open a one-shot session on the configured database and run fn in it.

    The session is loaded but not subscribed; its writes are drained
    before returning. Exits 1 if fn raises CommandError or a write fails.
    """
    settings = load_settings(args)
    if not settings["user"]:
        error("no user: pass --user or set git config user.email", args.json)

    async def _main():
        backend = SqliteBackend(settings["database"], poll_interval=settings["poll_interval_ms"] / 1000)
        session = Session(backend, settings["user"], note_delay=settings["note_delay_ms"] / 1000)
        await session.load()
        try:
            return fn(session)
        finally:
            session.notes_writer.flush()
            finished = await session.persistence.drain(CLOSE_TIMEOUT)
            await backend.close()
            if not finished:
                raise CommandError(f"{session.persistence.in_flight} write(s) did not finish")
            if session.persistence.failures:
                raise CommandError(f"{session.persistence.failures} write(s) failed")

    try:
        return asyncio.run(_main())
    except CommandError as e:
        error(str(e), args.json)


def parse_column_arg(value: str) -> ColumnId:
    """Accept a column id or its title, case-insensitively."""
    needle = value.strip().lower()
    for column in COLUMNS:
        if needle in (column.value, COLUMN_TITLES[column].lower()):
            return column
    available = ", ".join(c.value for c in COLUMNS)
    raise CommandError(f"Column '{value}' not found. Available: {available}")


def find_card(session: Session, prefix: str, column: ColumnId | None = None) -> Card:
    """Lookup a card by id or unique id prefix."""
    if column is not None:
        ids = session.cards.ids_in(column)
    else:
        ids = [c.id for c in session.cards]
    matches = match_ids(prefix, ids)
    if not matches:
        raise CommandError(f"Card '{prefix}' not found.")
    if len(matches) > 1:
        listed = ", ".join(short_id(m) for m in matches)
        raise CommandError(f"Card '{prefix}' is ambiguous: {listed}")
    return session.cards.get(matches[0])


def card_json(card: Card) -> dict:
    return {
        "id": card.id,
        "title": card.title,
        "description": card.description,
        "column": card.column_id.value,
        "position": card.position,
    }


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
