"""CLI argument parser and dispatch for kansync."""

import argparse

from kansync.cli.card import card_add, card_delete, card_edit, card_list, card_move, card_reorder
from kansync.cli.settings import config_get, config_set
from kansync.cli.todo import note_get, note_set, todo_add, todo_delete, todo_list, todo_toggle
from kansync.cli.watch import watch
from kansync.cli.web import web


def _common_flags(with_defaults: bool) -> argparse.ArgumentParser:
    """Flags accepted before or after any noun and verb.

    Only the top-level copy carries defaults; the copies on subcommands
    suppress theirs so they never overwrite a flag given earlier.
    """

    def default(value):
        return value if with_defaults else argparse.SUPPRESS

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=default("."), help="Directory whose git config holds settings (default: .)")
    common.add_argument("--db", default=default(None), help="Shared store database file (default: from config)")
    common.add_argument("--user", default=default(None), help="User id (default: git user.email)")
    common.add_argument("--json", action="store_true", default=default(False), help="Machine-readable JSON output")
    return common


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = _common_flags(with_defaults=False)

    parser = argparse.ArgumentParser(
        prog="kansync",
        description="Three-column kanban board kept in sync across sessions. No command starts the TUI.",
        parents=[_common_flags(with_defaults=True)],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- card ---
    card_p = nouns.add_parser("card", help="Card operations", parents=[common])
    card_verbs = card_p.add_subparsers(dest="verb")

    card_list_p = card_verbs.add_parser("list", help="List cards", parents=[common])
    card_list_p.add_argument("--column", dest="column", help="Filter by column (todo, progress, complete)")
    card_list_p.set_defaults(func=card_list)

    card_add_p = card_verbs.add_parser("add", help="Create a card", parents=[common])
    card_add_p.add_argument("title", help="Card title")
    card_add_p.add_argument("--description", default="", help="Card description")
    card_add_p.add_argument("--column", dest="column", help="Target column (default: todo)")
    card_add_p.set_defaults(func=card_add)

    card_edit_p = card_verbs.add_parser("edit", help="Edit a card's text", parents=[common])
    card_edit_p.add_argument("id", help="Card ID or prefix")
    card_edit_p.add_argument("--title", default=None, help="New title")
    card_edit_p.add_argument("--description", default=None, help="New description")
    card_edit_p.set_defaults(func=card_edit)

    card_move_p = card_verbs.add_parser("move", help="Move a card", parents=[common])
    card_move_p.add_argument("id", help="Card ID or prefix")
    card_move_p.add_argument("--column", dest="column", required=True, help="Target column")
    card_move_p.add_argument("--position", type=int, help="Position in column (1-indexed, default: end)")
    card_move_p.set_defaults(func=card_move)

    card_reorder_p = card_verbs.add_parser("reorder", help="Set a column's full order", parents=[common])
    card_reorder_p.add_argument("column", help="Column to reorder")
    card_reorder_p.add_argument("ids", nargs="+", help="Every card ID (or prefix) of the column, in order")
    card_reorder_p.set_defaults(func=card_reorder)

    card_delete_p = card_verbs.add_parser("delete", help="Delete a card", parents=[common])
    card_delete_p.add_argument("id", help="Card ID or prefix")
    card_delete_p.set_defaults(func=card_delete)

    # card with no verb = list
    card_p.set_defaults(func=card_list, column=None)

    # --- todo ---
    todo_p = nouns.add_parser("todo", help="Todo list operations", parents=[common])
    todo_verbs = todo_p.add_subparsers(dest="verb")

    todo_list_p = todo_verbs.add_parser("list", help="List todos", parents=[common])
    todo_list_p.set_defaults(func=todo_list)

    todo_add_p = todo_verbs.add_parser("add", help="Add a todo", parents=[common])
    todo_add_p.add_argument("text", help="Todo text")
    todo_add_p.set_defaults(func=todo_add)

    todo_toggle_p = todo_verbs.add_parser("toggle", help="Toggle a todo's completed flag", parents=[common])
    todo_toggle_p.add_argument("id", help="Todo ID or prefix")
    todo_toggle_p.set_defaults(func=todo_toggle)

    todo_delete_p = todo_verbs.add_parser("delete", help="Delete a todo", parents=[common])
    todo_delete_p.add_argument("id", help="Todo ID or prefix")
    todo_delete_p.set_defaults(func=todo_delete)

    todo_p.set_defaults(func=todo_list)

    # --- note ---
    note_p = nouns.add_parser("note", help="Free-text note", parents=[common])
    note_verbs = note_p.add_subparsers(dest="verb")

    note_get_p = note_verbs.add_parser("get", help="Print the note", parents=[common])
    note_get_p.set_defaults(func=note_get)

    note_set_p = note_verbs.add_parser("set", help="Replace the note from stdin", parents=[common])
    note_set_p.set_defaults(func=note_set)

    note_p.set_defaults(func=note_get)

    # --- watch ---
    watch_p = nouns.add_parser("watch", help="Print changes as they arrive", parents=[common])
    watch_p.set_defaults(func=watch)

    # --- config ---
    config_p = nouns.add_parser("config", help="Settings in git config [kansync]", parents=[common])
    config_verbs = config_p.add_subparsers(dest="verb")

    config_get_p = config_verbs.add_parser("get", help="Show settings", parents=[common])
    config_get_p.add_argument("key", nargs="?", help="Setting name")
    config_get_p.set_defaults(func=config_get)

    config_set_p = config_verbs.add_parser("set", help="Write a setting", parents=[common])
    config_set_p.add_argument("key", help="Setting name")
    config_set_p.add_argument("value", help="New value")
    config_set_p.set_defaults(func=config_set)

    config_p.set_defaults(func=config_get, key=None)

    # --- web ---
    web_p = nouns.add_parser("web", help="Serve board in browser", parents=[common])
    web_p.add_argument("--host", default="localhost", help="Bind address (default: localhost)")
    web_p.add_argument("--port", type=int, default=8617, help="Port (default: 8617)")
    web_p.set_defaults(func=web)

    return parser
