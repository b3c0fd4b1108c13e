"""Handlers for 'kansync card' commands."""

from kansync.cli._common import (
    CommandError,
    card_json,
    find_card,
    output_json,
    output_result,
    parse_column_arg,
    run_session,
)
from kansync.ids import short_id
from kansync.model.card import COLUMN_TITLES, COLUMNS


def card_list(args) -> int:
    """List cards grouped by column, in position order."""

    def _list(session):
        columns = [parse_column_arg(args.column)] if args.column else list(COLUMNS)
        return [(column, session.cards.cards_in(column)) for column in columns]

    columns = run_session(args, _list)

    if args.json:
        output_json([card_json(card) for _, cards in columns for card in cards])
    else:
        for column, cards in columns:
            print(f"{column.value}  {COLUMN_TITLES[column]}")
            for card in cards:
                print(f"  {short_id(card.id)}  {card.title}")

    return 0


def card_add(args) -> int:
    """Create a card at the end of a column."""

    def _add(session):
        column = parse_column_arg(args.column or "todo")
        return session.add_card(column, args.title, args.description or None)

    card = run_session(args, _add)
    output_result(
        card_json(card),
        f"Created card {short_id(card.id)} in {COLUMN_TITLES[card.column_id]} at {card.position + 1}",
        args.json,
    )
    return 0


def card_edit(args) -> int:
    """Change a card's title and/or description."""

    def _edit(session):
        card = find_card(session, args.id)
        title = args.title if args.title is not None else card.title
        description = args.description if args.description is not None else card.description
        return session.edit_card(card.id, title, description or None)

    card = run_session(args, _edit)
    output_result(card_json(card), f"Updated card {short_id(card.id)}", args.json)
    return 0


def card_move(args) -> int:
    """Move a card to a column, at a 1-indexed position (default: end)."""

    def _move(session):
        card = find_card(session, args.id)
        column = parse_column_arg(args.column)
        if args.position is not None:
            index = args.position - 1
        else:
            index = len(session.cards.cards_in(column))
        session.move_card(card.id, column, index)
        return session.cards.get(card.id)

    card = run_session(args, _move)
    output_result(
        card_json(card),
        f"Moved card {short_id(card.id)} to {COLUMN_TITLES[card.column_id]} at {card.position + 1}",
        args.json,
    )
    return 0


def card_reorder(args) -> int:
    """Set the full order of a column."""

    def _reorder(session):
        column = parse_column_arg(args.column)
        ids = [find_card(session, prefix, column).id for prefix in args.ids]
        if session.reorder_cards(column, ids) is None:
            raise CommandError(f"Order must list every card in {column.value} exactly once.")
        return column, session.cards.cards_in(column)

    column, cards = run_session(args, _reorder)
    output_result(
        {"column": column.value, "cards": [card_json(c) for c in cards]},
        f"Reordered {COLUMN_TITLES[column]}: " + " ".join(short_id(c.id) for c in cards),
        args.json,
    )
    return 0


def card_delete(args) -> int:
    """Delete a card and close the gap in its column."""

    def _delete(session):
        card = find_card(session, args.id)
        return session.delete_card(card.id)

    card = run_session(args, _delete)
    output_result({"id": card.id}, f"Deleted card {short_id(card.id)}", args.json)
    return 0
