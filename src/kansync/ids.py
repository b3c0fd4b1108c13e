"""Row ID generation and lookup."""

import uuid

SHORT_WIDTH = 8


def new_id() -> str:
    """Generate an opaque row id."""
    return str(uuid.uuid4())


def short_id(row_id: str, width: int = SHORT_WIDTH) -> str:
    """Abbreviate an id for display.

    "0f8fad5b-d9cb-469f-a165-70867728950e" → "0f8fad5b"
    """
    return row_id[:width]


def match_ids(prefix: str, ids: list[str]) -> list[str]:
    """Return the ids starting with prefix, or [prefix] on an exact match."""
    prefix = prefix.strip().lower()
    if prefix in ids:
        return [prefix]
    return [id_ for id_ in ids if id_.lower().startswith(prefix)]
