"""Ordering intents produced by gestures and consumed by the mutator."""

from __future__ import annotations

from dataclasses import dataclass

from kansync.model.card import ColumnId


@dataclass(frozen=True)
class MoveIntent:
    """Put card_id at target_index of to_column."""

    card_id: str
    from_column: ColumnId
    to_column: ColumnId
    target_index: int


@dataclass(frozen=True)
class ReorderIntent:
    """Replace a column's order with ids, which must be a permutation of it."""

    column: ColumnId
    ids: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", tuple(self.ids))


Intent = MoveIntent | ReorderIntent
