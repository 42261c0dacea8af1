"""
Bingo card generation and per-square grading

Grid positions 0..24 run left-to-right, top-to-bottom. Position 12 is the
FREE square: it always holds the FREE sentinel and is always selected.
Patterns use printed-card numbering (1..25), so cell n is position n - 1.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from services.catalogs import FREE_CELL, GRID_SIZE, PlaylistItem

FREE_INDEX = 12
SQUARES_PER_CARD = GRID_SIZE - 1

FREE_ITEM = PlaylistItem(id=-1, title="FREE", artist="FREE")


class InsufficientPlaylistError(ValueError):
    pass


@dataclass
class CardEntry:
    playlist_item: PlaylistItem
    selected: bool = False

    @property
    def is_free(self) -> bool:
        return self.playlist_item.id == FREE_ITEM.id


@dataclass
class BingoCard:
    id: str
    entries: List[CardEntry] = field(default_factory=list)

    @property
    def selections(self) -> List[bool]:
        return [e.selected for e in self.entries]


def shuffled(items: Sequence[PlaylistItem], rng: Optional[random.Random] = None) -> List[PlaylistItem]:
    """Fisher-Yates over a copy of ``items``"""
    rng = rng or random.Random()
    pool = list(items)
    for i in range(len(pool) - 1, 0, -1):
        j = rng.randint(0, i)
        pool[i], pool[j] = pool[j], pool[i]
    return pool


def generate_card(items: Sequence[PlaylistItem], rng: Optional[random.Random] = None) -> BingoCard:
    """
    Build a fresh card from a playlist

    The first 24 shuffled items fill positions 0..11 then 13..24.
    Raises InsufficientPlaylistError when the playlist has fewer than 24 items.
    """
    if len(items) < SQUARES_PER_CARD:
        raise InsufficientPlaylistError(
            f"A card needs {SQUARES_PER_CARD} playlist items, got {len(items)}."
        )

    chosen = iter(shuffled(items, rng)[:SQUARES_PER_CARD])
    entries = []
    for position in range(GRID_SIZE):
        if position == FREE_INDEX:
            entries.append(CardEntry(playlist_item=FREE_ITEM, selected=True))
        else:
            entries.append(CardEntry(playlist_item=next(chosen)))

    return BingoCard(id=uuid.uuid4().hex, entries=entries)


def normalize_card(card: BingoCard) -> BingoCard:
    """Force the center square back to a selected FREE sentinel"""
    card.entries[FREE_INDEX] = CardEntry(playlist_item=FREE_ITEM, selected=True)
    return card


def toggle_square(card: BingoCard, index: int) -> BingoCard:
    if not 0 <= index < GRID_SIZE:
        raise IndexError(f"Square index out of range: {index}")
    if index == FREE_INDEX:
        return card
    entry = card.entries[index]
    entry.selected = not entry.selected
    return card


def reset_progress(card: BingoCard) -> BingoCard:
    """Clear every tap but keep the same squares"""
    for entry in card.entries:
        entry.selected = False
    return normalize_card(card)


# --- grading ---------------------------------------------------------------


@dataclass(frozen=True)
class SquareState:
    is_free: bool
    is_pattern_cell: bool
    is_selected: bool


def pattern_indices(cells: Optional[Iterable[int]]) -> Optional[frozenset]:
    """
    Printed-card cell numbers to 0-based positions

    Returns None for a missing or empty pattern (the game is ungraded).
    13 and anything outside 1..25 is dropped.
    """
    if not cells:
        return None
    indices = set()
    for cell in cells:
        try:
            n = int(cell)
        except (TypeError, ValueError):
            continue
        if 1 <= n <= GRID_SIZE and n != FREE_CELL:
            indices.add(n - 1)
    return frozenset(indices) or None


def classify(selections: Sequence[bool], pattern_cells: Optional[Iterable[int]], index: int) -> SquareState:
    """State of one square given the card's taps and the game's pattern (1..25 numbering)"""
    if index == FREE_INDEX:
        return SquareState(is_free=True, is_pattern_cell=False, is_selected=True)

    targets = pattern_indices(pattern_cells)
    return SquareState(
        is_free=False,
        is_pattern_cell=bool(targets) and index in targets,
        is_selected=bool(selections[index]),
    )


def square_tone(state: SquareState, graded: bool) -> str:
    """
    Visual state name for a square

    Ungraded games only show selected/unselected. Graded games show
    correct (hit a target), target (not hit yet), wrong (tapped off-pattern)
    or neutral.
    """
    if state.is_free:
        return "free"
    if not graded:
        return "selected" if state.is_selected else "unselected"
    if state.is_pattern_cell:
        return "correct" if state.is_selected else "target"
    return "wrong" if state.is_selected else "neutral"


def grade_card(card: BingoCard, pattern_cells: Optional[Iterable[int]]) -> List[str]:
    """Tone for every square of ``card``"""
    cells = list(pattern_cells) if pattern_cells else None
    graded = pattern_indices(cells) is not None
    selections = card.selections
    return [square_tone(classify(selections, cells, i), graded) for i in range(GRID_SIZE)]


def card_to_dict(card: BingoCard) -> dict:
    return {
        "id": card.id,
        "entries": [
            {"playlistItem": e.playlist_item.to_dict(), "selected": e.selected}
            for e in card.entries
        ],
    }
