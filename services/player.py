"""
Player-side game controller for one event on one device

Holds a card per game, applies taps and resets, and writes the state through
a CardStore after every change. This is a library for a player client;
no route in this service calls it.
"""
from __future__ import annotations

import enum
import logging
import random
from typing import Dict, List, Optional

from services.card_store import CardStore
from services.cards import (
    BingoCard,
    generate_card,
    grade_card,
    reset_progress,
    toggle_square,
)
from services.catalogs import PlaylistCatalog
from services.event_config import ResolvedEvent, ResolvedGame

logger = logging.getLogger(__name__)


class LoadState(str, enum.Enum):
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"


class PlayerSession:
    def __init__(
        self,
        event_code: str,
        playlists: PlaylistCatalog,
        card_store: CardStore,
        rng: Optional[random.Random] = None,
    ):
        self.event_code = event_code
        self.playlists = playlists
        self.card_store = card_store
        self.rng = rng or random.Random()

        self.state = LoadState.LOADING
        self.event: Optional[ResolvedEvent] = None
        self.selected_game_id: Optional[str] = None
        self.cards_by_game_id: Dict[str, BingoCard] = {}

    def load(self, event: Optional[ResolvedEvent]) -> LoadState:
        """
        Apply the resolved configuration (None: the event is unknown)

        Saved cards are restored for games that still exist.
        """
        if event is None:
            self.event = None
            self.selected_game_id = None
            self.cards_by_game_id = {}
            self.state = LoadState.NOT_FOUND
            return self.state

        self.event = event
        saved = self.card_store.restore(self.event_code)
        if saved is not None:
            known = {g.id for g in event.games}
            self.cards_by_game_id = {k: v for k, v in saved.cards_by_game_id.items() if k in known}
            if saved.selected_game_id in known:
                self.selected_game_id = saved.selected_game_id
        self.state = LoadState.READY
        return self.state

    @property
    def selected_game(self) -> Optional[ResolvedGame]:
        if self.event is None or self.selected_game_id is None:
            return None
        return self.event.game(self.selected_game_id)

    @property
    def card(self) -> Optional[BingoCard]:
        if self.selected_game_id is None:
            return None
        return self.cards_by_game_id.get(self.selected_game_id)

    def _require_ready(self):
        if self.state is not LoadState.READY or self.event is None:
            raise RuntimeError("Event configuration is not loaded")

    def _new_card(self, game: ResolvedGame) -> BingoCard:
        playlist = self.playlists.get(game.playlist_key)
        if playlist is None:
            raise LookupError(f"Unknown playlist {game.playlist_key} for {game.id}")
        return generate_card(playlist.items, self.rng)

    def _persist(self):
        self.card_store.save(self.event_code, self.selected_game_id, self.cards_by_game_id)

    def select_game(self, game_id: str) -> BingoCard:
        """Switch games, generating that game's card the first time"""
        self._require_ready()
        game = self.event.game(game_id)
        if game is None:
            raise LookupError(f"Unknown game {game_id}")

        self.selected_game_id = game_id
        if game_id not in self.cards_by_game_id:
            self.cards_by_game_id[game_id] = self._new_card(game)
        self._persist()
        return self.cards_by_game_id[game_id]

    def toggle(self, index: int) -> Optional[BingoCard]:
        card = self.card
        if card is None:
            return None
        toggle_square(card, index)
        self._persist()
        return card

    def reset_progress(self) -> Optional[BingoCard]:
        card = self.card
        if card is None:
            return None
        reset_progress(card)
        self._persist()
        return card

    def regenerate(self) -> Optional[BingoCard]:
        game = self.selected_game
        if game is None:
            return None
        card = self._new_card(game)
        self.cards_by_game_id[game.id] = card
        self._persist()
        return card

    def square_tones(self) -> List[str]:
        card = self.card
        if card is None:
            return []
        game = self.selected_game
        return grade_card(card, game.pattern_cells if game else None)
