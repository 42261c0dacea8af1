"""
Tests for the player session controller
"""
import random

import pytest

from services.card_store import CardStore, InMemoryKeyValueStore
from services.cards import FREE_INDEX
from services.event_config import ResolvedEvent, ResolvedGame
from services.player import LoadState, PlayerSession

EVENT = "pub-x--2025-12-22"


def resolved_event():
    return ResolvedEvent(
        id=EVENT,
        name="Holiday Bingo",
        games=[
            ResolvedGame(id="game1", name="Game 1", number=1, playlist_key="p1", display_mode="title"),
            ResolvedGame(id="game2", name="Game 2", number=2, playlist_key="p2", display_mode="artist",
                         pattern_id=1, pattern_cells=[1, 5, 21, 25]),
            ResolvedGame(id="bonus", name="Bonus Game", number=6, playlist_key="p6", display_mode="title"),
        ],
    )


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def session(kv, playlists):
    s = PlayerSession(EVENT, playlists, CardStore(kv), rng=random.Random(7))
    s.load(resolved_event())
    return s


def fresh_session(kv, playlists, event=None):
    s = PlayerSession(EVENT, playlists, CardStore(kv), rng=random.Random(99))
    s.load(event if event is not None else resolved_event())
    return s


class TestLoading:
    def test_starts_loading(self, kv, playlists):
        s = PlayerSession(EVENT, playlists, CardStore(kv))
        assert s.state is LoadState.LOADING
        assert s.card is None

    def test_unknown_event(self, kv, playlists):
        s = PlayerSession(EVENT, playlists, CardStore(kv))
        assert s.load(None) is LoadState.NOT_FOUND
        with pytest.raises(RuntimeError):
            s.select_game("game1")

    def test_ready_without_saved_state(self, session):
        assert session.state is LoadState.READY
        assert session.selected_game is None
        assert session.square_tones() == []


class TestPlay:
    def test_select_game_deals_card(self, session, kv):
        card = session.select_game("game1")

        assert len(card.entries) == 25
        assert card.entries[FREE_INDEX].is_free
        assert session.selected_game.id == "game1"
        assert len(kv.data) == 1

    def test_selecting_again_keeps_card(self, session):
        first = session.select_game("game1")
        session.select_game("game2")
        assert session.select_game("game1") is first

    def test_unknown_game(self, session):
        with pytest.raises(LookupError):
            session.select_game("game9")

    def test_toggle_and_reset(self, session):
        session.select_game("game1")
        session.toggle(0)
        session.toggle(3)
        assert session.card.selections[0] and session.card.selections[3]

        session.reset_progress()
        selections = session.card.selections
        assert selections[FREE_INDEX]
        assert sum(selections) == 1

    def test_toggle_without_card(self, session):
        assert session.toggle(0) is None
        assert session.reset_progress() is None
        assert session.regenerate() is None

    def test_regenerate_replaces_card(self, session):
        first = session.select_game("game1")
        session.toggle(0)
        second = session.regenerate()

        assert second is not first
        assert second.id != first.id
        assert sum(second.selections) == 1

    def test_graded_tones(self, session):
        session.select_game("game2")
        session.toggle(0)   # pattern cell 1
        session.toggle(1)   # off pattern

        tones = session.square_tones()
        assert tones[0] == "correct"
        assert tones[1] == "wrong"
        assert tones[4] == "target"
        assert tones[FREE_INDEX] == "free"
        assert tones[2] == "neutral"

    def test_ungraded_tones(self, session):
        session.select_game("game1")
        session.toggle(0)
        tones = session.square_tones()
        assert tones[0] == "selected"
        assert tones[1] == "unselected"


class TestRestore:
    def test_progress_survives_reload(self, session, kv, playlists):
        card = session.select_game("game2")
        session.toggle(6)

        again = fresh_session(kv, playlists)
        assert again.selected_game_id == "game2"
        assert again.card.id == card.id
        assert again.card.selections[6]
        assert [e.playlist_item.id for e in again.card.entries] == [e.playlist_item.id for e in card.entries]

    def test_cards_for_removed_games_are_dropped(self, session, kv, playlists):
        session.select_game("game1")
        session.select_game("bonus")

        event = resolved_event()
        event.games = event.games[:2]
        again = fresh_session(kv, playlists, event)

        assert set(again.cards_by_game_id) == {"game1"}
        assert again.selected_game_id is None

    def test_sessions_for_other_events_do_not_mix(self, session, kv, playlists):
        session.select_game("game1")

        other = PlayerSession("pub-x--2025-12-23", playlists, CardStore(kv))
        other.load(resolved_event())
        assert other.cards_by_game_id == {}
