"""
Tests for per-device player state persistence
"""
import json
import random

from services.card_store import (
    CardStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    state_key,
)
from services.cards import FREE_INDEX, FREE_ITEM, card_to_dict, generate_card, toggle_square
from services.catalogs import PlaylistItem

EVENT = "pub-x--2025-12-22"


def items(count=30):
    return [PlaylistItem(id=i, title=f"Song {i}", artist=f"Artist {i}") for i in range(1, count + 1)]


def sample_cards():
    rng = random.Random(11)
    cards = {"game1": generate_card(items(), rng), "game2": generate_card(items(), rng)}
    toggle_square(cards["game1"], 0)
    toggle_square(cards["game2"], 24)
    return cards


class FailingStore(InMemoryKeyValueStore):
    def set(self, key, value):
        raise OSError("quota exceeded")


class TestSaveRestore:
    def test_round_trip(self):
        store = CardStore(InMemoryKeyValueStore())
        cards = sample_cards()

        assert store.save(EVENT, "game2", cards) is True
        state = store.restore(EVENT)

        assert state is not None
        assert state.event_code == EVENT
        assert state.selected_game_id == "game2"
        assert set(state.cards_by_game_id) == {"game1", "game2"}
        for game_id, card in cards.items():
            assert card_to_dict(state.cards_by_game_id[game_id]) == card_to_dict(card)
        assert state.saved_at

    def test_record_layout(self):
        kv = InMemoryKeyValueStore()
        CardStore(kv).save(EVENT, "game1", sample_cards())

        record = json.loads(kv.get(state_key(EVENT)))
        assert record["version"] == 1
        assert record["eventCode"] == EVENT
        assert record["selectedGameId"] == "game1"
        entry = record["cardsByGameId"]["game1"]["entries"][0]
        assert set(entry) == {"playlistItem", "selected"}
        assert set(entry["playlistItem"]) == {"id", "title", "artist"}

    def test_absent_event_returns_none(self):
        store = CardStore(InMemoryKeyValueStore())
        store.save(EVENT, "game1", sample_cards())
        assert store.restore("pub-x--2025-12-23") is None

    def test_event_code_mismatch_inside_record_is_ignored(self):
        kv = InMemoryKeyValueStore()
        CardStore(kv).save("other--2025-01-01", "game1", sample_cards())
        # Record copied under the wrong key
        kv.set(state_key(EVENT), kv.get(state_key("other--2025-01-01")))
        assert CardStore(kv).restore(EVENT) is None

    def test_corrupted_records_are_ignored(self):
        kv = InMemoryKeyValueStore()
        store = CardStore(kv)
        for raw in ["not json", "[]", json.dumps({"version": 1, "eventCode": EVENT, "cardsByGameId": []})]:
            kv.set(state_key(EVENT), raw)
            assert store.restore(EVENT) is None

    def test_short_card_is_rejected(self):
        kv = InMemoryKeyValueStore()
        CardStore(kv).save(EVENT, "game1", sample_cards())
        record = json.loads(kv.get(state_key(EVENT)))
        record["cardsByGameId"]["game1"]["entries"].pop()
        kv.set(state_key(EVENT), json.dumps(record))
        assert CardStore(kv).restore(EVENT) is None

    def test_center_is_forced_back_to_free(self):
        kv = InMemoryKeyValueStore()
        CardStore(kv).save(EVENT, "game1", sample_cards())
        record = json.loads(kv.get(state_key(EVENT)))
        record["cardsByGameId"]["game1"]["entries"][FREE_INDEX] = {
            "playlistItem": {"id": 999, "title": "Hacked", "artist": "Nobody"},
            "selected": False,
        }
        kv.set(state_key(EVENT), json.dumps(record))

        center = CardStore(kv).restore(EVENT).cards_by_game_id["game1"].entries[FREE_INDEX]
        assert center.playlist_item == FREE_ITEM
        assert center.selected is True


class TestWrites:
    def test_identical_state_is_not_rewritten(self):
        store = CardStore(InMemoryKeyValueStore())
        cards = sample_cards()
        assert store.save(EVENT, "game1", cards) is True
        assert store.save(EVENT, "game1", cards) is False

    def test_changed_state_is_written(self):
        store = CardStore(InMemoryKeyValueStore())
        cards = sample_cards()
        store.save(EVENT, "game1", cards)
        toggle_square(cards["game1"], 1)
        assert store.save(EVENT, "game1", cards) is True
        assert store.restore(EVENT).cards_by_game_id["game1"].entries[1].selected is True

    def test_events_do_not_overwrite_each_other(self):
        store = CardStore(InMemoryKeyValueStore())
        store.save(EVENT, "game1", sample_cards())
        store.save("pub-x--2025-12-29", "game3", {})
        assert store.restore(EVENT).selected_game_id == "game1"
        assert store.restore("pub-x--2025-12-29").selected_game_id == "game3"

    def test_write_failure_is_not_fatal(self):
        store = CardStore(FailingStore())
        assert store.save(EVENT, "game1", sample_cards()) is False
        assert store.restore(EVENT) is None

    def test_failed_write_is_retried_next_time(self):
        kv = FailingStore()
        store = CardStore(kv)
        cards = sample_cards()
        store.save(EVENT, "game1", cards)

        store.store = InMemoryKeyValueStore()
        assert store.save(EVENT, "game1", cards) is True

    def test_json_file_store(self, tmp_path):
        path = tmp_path / "device" / "storage.json"
        CardStore(JsonFileKeyValueStore(path)).save(EVENT, "game2", sample_cards())

        state = CardStore(JsonFileKeyValueStore(path)).restore(EVENT)
        assert state.selected_game_id == "game2"
        assert state.cards_by_game_id["game2"].entries[24].selected is True
