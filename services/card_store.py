"""
Per-device player state, one record per event code

The record mirrors what the phone keeps in local storage:
``{version, eventCode, selectedGameId, cardsByGameId, savedAt}``.
Storage is best effort: a failed write is logged and the game carries on.
Used by player clients through PlayerSession; no route in this service calls it.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol

from services.catalogs import GRID_SIZE, PlaylistItem
from services.cards import BingoCard, CardEntry, card_to_dict, normalize_card

logger = logging.getLogger(__name__)

STATE_VERSION = 1
KEY_PREFIX = "mvb:player-state:"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileKeyValueStore:
    """All keys in a single JSON object on disk"""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open(encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logger.warning("Unreadable state file %s, starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        tmp.replace(self.path)


@dataclass
class PlayerState:
    event_code: str
    selected_game_id: Optional[str]
    cards_by_game_id: Dict[str, BingoCard] = field(default_factory=dict)
    saved_at: Optional[str] = None


def state_key(event_code: str) -> str:
    return f"{KEY_PREFIX}{event_code}"


def _parse_entry(raw) -> Optional[CardEntry]:
    if not isinstance(raw, dict):
        return None
    item = raw.get("playlistItem")
    if not isinstance(item, dict) or "id" not in item:
        return None
    try:
        playlist_item = PlaylistItem(
            id=int(item["id"]),
            title=str(item.get("title", "")),
            artist=str(item.get("artist", "")),
        )
    except (TypeError, ValueError):
        return None
    return CardEntry(playlist_item=playlist_item, selected=bool(raw.get("selected", False)))


def _parse_card(raw) -> Optional[BingoCard]:
    if not isinstance(raw, dict):
        return None
    entries_raw = raw.get("entries")
    if not isinstance(entries_raw, list) or len(entries_raw) != GRID_SIZE:
        return None
    entries = [_parse_entry(e) for e in entries_raw]
    if any(e is None for e in entries):
        return None
    return normalize_card(BingoCard(id=str(raw.get("id") or ""), entries=entries))


class CardStore:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._last_written: Dict[str, str] = {}

    def save(self, event_code: str, selected_game_id: Optional[str], cards_by_game_id: Dict[str, BingoCard]) -> bool:
        """
        Persist the player's cards for ``event_code``

        Returns True when a write reached the store. An unchanged state is
        skipped; a storage failure is logged and reported as False.
        """
        key = state_key(event_code)
        body = {
            "version": STATE_VERSION,
            "eventCode": event_code,
            "selectedGameId": selected_game_id,
            "cardsByGameId": {
                game_id: card_to_dict(normalize_card(card))
                for game_id, card in cards_by_game_id.items()
            },
        }
        fingerprint = json.dumps(body, sort_keys=True)
        if self._last_written.get(key) == fingerprint:
            return False

        body["savedAt"] = datetime.now(timezone.utc).isoformat()
        try:
            self.store.set(key, json.dumps(body))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not persist player state for %s: %s", event_code, e)
            return False

        self._last_written[key] = fingerprint
        return True

    def restore(self, event_code: str) -> Optional[PlayerState]:
        """Saved state for ``event_code``, or None when absent or malformed"""
        try:
            raw = self.store.get(state_key(event_code))
        except (OSError, ValueError) as e:
            logger.warning("Could not read player state for %s: %s", event_code, e)
            return None
        if not raw:
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        if data.get("version") != STATE_VERSION or data.get("eventCode") != event_code:
            return None

        cards_raw = data.get("cardsByGameId")
        if not isinstance(cards_raw, dict):
            return None
        cards = {}
        for game_id, card_raw in cards_raw.items():
            card = _parse_card(card_raw)
            if card is None:
                return None
            cards[str(game_id)] = card

        selected = data.get("selectedGameId")
        return PlayerState(
            event_code=event_code,
            selected_game_id=selected if isinstance(selected, str) else None,
            cards_by_game_id=cards,
            saved_at=data.get("savedAt"),
        )
