"""
Read-only playlist and pattern repositories

Both catalogs are passed into the services that need them, so tests can
hand in fixtures instead of touching the shipped data file or database.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from sqlalchemy.orm import Session

from models.pattern import Pattern
from utils.settings import PLAYLISTS_PATH

logger = logging.getLogger(__name__)

GRID_SIZE = 25
FREE_CELL = 13  # printed-card numbering of the center square


@dataclass(frozen=True)
class PlaylistItem:
    id: int
    title: str
    artist: str

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "artist": self.artist}


@dataclass(frozen=True)
class Playlist:
    key: str
    name: str
    display_mode: str  # hint used when a game does not set its own mode
    items: List[PlaylistItem] = field(default_factory=list)


@dataclass(frozen=True)
class PatternDef:
    id: int
    name: str
    cells: frozenset

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "cells": sorted(self.cells)}


def normalize_cells(raw) -> frozenset:
    """Keep integer cells in 1..25, never the FREE center"""
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return frozenset()
    cells = set()
    for value in raw:
        try:
            n = int(value)
        except (TypeError, ValueError):
            continue
        if 1 <= n <= GRID_SIZE and n != FREE_CELL:
            cells.add(n)
    return frozenset(cells)


class PlaylistCatalog(Protocol):
    def get(self, key: str) -> Optional[Playlist]: ...

    def keys(self) -> List[str]: ...


class InMemoryPlaylistCatalog:
    def __init__(self, playlists: Iterable[Playlist]):
        self._playlists: Dict[str, Playlist] = {p.key: p for p in playlists}

    def get(self, key: str) -> Optional[Playlist]:
        return self._playlists.get((key or "").strip().lower())

    def keys(self) -> List[str]:
        return list(self._playlists)


def load_playlist_catalog(path: Optional[str] = None) -> InMemoryPlaylistCatalog:
    """
    Load playlists from a JSON file shaped as
    ``{"playlists": [{"key", "name", "display_mode", "items": [{"id", "title", "artist"}]}]}``
    """
    source = Path(path or PLAYLISTS_PATH)
    if not source.exists():
        logger.warning("Playlist file %s not found, catalog is empty", source)
        return InMemoryPlaylistCatalog([])

    with source.open(encoding="utf-8") as fh:
        payload = json.load(fh)

    playlists = []
    for raw in payload.get("playlists", []):
        items = [
            PlaylistItem(id=int(item["id"]), title=str(item.get("title", "")), artist=str(item.get("artist", "")))
            for item in raw.get("items", [])
        ]
        playlists.append(Playlist(
            key=str(raw["key"]).strip().lower(),
            name=str(raw.get("name") or raw["key"]),
            display_mode=raw.get("display_mode") or "title",
            items=items,
        ))
    logger.info("Loaded %d playlists from %s", len(playlists), source)
    return InMemoryPlaylistCatalog(playlists)


_default_playlists: Optional[InMemoryPlaylistCatalog] = None


def get_playlist_catalog() -> InMemoryPlaylistCatalog:
    """FastAPI dependency returning the catalog loaded from PLAYLISTS_PATH"""
    global _default_playlists
    if _default_playlists is None:
        _default_playlists = load_playlist_catalog()
    return _default_playlists


class PatternCatalog(Protocol):
    def get(self, pattern_id: int) -> Optional[PatternDef]: ...

    def all(self) -> List[PatternDef]: ...

    def missing(self, pattern_ids: Iterable[int]) -> List[int]: ...


class InMemoryPatternCatalog:
    def __init__(self, patterns: Iterable[PatternDef]):
        self._patterns: Dict[int, PatternDef] = {p.id: p for p in patterns}

    def get(self, pattern_id: int) -> Optional[PatternDef]:
        return self._patterns.get(pattern_id)

    def all(self) -> List[PatternDef]:
        return [self._patterns[k] for k in sorted(self._patterns)]

    def missing(self, pattern_ids: Iterable[int]) -> List[int]:
        return sorted({pid for pid in pattern_ids if pid not in self._patterns})


class DbPatternCatalog:
    """Pattern catalog backed by the ``patterns`` table"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_def(row: Pattern) -> PatternDef:
        return PatternDef(id=int(row.id), name=str(row.name or ""), cells=normalize_cells(row.cells))

    def get(self, pattern_id: int) -> Optional[PatternDef]:
        row = self.db.query(Pattern).filter(Pattern.id == pattern_id).first()
        return self._to_def(row) if row else None

    def all(self) -> List[PatternDef]:
        rows = self.db.query(Pattern).order_by(Pattern.id).all()
        return [self._to_def(r) for r in rows]

    def missing(self, pattern_ids: Iterable[int]) -> List[int]:
        wanted = sorted(set(pattern_ids))
        if not wanted:
            return []
        found = {pid for (pid,) in self.db.query(Pattern.id).filter(Pattern.id.in_(wanted)).all()}
        return [pid for pid in wanted if pid not in found]
