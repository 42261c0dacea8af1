"""
Resolve the game list players see for an event

Resolution walks an ordered chain of tiers and the first hit wins:

1. local override  - a hand-curated event keyed by the identifier
2. database        - the events / event_games rows for that event_code
3. legacy key      - the event row's config_key, looked up as a local override
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from sqlalchemy.orm import Session

from models.event import Event, EventStatus
from models.event_game import EventGame, BONUS_GAME_NUMBER, SCORED_GAME_NUMBERS
from services.catalogs import DbPatternCatalog, PatternCatalog, PlaylistCatalog, normalize_cells
from services.event_overrides import LOCAL_EVENTS, LocalEvent

logger = logging.getLogger(__name__)

BONUS_GAME_ID = "bonus"


@dataclass
class ResolvedGame:
    id: str
    name: str
    number: int
    playlist_key: str
    display_mode: str
    pattern_id: Optional[int] = None
    pattern_cells: Optional[List[int]] = None

    @property
    def is_bonus(self) -> bool:
        return self.number == BONUS_GAME_NUMBER

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "playlist_key": self.playlist_key,
            "display_mode": self.display_mode,
            "pattern_id": self.pattern_id,
            "pattern_cells": self.pattern_cells,
            "is_bonus": self.is_bonus,
        }


@dataclass
class ResolvedEvent:
    id: str
    name: str
    games: List[ResolvedGame] = field(default_factory=list)
    source: str = "database"

    def game(self, game_id: str) -> Optional[ResolvedGame]:
        return next((g for g in self.games if g.id == game_id), None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "games": [g.to_dict() for g in self.games],
        }


class ConfigTier(Protocol):
    def resolve(self, identifier: str) -> Optional[ResolvedEvent]: ...


def _display_mode(explicit: Optional[str], playlist_key: str, playlists: Optional[PlaylistCatalog]) -> str:
    if explicit:
        return explicit
    playlist = playlists.get(playlist_key) if playlists else None
    return playlist.display_mode if playlist else "title"


def _mode_value(mode) -> Optional[str]:
    return getattr(mode, "value", mode)


def _from_local(event: LocalEvent, identifier: str, playlists: Optional[PlaylistCatalog], source: str) -> ResolvedEvent:
    games = []
    for number, g in enumerate(event.games, start=1):
        cells = sorted(normalize_cells(g.pattern_cells)) if g.pattern_cells else None
        games.append(ResolvedGame(
            id=g.id,
            name=g.name,
            number=number,
            playlist_key=g.playlist_key,
            display_mode=_display_mode(g.display_mode, g.playlist_key, playlists),
            pattern_cells=cells or None,
        ))
    return ResolvedEvent(id=identifier, name=event.name, games=games, source=source)


class LocalOverrideTier:
    def __init__(self, events: Dict[str, LocalEvent] = LOCAL_EVENTS, playlists: Optional[PlaylistCatalog] = None):
        self.events = events
        self.playlists = playlists

    def resolve(self, identifier: str) -> Optional[ResolvedEvent]:
        event = self.events.get(identifier)
        if event is None:
            return None
        return _from_local(event, identifier, self.playlists, source="local")


def _load_event(db: Session, event_code: str, active_only: bool) -> Optional[Event]:
    query = db.query(Event).filter(Event.event_code == event_code)
    if active_only:
        query = query.filter(Event.status == EventStatus.ACTIVE)
    return query.first()


def build_games_from_rows(
    rows: Sequence[EventGame],
    patterns: PatternCatalog,
    playlists: Optional[PlaylistCatalog] = None,
) -> List[ResolvedGame]:
    """Scored games 1-5 in order, then the bonus when it has a playlist"""
    scored = sorted((r for r in rows if r.game_number in SCORED_GAME_NUMBERS), key=lambda r: r.game_number)
    bonus = next((r for r in rows if r.game_number == BONUS_GAME_NUMBER), None)

    games = []
    for row in scored:
        pattern = patterns.get(row.pattern_id) if row.pattern_id is not None else None
        games.append(ResolvedGame(
            id=f"game{row.game_number}",
            name=f"Game {row.game_number}",
            number=row.game_number,
            playlist_key=row.playlist_key,
            display_mode=_display_mode(_mode_value(row.display_mode), row.playlist_key, playlists),
            pattern_id=row.pattern_id,
            pattern_cells=sorted(pattern.cells) if pattern and pattern.cells else None,
        ))

    if bonus is not None and (bonus.playlist_key or "").strip():
        games.append(ResolvedGame(
            id=BONUS_GAME_ID,
            name="Bonus Game",
            number=BONUS_GAME_NUMBER,
            playlist_key=bonus.playlist_key,
            display_mode=_display_mode(_mode_value(bonus.display_mode), bonus.playlist_key, playlists),
        ))
    return games


class DatabaseTier:
    def __init__(self, db: Session, patterns: Optional[PatternCatalog] = None,
                 playlists: Optional[PlaylistCatalog] = None, active_only: bool = False):
        self.db = db
        self.patterns = patterns or DbPatternCatalog(db)
        self.playlists = playlists
        self.active_only = active_only

    def resolve(self, identifier: str) -> Optional[ResolvedEvent]:
        event = _load_event(self.db, identifier, self.active_only)
        if event is None:
            return None

        rows = (
            self.db.query(EventGame)
            .filter(EventGame.event_id == event.id)
            .order_by(EventGame.game_number)
            .all()
        )
        if not any(r.game_number in SCORED_GAME_NUMBERS for r in rows):
            return None

        venue = event.venue
        venue_label = (venue.name or venue.slug) if venue else ""
        name = (event.name or "").strip() or f"{venue_label} - {event.event_code}"
        return ResolvedEvent(
            id=event.event_code,
            name=name,
            games=build_games_from_rows(rows, self.patterns, self.playlists),
            source="database",
        )


class LegacyKeyTier:
    """Event rows without game rows can still point at a local override by config_key"""

    def __init__(self, db: Session, events: Dict[str, LocalEvent] = LOCAL_EVENTS,
                 playlists: Optional[PlaylistCatalog] = None, active_only: bool = False):
        self.db = db
        self.events = events
        self.playlists = playlists
        self.active_only = active_only

    def resolve(self, identifier: str) -> Optional[ResolvedEvent]:
        event = _load_event(self.db, identifier, self.active_only)
        if event is None or not (event.config_key or "").strip():
            return None

        local = self.events.get(event.config_key.strip())
        if local is None:
            logger.warning("Event %s points at unknown config_key %s", identifier, event.config_key)
            return None
        return _from_local(local, identifier, self.playlists, source="legacy")


class EventConfigResolver:
    def __init__(self, tiers: Sequence[ConfigTier]):
        self.tiers = list(tiers)

    def resolve(self, identifier: str) -> Optional[ResolvedEvent]:
        identifier = (identifier or "").strip()
        if not identifier:
            return None
        for tier in self.tiers:
            resolved = tier.resolve(identifier)
            if resolved is not None:
                return resolved
        return None


def build_resolver(
    db: Session,
    playlists: Optional[PlaylistCatalog] = None,
    patterns: Optional[PatternCatalog] = None,
    active_only: bool = False,
    local_events: Dict[str, LocalEvent] = LOCAL_EVENTS,
) -> EventConfigResolver:
    """Standard chain: local override, then database, then legacy config_key"""
    return EventConfigResolver([
        LocalOverrideTier(local_events, playlists),
        DatabaseTier(db, patterns, playlists, active_only=active_only),
        LegacyKeyTier(db, local_events, playlists, active_only=active_only),
    ])
