"""
Validation and writes for an event's game rows

Games 1-5 are required on every write; game 6 (the bonus) is optional and
leaving it out deletes any bonus row the event already has.
"""
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from database.connection import commit_or_rollback
from models.event import Event
from models.event_game import EventGame, DisplayMode, BONUS_GAME_NUMBER, SCORED_GAME_NUMBERS
from services.catalogs import DbPatternCatalog, PatternCatalog
from services.venues import get_event_for_venue, get_venue_by_slug, resolve_target_event
from utils.errors import ValidationError
from utils.settings import MAX_PATTERN_ID, MAX_PLAYLIST_NUMBER

logger = logging.getLogger(__name__)

PLAYLIST_KEY_RE = re.compile(r"^p(\d+)$")
DISPLAY_MODES = {m.value for m in DisplayMode}


@dataclass(frozen=True)
class GameRow:
    game_number: int
    playlist_key: str
    display_mode: str
    pattern_id: Optional[int]


def parse_playlist_key(playlist_key, max_playlist: int = MAX_PLAYLIST_NUMBER) -> str:
    """Normalise "P07" to "p7"; reject anything outside p1..p<max>"""
    key = str(playlist_key or "").strip().lower()
    match = PLAYLIST_KEY_RE.match(key)
    if not match or not 1 <= int(match.group(1)) <= max_playlist:
        raise ValidationError(f'Invalid playlist_key "{playlist_key}". Use p1-p{max_playlist}.')
    return f"p{int(match.group(1))}"


def parse_display_mode(display_mode, game_number: int) -> str:
    mode = display_mode or "title"
    if mode not in DISPLAY_MODES:
        raise ValidationError(f"Invalid display_mode for game {game_number}")
    return mode


def normalize_games(games, max_playlist: int = MAX_PLAYLIST_NUMBER) -> List[GameRow]:
    """
    Validate incoming game dicts/models and return rows sorted by game number

    Game 1 never carries a pattern; games 1-5 must all be present.
    """
    if games is None:
        raise ValidationError("Missing games array.")

    rows = {}
    for g in games:
        data = g if isinstance(g, dict) else g.model_dump()
        game_number = data.get("game_number")
        if not isinstance(game_number, int) or isinstance(game_number, bool) or not 1 <= game_number <= BONUS_GAME_NUMBER:
            raise ValidationError(f"Invalid game_number: {game_number}")

        raw_key = str(data.get("playlist_key") or "").strip()
        if not raw_key:
            raise ValidationError(f"Missing playlist_key for game {game_number}")
        try:
            playlist_key = parse_playlist_key(raw_key, max_playlist)
        except ValidationError as e:
            raise ValidationError(f"Game {game_number}: {e.message}")

        display_mode = parse_display_mode(data.get("display_mode"), game_number)

        pattern_id = data.get("pattern_id")
        if pattern_id is not None:
            if not isinstance(pattern_id, int) or isinstance(pattern_id, bool) or not 1 <= pattern_id <= MAX_PATTERN_ID:
                raise ValidationError(f"Invalid pattern_id for game {game_number}")

        rows[game_number] = GameRow(
            game_number=game_number,
            playlist_key=playlist_key,
            display_mode=display_mode,
            pattern_id=None if game_number == 1 else pattern_id,
        )

    if not all(n in rows for n in SCORED_GAME_NUMBERS):
        raise ValidationError("games must include game_number 1-5.")

    return [rows[n] for n in sorted(rows)]


def assert_patterns_exist(rows: Iterable[GameRow], patterns: PatternCatalog):
    ids = [r.pattern_id for r in rows if r.pattern_id is not None]
    missing = patterns.missing(ids)
    if missing:
        raise ValidationError(f"Unknown pattern id(s): {', '.join(str(i) for i in missing)}")


def write_game_rows(db: Session, event: Event, rows: List[GameRow]):
    """
    Upsert rows on (event_id, game_number) and drop a bonus the rows leave out

    Stages changes on the session; the caller commits.
    """
    existing = {
        g.game_number: g
        for g in db.query(EventGame).filter(EventGame.event_id == event.id).all()
    }

    for row in rows:
        game = existing.get(row.game_number)
        if game is None:
            game = EventGame(event_id=event.id, game_number=row.game_number)
            db.add(game)
        game.playlist_key = row.playlist_key
        game.display_mode = DisplayMode(row.display_mode)
        game.pattern_id = row.pattern_id

    if not any(r.game_number == BONUS_GAME_NUMBER for r in rows):
        stale = existing.get(BONUS_GAME_NUMBER)
        if stale is not None:
            logger.info("Clearing bonus game for %s", event.event_code)
            db.delete(stale)


def set_games(
    db: Session,
    venue_slug: str,
    games,
    event_code: Optional[str] = None,
    patterns: Optional[PatternCatalog] = None,
) -> Event:
    """Replace the game configuration of a venue's named (or currently active) event"""
    rows = normalize_games(games)
    assert_patterns_exist(rows, patterns or DbPatternCatalog(db))

    venue = get_venue_by_slug(db, venue_slug)
    event = resolve_target_event(db, venue, event_code)

    write_game_rows(db, event, rows)
    commit_or_rollback(db, "update event games")
    logger.info("Saved %d games for %s", len(rows), event.event_code)
    return event


def _row_dict(game: EventGame) -> dict:
    return {
        "game_number": game.game_number,
        "playlist_key": game.playlist_key,
        "display_mode": getattr(game.display_mode, "value", game.display_mode) or "title",
        "pattern_id": game.pattern_id,
    }


def get_game_config(db: Session, venue_slug: str, event_code: str) -> dict:
    """Games 1-5 and the bonus (or None) for a venue's event"""
    venue = get_venue_by_slug(db, venue_slug)
    event = get_event_for_venue(db, venue, event_code)

    rows = (
        db.query(EventGame)
        .filter(EventGame.event_id == event.id)
        .order_by(EventGame.game_number)
        .all()
    )
    games = [_row_dict(r) for r in rows if r.game_number in SCORED_GAME_NUMBERS]
    bonus_row = next((r for r in rows if r.game_number == BONUS_GAME_NUMBER), None)
    bonus = None
    if bonus_row is not None and bonus_row.playlist_key:
        row = _row_dict(bonus_row)
        bonus = {"playlist_key": row["playlist_key"], "display_mode": row["display_mode"]}
    return {"event_code": event.event_code, "games": games, "bonus": bonus}


def set_bonus(db: Session, venue_slug: str, event_code: str, playlist_key: str, display_mode: Optional[str] = None) -> dict:
    """Upsert only the bonus game (game 6) of an event"""
    key = parse_playlist_key(playlist_key)
    mode = parse_display_mode(display_mode, BONUS_GAME_NUMBER)

    venue = get_venue_by_slug(db, venue_slug)
    event = get_event_for_venue(db, venue, event_code)

    bonus = (
        db.query(EventGame)
        .filter(EventGame.event_id == event.id, EventGame.game_number == BONUS_GAME_NUMBER)
        .first()
    )
    if bonus is None:
        bonus = EventGame(event_id=event.id, game_number=BONUS_GAME_NUMBER)
        db.add(bonus)
    bonus.playlist_key = key
    bonus.display_mode = DisplayMode(mode)
    bonus.pattern_id = None

    commit_or_rollback(db, "save bonus game")
    return {"playlist_key": key, "display_mode": mode}


def clear_bonus(db: Session, venue_slug: str, event_code: str) -> bool:
    """Delete the bonus game of an event; True when a row was removed"""
    venue = get_venue_by_slug(db, venue_slug)
    event = get_event_for_venue(db, venue, event_code)

    deleted = (
        db.query(EventGame)
        .filter(EventGame.event_id == event.id, EventGame.game_number == BONUS_GAME_NUMBER)
        .delete()
    )
    commit_or_rollback(db, "remove bonus game")
    return bool(deleted)
