"""
Event lifecycle for a venue: scheduled -> active -> completed

Rules enforced here:
- event_code is "<venue slug>--<YYYY-MM-DD>" and an existing code is reused
- only the event dated "today" in the venue's time zone may become active
- activating an event first completes every other active event of the venue

The complete-others step and the activate step share one transaction but
take no lock, so two hosts activating the same venue at the same moment can
still interleave. One host per venue is assumed.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from database.connection import commit_or_rollback
from models.event import Event, EventStatus
from models.venue import Venue
from services.catalogs import DbPatternCatalog, PatternCatalog
from services.event_overrides import get_local_event
from services.games import assert_patterns_exist, normalize_games, write_game_rows
from services.venues import get_venue_by_slug, venue_time_zone
from utils.errors import NotFoundError, ValidationError
from utils.settings import EVENT_START_HOUR
from utils.timezones import DATE_RE, parse_event_date, start_at_for_local_time, today_in_time_zone

logger = logging.getLogger(__name__)

EVENT_CODE_SEPARATOR = "--"


def build_event_code(venue_slug: str, event_date: str) -> str:
    return f"{venue_slug}{EVENT_CODE_SEPARATOR}{event_date}"


def event_date_from_code(event_code: str) -> Optional[str]:
    """Date suffix of an event code, or None when it is not YYYY-MM-DD"""
    maybe = (event_code or "").split(EVENT_CODE_SEPARATOR)[-1]
    return maybe if DATE_RE.match(maybe) else None


def resolve_config_key(config_key: Optional[str]) -> Optional[str]:
    """Empty means no legacy key; anything else must name a local override"""
    raw = (config_key or "").strip()
    if not raw:
        return None
    if get_local_event(raw) is None:
        raise ValidationError(f"Unknown config_key: {raw}")
    return raw


def _complete_active_events(db: Session, venue: Venue, keep_id: Optional[str] = None) -> int:
    query = db.query(Event).filter(Event.venue_id == venue.id, Event.status == EventStatus.ACTIVE)
    if keep_id is not None:
        query = query.filter(Event.id != keep_id)
    return query.update({Event.status: EventStatus.COMPLETED}, synchronize_session="fetch")


def _require_today(event_date: str, time_zone: str, now: Optional[datetime], hint: str = "") -> None:
    today = today_in_time_zone(time_zone, now).isoformat()
    if event_date != today:
        raise ValidationError(
            f"Cannot activate an event for {event_date}. "
            f"Only today's event ({today}) can be activated.{hint}"
        )


def create_or_activate(
    db: Session,
    venue_slug: str,
    event_date: str,
    name: Optional[str] = None,
    config_key: Optional[str] = None,
    games=None,
    make_active: bool = False,
    now: Optional[datetime] = None,
    patterns: Optional[PatternCatalog] = None,
) -> Event:
    """
    Create or update the venue's event for ``event_date``

    With ``make_active`` the event must be dated today in the venue's time
    zone; every other active event of the venue is completed first.
    Without it a new event starts as scheduled and an existing one keeps
    its status. Supplied games are written with the same rules as set_games.
    """
    event_date = (event_date or "").strip()
    parse_event_date(event_date)
    key = resolve_config_key(config_key)

    rows = normalize_games(games) if games is not None else None
    if rows is not None:
        assert_patterns_exist(rows, patterns or DbPatternCatalog(db))

    venue = get_venue_by_slug(db, venue_slug)
    time_zone = venue_time_zone(venue)

    if make_active:
        _require_today(
            event_date, time_zone, now,
            hint=" Create it as scheduled and activate it on the day of.",
        )

    event_code = build_event_code(venue.slug, event_date)
    start_at = start_at_for_local_time(parse_event_date(event_date), time_zone, EVENT_START_HOUR)
    default_name = f"{venue.name or venue.slug} - {event_date}"

    event = db.query(Event).filter(Event.event_code == event_code).first()
    if event is None:
        event = Event(venue_id=venue.id, event_code=event_code, status=EventStatus.SCHEDULED)
        db.add(event)
    elif event.venue_id != venue.id:
        raise ValidationError(f"Event code {event_code} belongs to another venue.")

    if make_active:
        completed = _complete_active_events(db, venue, keep_id=event.id)
        if completed:
            logger.info("Completed %d active event(s) for %s", completed, venue.slug)

    event.name = (name or "").strip() or default_name
    event.start_at = start_at.replace(tzinfo=None)
    if make_active:
        event.status = EventStatus.ACTIVE
    event.config_key = key
    db.flush()

    if rows is not None:
        write_game_rows(db, event, rows)

    commit_or_rollback(db, "create/update event")
    db.refresh(event)
    logger.info("Saved event %s as %s", event.event_code, event.status.value)
    return event


def activate_existing(db: Session, venue_slug: str, event_code: str, now: Optional[datetime] = None) -> Event:
    """Activate an already created event; only allowed on its own date"""
    event_code = (event_code or "").strip()
    if not event_code:
        raise ValidationError("Missing event_code.")

    venue = get_venue_by_slug(db, venue_slug)

    event_date = event_date_from_code(event_code)
    if event_date is None:
        raise ValidationError("Invalid event_code format.")
    _require_today(event_date, venue_time_zone(venue), now)

    event = (
        db.query(Event)
        .filter(Event.venue_id == venue.id, Event.event_code == event_code)
        .first()
    )
    if event is None:
        raise NotFoundError("Event not found for this venue.")

    _complete_active_events(db, venue, keep_id=event.id)
    event.status = EventStatus.ACTIVE
    commit_or_rollback(db, "activate event")
    db.refresh(event)
    logger.info("Activated event %s", event.event_code)
    return event


def deactivate_all(db: Session, venue_slug: str) -> int:
    """Complete every active event of the venue; returns how many changed"""
    venue = get_venue_by_slug(db, venue_slug)
    completed = _complete_active_events(db, venue)
    commit_or_rollback(db, "end active event")
    logger.info("Deactivated %d event(s) for %s", completed, venue.slug)
    return completed
