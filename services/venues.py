"""
Venue and event lookups shared by the host and player endpoints
"""
from typing import Optional

from sqlalchemy.orm import Session

from models.event import Event, EventStatus
from models.venue import Venue
from utils.errors import NotFoundError, ValidationError
from utils.settings import DEFAULT_TIME_ZONE


def get_venue_by_slug(db: Session, venue_slug: str) -> Venue:
    slug = (venue_slug or "").strip()
    if not slug:
        raise ValidationError("Missing venue_slug.")
    venue = db.query(Venue).filter(Venue.slug == slug).first()
    if not venue:
        raise NotFoundError("Venue not found.")
    return venue


def venue_time_zone(venue: Venue) -> str:
    return (venue.time_zone or "").strip() or DEFAULT_TIME_ZONE


def get_event_for_venue(db: Session, venue: Venue, event_code: str) -> Event:
    """
    Event by code, scoped to ``venue``

    An event that exists under another venue is reported as not found here.
    """
    event_code = (event_code or "").strip()
    if not event_code:
        raise ValidationError("Missing event_code.")
    event = db.query(Event).filter(Event.event_code == event_code).first()
    if not event or event.venue_id != venue.id:
        raise NotFoundError("Event not found for this venue.")
    return event


def get_active_event(db: Session, venue_id: str) -> Optional[Event]:
    return (
        db.query(Event)
        .filter(Event.venue_id == venue_id, Event.status == EventStatus.ACTIVE)
        .order_by(Event.start_at.desc())
        .first()
    )


def resolve_target_event(db: Session, venue: Venue, event_code: Optional[str]) -> Event:
    """Explicit event_code for the venue, or the venue's current active event"""
    code = (event_code or "").strip()
    if code:
        return get_event_for_venue(db, venue, code)
    event = get_active_event(db, venue.id)
    if not event:
        raise NotFoundError("No active event found for this venue.")
    return event
