from pydantic import BaseModel, Field
from typing import Optional, List

from schemas.game import GameIn
from utils.timezones import to_utc_iso


class EventCreate(BaseModel):
    venue_slug: str = Field(..., min_length=1)
    event_date: str  # YYYY-MM-DD, checked by the activation service
    name: Optional[str] = None
    config_key: Optional[str] = None  # legacy fallback only
    make_active: bool = False
    games: Optional[List[GameIn]] = None


class EventActivate(BaseModel):
    venue_slug: str = Field(..., min_length=1)
    event_code: str = Field(..., min_length=1)


class VenueEvents(BaseModel):
    venue_slug: str = Field(..., min_length=1)


def event_payload(event) -> dict:
    """Public shape of an event row"""
    return {
        "id": event.id,
        "event_code": event.event_code,
        "name": event.name,
        "start_at": to_utc_iso(event.start_at),
        "status": getattr(event.status, "value", event.status),
        "config_key": event.config_key,
    }
