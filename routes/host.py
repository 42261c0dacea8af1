from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from models.event import Event
from models.event_game import EventGame
from models.venue import Venue
from schemas.event import EventCreate, EventActivate, VenueEvents, event_payload
from schemas.game import GamesUpdate, BonusUpdate, BonusClear
from services import activation, games as games_service
from services.catalogs import DbPatternCatalog
from services.venues import get_event_for_venue, get_venue_by_slug
from utils.qr import player_url, qr_data_uri
from utils.timezones import to_utc_iso

router = APIRouter(prefix="/host")

DASHBOARD_EVENT_LIMIT = 25


@router.get("/venues")
def list_venues(db: Session = Depends(get_db)):
    venues = db.query(Venue).order_by(Venue.name).all()
    return {"ok": True, "venues": [{"slug": v.slug, "name": v.name} for v in venues]}


@router.get("/venue-dashboard")
def venue_dashboard(venue_slug: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """
    Venue overview for the host screen
    Most recent events first, with every game row of those events
    """
    venue = get_venue_by_slug(db, venue_slug)

    events = (
        db.query(Event)
        .filter(Event.venue_id == venue.id)
        .order_by(Event.start_at.desc())
        .limit(DASHBOARD_EVENT_LIMIT)
        .all()
    )
    ids = [e.id for e in events]
    game_rows = []
    if ids:
        game_rows = (
            db.query(EventGame)
            .filter(EventGame.event_id.in_(ids))
            .order_by(EventGame.game_number)
            .all()
        )

    return {
        "ok": True,
        "venue": {"id": venue.id, "slug": venue.slug, "name": venue.name},
        "events": [event_payload(e) for e in events],
        "event_games": [
            {
                "event_id": g.event_id,
                "game_number": g.game_number,
                "playlist_key": g.playlist_key,
                "display_mode": g.display_mode.value,
                "pattern_id": g.pattern_id,
            }
            for g in game_rows
        ],
    }


@router.post("/events")
def create_or_activate_event(body: EventCreate, db: Session = Depends(get_db)):
    """
    Create (or update) the venue's event for a date
    make_active is only honoured for today's date; other active events are completed
    """
    event = activation.create_or_activate(
        db,
        venue_slug=body.venue_slug,
        event_date=body.event_date,
        name=body.name,
        config_key=body.config_key,
        games=body.games,
        make_active=body.make_active,
    )
    return {"ok": True, "event": event_payload(event)}


@router.patch("/events")
def activate_event(body: EventActivate, db: Session = Depends(get_db)):
    """Activate an existing event by code (today only)"""
    event = activation.activate_existing(db, body.venue_slug, body.event_code)
    return {"ok": True, "event": event_payload(event)}


@router.delete("/events")
def end_active_events(body: VenueEvents, db: Session = Depends(get_db)):
    completed = activation.deactivate_all(db, body.venue_slug)
    return {"ok": True, "completed": completed}


@router.patch("/events/games")
def update_event_games(body: GamesUpdate, db: Session = Depends(get_db)):
    """Write games 1-5 (+ optional bonus 6) for the named or currently active event"""
    event = games_service.set_games(db, body.venue_slug, body.games, event_code=body.event_code)
    return {"ok": True, "event_code": event.event_code}


@router.get("/events/config")
def event_game_config(
    venue_slug: str = Query(..., min_length=1),
    event_code: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    config = games_service.get_game_config(db, venue_slug, event_code)
    return {"ok": True, "games": config["games"], "bonus": config["bonus"]}


@router.get("/events/bonus")
def get_bonus_game(
    venue_slug: str = Query(..., min_length=1),
    event_code: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    config = games_service.get_game_config(db, venue_slug, event_code)
    return {"ok": True, "bonus": config["bonus"]}


@router.patch("/events/bonus")
def set_bonus_game(body: BonusUpdate, db: Session = Depends(get_db)):
    bonus = games_service.set_bonus(db, body.venue_slug, body.event_code, body.playlist_key, body.display_mode)
    return {"ok": True, "bonus": bonus}


@router.delete("/events/bonus")
def clear_bonus_game(body: BonusClear, db: Session = Depends(get_db)):
    games_service.clear_bonus(db, body.venue_slug, body.event_code)
    return {"ok": True}


@router.get("/events/{event_code}/qr")
def event_qr_code(event_code: str, venue_slug: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Player link for an event and the QR code to print for the tables"""
    venue = get_venue_by_slug(db, venue_slug)
    event = get_event_for_venue(db, venue, event_code)
    url = player_url(event.event_code)
    return {
        "ok": True,
        "event_code": event.event_code,
        "start_at": to_utc_iso(event.start_at),
        "url": url,
        "qr_code": qr_data_uri(url),
    }


@router.get("/patterns")
def list_patterns(db: Session = Depends(get_db)):
    patterns = DbPatternCatalog(db).all()
    return {"ok": True, "patterns": [p.to_dict() for p in patterns]}
