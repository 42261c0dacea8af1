from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from models.venue import Venue
from schemas.venue import VenueResponse
from services.cards import InsufficientPlaylistError, card_to_dict, generate_card
from services.catalogs import DbPatternCatalog, PlaylistCatalog, get_playlist_catalog
from services.event_config import build_resolver
from services.venues import get_active_event
from utils.errors import NotFoundError, ValidationError
from utils.timezones import to_utc_iso

router = APIRouter(prefix="/public")


@router.get("/venue")
def get_venue(venue_slug: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    venue = db.query(Venue).filter(Venue.slug == venue_slug.strip()).first()
    return {"ok": True, "venue": VenueResponse.model_validate(venue).model_dump() if venue else None}


@router.get("/active-event")
def get_venue_active_event(venue_id: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """The venue's live event, or null between bingo nights"""
    event = get_active_event(db, venue_id)
    if not event:
        return {"ok": True, "event": None}
    return {"ok": True, "event": {"event_code": event.event_code, "start_at": to_utc_iso(event.start_at)}}


@router.get("/event-config")
def get_event_config(
    event_code: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    playlists: PlaylistCatalog = Depends(get_playlist_catalog),
):
    """
    Everything a phone needs to play an event
    Only active events (or hand-curated overrides) resolve
    """
    patterns = DbPatternCatalog(db)
    resolver = build_resolver(db, playlists=playlists, patterns=patterns, active_only=True)
    event = resolver.resolve(event_code)
    if event is None:
        raise NotFoundError("This event isn't available. Check your link or ask your host for the QR code.")

    return {
        "ok": True,
        "event": event.to_dict(),
        "patterns": [p.to_dict() for p in patterns.all()],
    }


@router.get("/events/{event_code}/games/{game_id}/card")
def deal_card(
    event_code: str,
    game_id: str,
    db: Session = Depends(get_db),
    playlists: PlaylistCatalog = Depends(get_playlist_catalog),
):
    """Deal a fresh card for one game of an active event"""
    event = build_resolver(db, playlists=playlists, active_only=True).resolve(event_code)
    if event is None:
        raise NotFoundError("Event not found.")

    game = event.game(game_id)
    if game is None:
        raise NotFoundError(f"Game {game_id} is not part of this event.")

    playlist = playlists.get(game.playlist_key)
    if playlist is None:
        raise NotFoundError(f"Playlist {game.playlist_key} is not available.")

    try:
        card = generate_card(playlist.items)
    except InsufficientPlaylistError as e:
        raise ValidationError(str(e))

    return {
        "ok": True,
        "game": game.to_dict(),
        "card": card_to_dict(card),
    }
