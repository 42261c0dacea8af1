"""
Test configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from database.connection import Base, get_db

# Import all models BEFORE importing app to ensure they're registered
from models.venue import Venue
from models.event import Event
from models.event_game import EventGame
from models.pattern import Pattern

from main import app
from services.catalogs import InMemoryPlaylistCatalog, Playlist, PlaylistItem, get_playlist_catalog
from utils.settings import DEFAULT_TIME_ZONE
from utils.timezones import today_in_time_zone

# Test database (file-based SQLite for better connection handling)
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    echo=False  # Set to True to debug SQL
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_playlist(key, size, display_mode="title"):
    base = int(key[1:]) * 1000
    items = [
        PlaylistItem(id=base + i, title=f"{key} Song {i}", artist=f"{key} Artist {i}")
        for i in range(1, size + 1)
    ]
    return Playlist(key=key, name=f"Playlist {key}", display_mode=display_mode, items=items)


TEST_PLAYLISTS = InMemoryPlaylistCatalog(
    [make_playlist(f"p{n}", 30, "artist" if n % 2 == 0 else "title") for n in range(1, 7)]
    + [make_playlist("p7", 10)]
)


@pytest.fixture
def db_session():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Create a test client with test database"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_playlist_catalog] = lambda: TEST_PLAYLISTS
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def playlists():
    return TEST_PLAYLISTS


@pytest.fixture
def venue(db_session):
    """The demo venue every host test works against"""
    v = Venue(slug="pub-x", name="Pub X")
    db_session.add(v)
    db_session.commit()
    db_session.refresh(v)
    return v


@pytest.fixture
def other_venue(db_session):
    v = Venue(slug="pub-y", name="Pub Y")
    db_session.add(v)
    db_session.commit()
    db_session.refresh(v)
    return v


@pytest.fixture
def patterns(db_session):
    """Patterns 1-5; 13 sneaks into pattern 3 and must be ignored"""
    rows = [
        Pattern(id=1, name="Four Corners", cells=[1, 5, 21, 25]),
        Pattern(id=2, name="Small Diamond", cells=[8, 12, 14, 18]),
        Pattern(id=3, name="Plus Sign", cells=[3, 8, 11, 12, 13, 14, 15, 18, 23]),
        Pattern(id=4, name="Top Row", cells=[1, 2, 3, 4, 5]),
        Pattern(id=5, name="Postage Stamp", cells=[1, 2, 6, 7]),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def today():
    """Today's date at the default venue time zone, YYYY-MM-DD"""
    return today_in_time_zone(DEFAULT_TIME_ZONE).isoformat()


def scored_games(pattern_ids=(None, 1, 2, 3, 4)):
    """Games 1-5 on playlists p1-p5 with the given pattern per game"""
    return [
        {
            "game_number": n,
            "playlist_key": f"p{n}",
            "display_mode": "artist" if n % 2 == 0 else "title",
            "pattern_id": pattern_ids[n - 1],
        }
        for n in range(1, 6)
    ]


@pytest.fixture
def games_payload():
    return scored_games


@pytest.fixture
def bonus_game():
    return {"game_number": 6, "playlist_key": "p6", "display_mode": "title", "pattern_id": None}
