"""
Hand-curated events that bypass the database

Keys double as legacy ``config_key`` values on event rows. Pattern cells use
printed-card numbering (1..25); 13 may appear but is ignored.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class LocalGame:
    id: str
    name: str
    playlist_key: str
    display_mode: Optional[str] = None  # None: use the playlist's hint
    pattern_cells: Optional[List[int]] = None


@dataclass(frozen=True)
class LocalEvent:
    id: str
    name: str
    games: List[LocalGame] = field(default_factory=list)


LOCAL_EVENTS: Dict[str, LocalEvent] = {
    e.id: e
    for e in [
        LocalEvent(
            id="launch-night",
            name="Music Video Bingo - Launch Night",
            games=[
                LocalGame("game1", "Game 1", "p1", "artist"),
                LocalGame("game2", "Game 2", "p2", "title", [2, 4, 22, 24]),
                LocalGame("game3", "Game 3", "p3", "artist", [6, 10, 16, 20]),
                LocalGame("game4", "Game 4", "p4", "title", [3, 7, 9, 17, 19, 23]),
                LocalGame("game5", "Game 5", "p5", "artist", [6, 10, 12, 14, 16, 20]),
            ],
        ),
        LocalEvent(
            id="second-demo",
            name="Second Demo Night",
            games=[
                LocalGame("game1", "Early Game - Titles", "p3"),
                LocalGame("game2", "Main Game - Artists", "p2"),
                LocalGame("game3", "Throwback - Titles", "p1"),
                LocalGame("game4", "Wildcard - Artists", "p4"),
                LocalGame("game5", "Late Game - Titles", "p5"),
            ],
        ),
    ]
}


def get_local_event(key: Optional[str]) -> Optional[LocalEvent]:
    return LOCAL_EVENTS.get((key or "").strip())
