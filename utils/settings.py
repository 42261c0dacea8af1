"""
Runtime settings read from the environment (``.env`` is honoured)
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# For now every venue without its own time_zone runs on Denver time
DEFAULT_TIME_ZONE = os.getenv("DEFAULT_TIME_ZONE", "America/Denver")
EVENT_START_HOUR = int(os.getenv("EVENT_START_HOUR", 19))

MAX_PLAYLIST_NUMBER = int(os.getenv("MAX_PLAYLIST_NUMBER", 20))
MAX_PATTERN_ID = int(os.getenv("MAX_PATTERN_ID", 25))

PLAYLISTS_PATH = os.getenv("PLAYLISTS_PATH", str(BASE_DIR / "data" / "playlists.json"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
