from database.connection import SessionLocal, engine, Base
from models.venue import Venue
from models.pattern import Pattern

DEMO_VENUES = [
    {"slug": "pub-x", "name": "Pub X"},
    {"slug": "windfall", "name": "Windfall Taproom", "time_zone": "America/Denver"},
]

# Printed-card numbering, 1..25 left-to-right; 13 is the FREE center
DEFAULT_PATTERNS = [
    (1, "Four Corners", [1, 5, 21, 25]),
    (2, "Small Diamond", [8, 12, 14, 18]),
    (3, "Big X", [1, 5, 7, 9, 17, 19, 21, 25]),
    (4, "Plus Sign", [3, 8, 11, 12, 14, 15, 18, 23]),
    (5, "Postage Stamp", [1, 2, 6, 7]),
    (6, "Outside Frame", [1, 2, 3, 4, 5, 6, 10, 11, 15, 16, 20, 21, 22, 23, 24, 25]),
    (7, "Top Row", [1, 2, 3, 4, 5]),
    (8, "Letter T", [1, 2, 3, 4, 5, 8, 18, 23]),
    (9, "Inner Square", [7, 8, 9, 12, 14, 17, 18, 19]),
    (10, "Blackout", [n for n in range(1, 26) if n != 13]),
]


def seed_database():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        for data in DEMO_VENUES:
            venue = db.query(Venue).filter(Venue.slug == data["slug"]).first()
            if venue:
                print(f"Venue already present: {venue.slug}")
                continue
            db.add(Venue(**data))
            print(f"Venue created: {data['slug']}")

        for pattern_id, name, cells in DEFAULT_PATTERNS:
            pattern = db.query(Pattern).filter(Pattern.id == pattern_id).first()
            if pattern is None:
                pattern = Pattern(id=pattern_id)
                db.add(pattern)
            pattern.name = name
            pattern.cells = cells

        db.commit()
        print(f"{len(DEFAULT_PATTERNS)} patterns loaded")
        print("\nSeed complete.")

    except Exception as e:
        print(f"Seed failed: {e}")
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
