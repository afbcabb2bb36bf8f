"""
Seed the SQLite listing store from data/sample_listings.json.
Creates the listings and quartiers tables and inserts every row.
Run from backend/: python scripts/seed_sqlite.py [path/to/seed.json]
"""

import json
import os
import sys

# Add backend directory to path for app imports
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, BACKEND_DIR)

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base, ListingRecord, QuartierRecord
from app.db.repositories import join_pipe


def main():
    db_path = os.path.join(BACKEND_DIR, "listings.db")
    db_url = f"sqlite:///{db_path}"
    print(f"Database: {db_path}")

    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    with engine.connect() as conn:
        conn.execute(text("PRAGMA journal_mode=WAL"))
        conn.execute(text("PRAGMA synchronous=NORMAL"))
        conn.commit()

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print("Tables created")

    json_path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(BACKEND_DIR, "data", "sample_listings.json")
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    listings = data if isinstance(data, list) else data.get("listings", [])
    quartiers = [] if isinstance(data, list) else data.get("quartiers", [])
    print(f"Loaded {len(listings)} listings and {len(quartiers)} quartiers from JSON")

    Session = sessionmaker(bind=engine)
    session = Session()

    count = 0
    errors = 0
    seen_refs = set()

    for item in listings:
        ref = str(item.get("ref") or "").strip()
        if not ref or ref in seen_refs:
            errors += 1
            continue
        seen_refs.add(ref)

        session.add(ListingRecord(
            ref=ref,
            title=item.get("title") or "",
            type=item.get("type") or "Vente",
            location_type=item.get("location_type"),
            category=item.get("category"),
            description=item.get("description"),
            price=str(item.get("price") or ""),
            location=item.get("location") or "",
            beds=int(item.get("beds") or 0),
            baths=int(item.get("baths") or 0),
            area=float(item.get("area") or 0),
            images=join_pipe(item.get("images") or []),
            amenities=join_pipe(item.get("amenities")),
            created_at=item.get("created_at"),
        ))
        count += 1

        if count % 500 == 0:
            session.commit()
            print(f"  ...inserted {count}")

    for row in quartiers:
        if row.get("name"):
            session.add(QuartierRecord(name=row["name"], commune=row.get("commune")))

    session.commit()

    total = session.execute(text("SELECT COUNT(*) FROM listings")).scalar()
    communes = session.execute(
        text("SELECT COUNT(DISTINCT commune) FROM quartiers WHERE commune IS NOT NULL")
    ).scalar()

    print(f"\nDone! Inserted {count} listings ({errors} skipped)")
    print(f"Verified: {total} rows in listings")
    print(f"Quartier communes: {communes}")

    session.close()
    engine.dispose()
    print("\nSeed complete!")


if __name__ == "__main__":
    main()
