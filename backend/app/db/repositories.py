"""
Repository pattern for data access.
Read-only queries that turn stored rows into catalog models.
"""

from typing import List, Optional
from sqlalchemy.orm import Session
import logging

from app.db.models import ListingRecord, QuartierRecord
from app.schemas import Listing, Quartier

logger = logging.getLogger(__name__)


def split_pipe(value: Optional[str]) -> List[str]:
    """Split a pipe-delimited column, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split("|") if part.strip()]


def join_pipe(values) -> Optional[str]:
    if values is None:
        return None
    return "|".join(str(v).strip() for v in values if str(v).strip())


def record_to_listing(row: ListingRecord) -> Listing:
    """Map an ORM row to the immutable catalog model."""
    return Listing(
        id=row.id,
        ref=row.ref,
        title=row.title or "",
        type=row.type or "Vente",
        location_type=row.location_type,
        category=row.category,
        description=row.description,
        price=row.price or "",
        location=row.location or "",
        beds=row.beds,
        baths=row.baths,
        area=row.area,
        images=tuple(split_pipe(row.images)),
        amenities=None if row.amenities is None else frozenset(split_pipe(row.amenities)),
        created_at=row.created_at,
    )


class ListingRepository:
    """
    Repository for the listings and quartiers tables.
    Errors are logged and surface as empty results.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Listing]:
        """All listings, in insertion (id) order."""
        try:
            rows = self.db.query(ListingRecord).order_by(ListingRecord.id).all()
            return [record_to_listing(row) for row in rows]
        except Exception as e:
            logger.error(f"Error fetching listings: {str(e)}")
            return []

    def get_quartiers(self) -> List[Quartier]:
        try:
            rows = self.db.query(QuartierRecord).order_by(QuartierRecord.id).all()
            return [Quartier(name=row.name, commune=row.commune) for row in rows if row.name]
        except Exception as e:
            logger.error(f"Error fetching quartiers: {str(e)}")
            return []

    def get_unique_communes(self) -> List[str]:
        """Communes named by the quartier reference table."""
        try:
            rows = (
                self.db.query(QuartierRecord.commune)
                .filter(QuartierRecord.commune.isnot(None))
                .distinct()
                .all()
            )
            return sorted({r[0].strip() for r in rows if r[0] and r[0].strip()})
        except Exception as e:
            logger.error(f"Error fetching communes: {str(e)}")
            return []
