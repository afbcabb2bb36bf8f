"""
Database models -- SQLAlchemy ORM definitions.
The listing store is owned by the marketplace back-office; this service
only reads it once at startup to build the in-memory catalog.
Compatible with both PostgreSQL and SQLite.
"""

from sqlalchemy import Column, Float, Integer, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ListingRecord(Base):
    """
    Published property listing.
    `images` and `amenities` are pipe-delimited ("a.jpg|b.jpg").
    `amenities` NULL means the agency never filled the amenity form.
    """
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    ref = Column(Text, unique=True, index=True, nullable=False)
    title = Column(Text, default="")
    type = Column(Text, index=True, default="Vente")
    location_type = Column(Text)
    category = Column(Text, index=True)
    description = Column(Text)
    price = Column(Text, default="")
    location = Column(Text, default="")
    beds = Column(Integer, default=0)
    baths = Column(Integer, default=0)
    area = Column(Float, default=0)
    images = Column(Text)
    amenities = Column(Text)
    created_at = Column(Text, index=True)


class QuartierRecord(Base):
    """Known district of a commune, maintained by the back-office."""
    __tablename__ = "quartiers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False, index=True)
    commune = Column(Text, index=True)
