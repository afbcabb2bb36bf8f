"""Tests for the SQL listing store and the catalog loaders."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base, ListingRecord, QuartierRecord
from app.db.repositories import ListingRepository, join_pipe, split_pipe
from app.services.catalog import ListingCatalog, load_catalog

from conftest import SEED_PATH


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    db = factory()
    db.add_all([
        ListingRecord(
            ref="DB-1", title="Appartement F3", type="Vente", price="9 000 000 DA",
            location="Oran - Hai Sabah", beds=2, baths=1, area=80,
            images="a.jpg|b.jpg", amenities="garage|fibre", created_at="2026-10-01T00:00:00Z",
        ),
        ListingRecord(
            ref="DB-2", title="Villa", type="Location", location_type="par_mois",
            price="150 000 DA", location="Ain El Turk", beds=3, baths=2, area=200,
            images="", amenities=None,
        ),
    ])
    db.add(QuartierRecord(name="Hai Sabah", commune="Oran"))
    db.add(QuartierRecord(name="Douar Belgaid", commune="Sidi Chahmi"))
    db.commit()
    db.close()

    yield factory
    engine.dispose()


def test_pipe_helpers():
    assert split_pipe("a.jpg| |b.jpg") == ["a.jpg", "b.jpg"]
    assert split_pipe(None) == []
    assert join_pipe(["a", " b "]) == "a|b"
    assert join_pipe(None) is None


class TestListingRepository:

    def test_get_all_maps_rows(self, session_factory):
        db = session_factory()
        listings = ListingRepository(db).get_all()
        db.close()

        assert [item.ref for item in listings] == ["DB-1", "DB-2"]
        first, second = listings
        assert first.images == ("a.jpg", "b.jpg")
        assert first.amenities == frozenset({"garage", "fibre"})
        assert second.amenities is None
        assert second.images == ()
        assert first.id == "1"

    def test_quartiers_and_communes(self, session_factory):
        db = session_factory()
        repo = ListingRepository(db)
        assert [q.name for q in repo.get_quartiers()] == ["Hai Sabah", "Douar Belgaid"]
        assert repo.get_unique_communes() == ["Oran", "Sidi Chahmi"]
        db.close()


class TestLoadCatalog:

    def test_database_first(self, session_factory):
        catalog = load_catalog(session_factory, seed_file=SEED_PATH)
        assert catalog.source == "database"
        assert len(catalog) == 2
        assert "Sidi Chahmi" in catalog.communes
        assert catalog.alias_index.lookup("douar belgaid").commune == "Sidi Chahmi"

    def test_empty_store_falls_back_to_seed(self):
        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        Base.metadata.create_all(engine)
        catalog = load_catalog(sessionmaker(bind=engine), seed_file=SEED_PATH)
        assert catalog.source == "seed"
        assert len(catalog) == 10

    def test_broken_store_falls_back_to_seed(self):
        def broken():
            raise RuntimeError("connection refused")
        assert load_catalog(broken, seed_file=SEED_PATH).source == "seed"

    def test_missing_seed_gives_empty_catalog(self):
        catalog = load_catalog(None, seed_file="does/not/exist.json")
        assert catalog.source == "empty"
        assert len(catalog) == 0
        assert not catalog.price_bounds.has_data

    def test_seed_disabled(self):
        assert load_catalog(None, seed_file="").source == "empty"


def test_duplicate_refs_keep_first(listings):
    catalog = ListingCatalog.build(list(listings) + [listings[0].model_copy(update={"title": "copy"})])
    assert len(catalog) == len(listings)
    assert catalog.listings[0].title == listings[0].title


def test_stats(catalog):
    stats = catalog.stats()
    assert stats.listings == 10
    assert stats.source == "seed"
    assert stats.by_deal_type["Vente"] == 4
    assert stats.by_deal_type["par_mois"] == 2
