"""
Shared fixtures: the sample Oran catalog and an in-process API client.

Run: pytest backend/tests -v
"""

from datetime import datetime, timezone
import os

import pytest
from fastapi.testclient import TestClient

from app.services.catalog import ListingCatalog, load_seed_file

SEED_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "sample_listings.json")

# Fixed clock so "published within" filters are stable
NOW = datetime(2026, 10, 19, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def seed():
    return load_seed_file(SEED_PATH)


@pytest.fixture(scope="session")
def listings(seed):
    return seed[0]


@pytest.fixture(scope="session")
def catalog(seed):
    listings, quartiers = seed
    return ListingCatalog.build(listings, quartiers=quartiers, source="seed")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def client(catalog):
    """API client over the sample catalog (startup hooks are not run)."""
    from app.main import app

    previous = getattr(app.state, "catalog", None)
    app.state.catalog = catalog
    yield TestClient(app)
    app.state.catalog = previous