"""
Listing catalog.

The catalog is the immutable listing collection of one browsing session
plus everything derived from it once: the commune list, the district
alias index, the observed price bounds, the suggestion ranker and the
query extractor. Rebuild it (ListingCatalog.build) when the collection
changes; never mutate it.

Loading order at startup: the SQL store, then the JSON seed file, then an
empty catalog.
"""

from __future__ import annotations
from collections import Counter
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple
import json
import logging
import os

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.monitoring import track_performance
from app.db.repositories import ListingRepository
from app.schemas import CatalogStats, Listing, PriceBounds, Quartier
from app.services.extractor import QueryExtractor
from app.services.locations import AliasIndex, CommuneCatalog, ORAN_COMMUNES, build_alias_index
from app.services.price_range import PriceRangeController, compute_bounds
from app.services.search_engine import effective_deal_type
from app.services.suggestions import SuggestionRanker

logger = logging.getLogger(__name__)

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))


class ListingCatalog:
    """Immutable listing collection with its derived search structures."""

    def __init__(
        self,
        listings: Sequence[Listing],
        communes: CommuneCatalog,
        alias_index: AliasIndex,
        price_bounds: PriceBounds,
        source: str = "memory",
    ):
        self.listings: Tuple[Listing, ...] = tuple(listings)
        self.communes = communes
        self.alias_index = alias_index
        self.price_bounds = price_bounds
        self.source = source

        self.controller = PriceRangeController(price_bounds)
        self.ranker = SuggestionRanker(self.listings, communes, alias_index)
        self.extractor = QueryExtractor(communes, alias_index, self.ranker.categories)

    @classmethod
    def build(
        cls,
        listings: Iterable[Listing],
        communes: Optional[Iterable[str]] = None,
        quartiers: Iterable[Quartier] = (),
        source: str = "memory",
    ) -> "ListingCatalog":
        items = _unique_by_ref(listings)
        commune_catalog = CommuneCatalog(communes)
        alias_index = build_alias_index(items, commune_catalog, quartiers)
        bounds = compute_bounds(items)
        logger.info(
            f"Catalog built from {source}: {len(items)} listings, "
            f"{len(commune_catalog)} communes, {len(alias_index)} aliases"
        )
        return cls(items, commune_catalog, alias_index, bounds, source)

    @classmethod
    def empty(cls) -> "ListingCatalog":
        return cls.build([], source="empty")

    def __len__(self) -> int:
        return len(self.listings)

    def stats(self) -> CatalogStats:
        by_deal_type = Counter(effective_deal_type(item) for item in self.listings)
        return CatalogStats(
            listings=len(self.listings),
            communes=len(self.communes),
            aliases=len(self.alias_index),
            price=self.price_bounds,
            source=self.source,
            by_deal_type=dict(by_deal_type),
        )


def _unique_by_ref(listings: Iterable[Listing]) -> List[Listing]:
    """Keep the first listing per ref; refs are unique within a catalog."""
    seen = set()
    unique: List[Listing] = []
    for item in listings:
        key = item.ref or item.id
        if key in seen:
            logger.warning(f"Duplicate listing ref skipped: {key}")
            continue
        seen.add(key)
        unique.append(item)
    return unique


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

def resolve_seed_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(BACKEND_DIR, path)


def load_seed_file(path: str) -> Tuple[List[Listing], List[Quartier]]:
    """Read a JSON seed: either a list of listings or {"listings": [...], "quartiers": [...]}."""
    with open(resolve_seed_path(path), "r", encoding="utf-8") as f:
        data: Any = json.load(f)

    if isinstance(data, list):
        raw_listings, raw_quartiers = data, []
    else:
        raw_listings = data.get("listings", [])
        raw_quartiers = data.get("quartiers", [])

    listings = [Listing(**row) for row in raw_listings]
    quartiers = [Quartier(**row) for row in raw_quartiers]
    return listings, quartiers


def load_from_database(session_factory: Callable[[], Session]) -> Optional[ListingCatalog]:
    """Catalog from the SQL store, or None when the store holds no listings."""
    db = session_factory()
    try:
        repo = ListingRepository(db)
        listings = repo.get_all()
        if not listings:
            return None
        quartiers = repo.get_quartiers()
        communes = ORAN_COMMUNES + repo.get_unique_communes()
    finally:
        db.close()
    return ListingCatalog.build(listings, communes, quartiers, source="database")


@track_performance("catalog_load")
def load_catalog(
    session_factory: Optional[Callable[[], Session]] = None,
    seed_file: Optional[str] = None,
) -> ListingCatalog:
    """Database first, then the seed file, then an empty catalog."""
    if session_factory is not None:
        try:
            catalog = load_from_database(session_factory)
            if catalog is not None:
                return catalog
            logger.warning("Listing store is empty")
        except Exception as e:
            logger.warning(f"Listing store unavailable: {e}")

    seed = seed_file if seed_file is not None else settings.seed_file
    if seed:
        try:
            listings, quartiers = load_seed_file(seed)
            return ListingCatalog.build(listings, quartiers=quartiers, source="seed")
        except (OSError, ValueError) as e:
            logger.warning(f"Seed file {seed} could not be loaded: {e}")

    logger.warning("No listings available, serving an empty catalog")
    return ListingCatalog.empty()
