"""
Faceted filter & sort engine.

Every listing is flattened into one normalized "haystack" string used for
free-text matching; the structured facets (deal type, location, rooms,
price, area, amenities...) are checked against the listing fields. A
listing is kept only when every active predicate passes. Nothing here
mutates the listings it is given.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Set
import logging
import re

from app.schemas import FilterState, Listing
from app.services.extractor import strip_directives
from app.services.locations import (
    AliasIndex,
    CommuneCatalog,
    DEFAULT_COMMUNES,
    location_aliases,
    parse_location,
)
from app.services.normalizer import compact, normalize, tokenize
from app.services.price_range import parse_money
from app.services.vocabulary import (
    AMENITY_NEGATION_TERMS,
    CATEGORY_SUGGESTIONS,
    DEAL_ANY,
    DEAL_RENTAL,
    DEAL_SALE,
    NEGATION_PREFIXES,
    SEARCH_ALIAS_MAP,
    amenity_label,
    transaction_terms,
)

logger = logging.getLogger(__name__)

SORT_MODES = ["relevance", "newest", "price_asc", "price_desc", "area_desc"]

# Stored location_type values, most specific first
_STORED_DEAL_TYPES = [
    (DEAL_SALE, ["vente", "sale"]),
    ("par_nuit", ["par_nuit", "par nuit", "par nuite", "night"]),
    ("court_sejour", ["court_sejour", "court sejour", "short stay", "vacance", "weekend"]),
    ("douze_mois", ["douze_mois", "douze mois", "12 mois", "12mois", "annuel", "year"]),
    ("six_mois", ["six_mois", "six mois", "6 mois", "6mois"]),
    ("par_mois", ["par_mois", "par mois", "mensuel", "monthly"]),
    (DEAL_RENTAL, ["location", "louer", "rent", "rental", "lease", "كراء", "ايجار"]),
]

_ROOM_TOKEN = re.compile(r"^([tf])\s*([1-9])(\+)?$")
_ROOM_PIECES = re.compile(r"\b([1-9])\s*(?:pieces?|rooms?)\b")


# ---------------------------------------------------------------------------
# Listing text
# ---------------------------------------------------------------------------

def stored_deal_type(value: Optional[str]) -> Optional[str]:
    """Map a stored location_type ("par_mois", "Location 12 mois"...) to a deal type."""
    norm = normalize(value)
    if not norm:
        return None
    for deal_type, terms in _STORED_DEAL_TYPES:
        if any(term in norm for term in terms):
            return deal_type
    return None


def effective_deal_type(listing: Listing) -> str:
    return stored_deal_type(listing.location_type) or listing.type


def infer_categories(listing: Listing) -> List[str]:
    """Seed category labels whose terms appear in the title or category."""
    text = normalize(f"{listing.title} {listing.category or ''}")
    if not text:
        return []
    return [
        str(entry["label"]) for entry in CATEGORY_SUGGESTIONS
        if any(normalize(term) in text for term in entry["terms"])
    ]


def build_haystack(listing: Listing, communes: Optional[CommuneCatalog] = None) -> str:
    parsed = parse_location(listing.location, communes or DEFAULT_COMMUNES)
    deal_type = effective_deal_type(listing)
    amenity_labels = [amenity_label(key) for key in sorted(listing.amenities or [])]
    area = int(listing.area) if float(listing.area).is_integer() else listing.area

    return normalize(" ".join([
        listing.title,
        listing.category or "",
        listing.description or "",
        listing.type,
        listing.location_type or "",
        listing.price,
        listing.location,
        parsed.commune,
        parsed.district,
        " ".join(infer_categories(listing)),
        deal_type,
        " ".join(transaction_terms(deal_type)),
        " ".join(amenity_labels),
        f"{listing.beds} chambres beds",
        f"{listing.baths} salles bain baths",
        f"{area} m2",
    ]))


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------

def token_variants(token: str) -> List[str]:
    """The token, its compact form and its registered alias spellings."""
    norm = normalize(token)
    if not norm:
        return []
    aliases = [normalize(a) for a in SEARCH_ALIAS_MAP.get(norm, [])]
    variants = [norm, compact(norm)] + aliases + [compact(a) for a in aliases]
    return list(dict.fromkeys(v for v in variants if v))


def token_matches(haystack: str, token: str) -> bool:
    variants = token_variants(token)
    if not variants:
        return False
    if any(v in haystack for v in variants):
        return True
    compact_hay = compact(haystack)
    return any(compact(v) in compact_hay for v in variants)


def implied_tokens(filters: FilterState, alias_index: Optional[AliasIndex] = None) -> Set[str]:
    """Query tokens already accounted for by an active structured facet.

    "location canastel" with deal_type=Location and district=Canastel should
    not also require the literal words in every listing's text.
    """
    tokens: Set[str] = set()

    def add(value: str) -> None:
        tokens.update(tokenize(value))

    if filters.deal_type and filters.deal_type != DEAL_ANY:
        add(filters.deal_type.replace("_", " "))
        for term in transaction_terms(filters.deal_type):
            add(term)

    if filters.category:
        add(filters.category)
        category_norm = normalize(filters.category)
        for entry in CATEGORY_SUGGESTIONS:
            terms = [normalize(t) for t in entry["terms"]]
            if normalize(entry["label"]) == category_norm or category_norm in terms:
                for term in terms:
                    add(term)

    if filters.rooms:
        room = normalize(filters.rooms)
        add(room)
        if room.startswith("t"):
            add("f" + room[1:])
        elif room.startswith("f"):
            add("t" + room[1:])

    if filters.commune:
        for alias in location_aliases(filters.commune):
            add(alias)

    if filters.district:
        for alias in location_aliases(filters.district):
            add(alias)
        if alias_index is not None:
            for alias in alias_index.aliases_for(filters.commune, filters.district):
                add(alias)

    for key in filters.amenities:
        add(amenity_label(key))
        for term in AMENITY_NEGATION_TERMS.get(key, []):
            add(term)

    if filters.excluded_amenities:
        for prefix in NEGATION_PREFIXES:
            add(prefix)
        for key in filters.excluded_amenities:
            add(amenity_label(key))
            for term in AMENITY_NEGATION_TERMS.get(key, []):
                add(term)

    return tokens


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def deal_type_matches(listing: Listing, deal_type: str, haystack: str) -> bool:
    if not deal_type or deal_type == DEAL_ANY:
        return True
    effective = effective_deal_type(listing)
    if deal_type == DEAL_SALE:
        return effective == DEAL_SALE
    if deal_type == DEAL_RENTAL:
        return effective != DEAL_SALE
    if effective == deal_type:
        return True
    return effective == DEAL_RENTAL and any(
        normalize(term) in haystack for term in transaction_terms(deal_type)
    )


def room_matches(listing: Listing, room: str) -> bool:
    """Room code found in the title/location, else inferred from the bedroom count."""
    room_norm = normalize(room)
    if not room_norm:
        return True
    text = normalize(f"{listing.title} {listing.location}")
    if room_norm in text:
        return True

    if room_norm == "studio":
        return 0 < listing.beds <= 1

    match = _ROOM_TOKEN.match(room_norm)
    if match:
        pieces, plus = int(match.group(2)), match.group(3) == "+"
        if plus and room_norm.rstrip("+") in text:
            return True
    else:
        pieces_match = _ROOM_PIECES.search(room_norm)
        if not pieces_match:
            return False
        pieces, plus = int(pieces_match.group(1)), False

    if listing.beds <= 0:
        return False
    expected_beds = max(1, pieces - 1)
    if plus:
        return listing.beds >= expected_beds
    return listing.beds in (expected_beds, pieces)


def _positive_number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def published_within_matches(listing: Listing, published_within: str, now: datetime) -> bool:
    if not published_within or published_within == "all":
        return True
    days = _positive_number(published_within)
    if days is None:
        return True
    created = _parse_timestamp(listing.created_at)
    if created is None:
        return True
    return now - created <= timedelta(days=days)


def amenities_match(listing: Listing, selected: Set[str], excluded: Set[str]) -> bool:
    """Listings without amenity data pass; a present set must hold every selected key."""
    if listing.amenities is None:
        return True
    if selected and not selected.issubset(listing.amenities):
        return False
    return not (excluded & listing.amenities)


# ---------------------------------------------------------------------------
# Filter & sort
# ---------------------------------------------------------------------------

def apply_filters(
    listings: Iterable[Listing],
    filters: FilterState,
    communes: Optional[CommuneCatalog] = None,
    alias_index: Optional[AliasIndex] = None,
    now: Optional[datetime] = None,
    include_amenities: bool = True,
) -> List[Listing]:
    """Listings passing every active predicate, in source order."""
    catalog = communes or DEFAULT_COMMUNES
    now = now or datetime.now(timezone.utc)

    tokens = tokenize(strip_directives(filters.q))
    satisfied = implied_tokens(filters, alias_index)
    free_tokens = [t for t in tokens if t not in satisfied]

    price_min = parse_money(filters.price_min)
    price_max = parse_money(filters.price_max)
    area_min = _positive_number(filters.area_min)
    area_max = _positive_number(filters.area_max)
    beds_min = _positive_number(filters.beds_min)
    baths_min = _positive_number(filters.baths_min)
    category_norm = normalize(filters.category)
    commune_norm = normalize(filters.commune)
    district_norm = normalize(filters.district)
    selected = set(filters.amenities) if include_amenities else set()
    excluded = set(filters.excluded_amenities)

    results: List[Listing] = []
    for listing in listings:
        haystack = build_haystack(listing, catalog)

        if not deal_type_matches(listing, filters.deal_type, haystack):
            continue
        if not all(token_matches(haystack, t) for t in free_tokens):
            continue
        if category_norm and category_norm not in haystack:
            continue

        if commune_norm or district_norm:
            parsed = parse_location(listing.location, catalog)
            if commune_norm and normalize(parsed.commune) != commune_norm:
                continue
            if district_norm and normalize(parsed.district) != district_norm:
                continue

        if filters.rooms and not room_matches(listing, filters.rooms):
            continue

        price = parse_money(listing.price)
        if price is not None:
            if price_min is not None and price < price_min:
                continue
            if price_max is not None and price > price_max:
                continue

        if area_min is not None and listing.area < area_min:
            continue
        if area_max is not None and listing.area > area_max:
            continue
        if beds_min is not None and listing.beds < beds_min:
            continue
        if baths_min is not None and listing.baths < baths_min:
            continue

        if filters.with_photos_only and not listing.images:
            continue
        if not published_within_matches(listing, filters.published_within, now):
            continue
        if not amenities_match(listing, selected, excluded):
            continue

        results.append(listing)

    return results


def sort_listings(listings: Sequence[Listing], sort: str) -> List[Listing]:
    """Sorted copy; "relevance" (or an unknown mode) keeps source order."""
    if sort == "price_asc":
        return sorted(listings, key=lambda item: parse_money(item.price) or 0)
    if sort == "price_desc":
        return sorted(listings, key=lambda item: parse_money(item.price) or 0, reverse=True)
    if sort == "area_desc":
        return sorted(listings, key=lambda item: item.area, reverse=True)
    if sort == "newest":
        return sorted(listings, key=lambda item: item.ref or item.id, reverse=True)
    return list(listings)


def search(
    listings: Iterable[Listing],
    filters: FilterState,
    communes: Optional[CommuneCatalog] = None,
    alias_index: Optional[AliasIndex] = None,
    now: Optional[datetime] = None,
) -> List[Listing]:
    return sort_listings(apply_filters(listings, filters, communes, alias_index, now), filters.sort)
