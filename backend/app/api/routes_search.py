"""
Listing search API routes.
The host UI owns the filter state: every call sends the current state and
gets back either a new state (controller-style operations) or a derived
view (results, suggestions, price slider). Nothing is stored server-side.
"""

from fastapi import APIRouter, HTTPException, Query, Request
from typing import Any, Dict, List
import logging

from app.core.config import settings
from app.core.i18n import SUPPORTED_LANGS
from app.core.rate_limiting import limiter, SEARCH_LIMIT, SUGGEST_LIMIT
from app.schemas import (
    ApplySuggestionRequest,
    CatalogStats,
    FilterState,
    ParsedLocation,
    PriceBounds,
    PriceCursorRequest,
    RemoveChipRequest,
    SearchRequest,
    SearchView,
    Suggestion,
)
from app.services.catalog import ListingCatalog
from app.services.locations import parse_location
from app.services.pipeline import recompute, remove_chip
from app.services.search_engine import SORT_MODES
from app.services.suggestions import apply_suggestion
from app.services.translations import deal_type_label, t
from app.services.vocabulary import AMENITY_OPTIONS, DEAL_TYPES, ROOM_OPTIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def get_catalog(request: Request) -> ListingCatalog:
    """The catalog loaded at startup; 503 until it is available."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Listing catalog not loaded")
    return catalog


def _check_lang(lang: str) -> str:
    lang = (lang or settings.default_lang).lower()
    if lang not in SUPPORTED_LANGS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported language: {lang}. Supported: {', '.join(sorted(SUPPORTED_LANGS))}"
        )
    return lang


# ============================================================================
# SEARCH
# ============================================================================

@router.post("", response_model=SearchView)
@limiter.limit(SEARCH_LIMIT)
def search_listings(request: Request, body: SearchRequest):
    """
    Recompute the browsing view for a filter state.

    Returns the filter state after query extraction, the filtered and
    sorted listings, suggestions for the query text, the price slider and
    the active filter chips.
    """
    lang = _check_lang(body.lang)
    catalog = get_catalog(request)
    return recompute(body.filters, catalog, lang=lang)


@router.get("/suggest", response_model=List[Suggestion])
@limiter.limit(SUGGEST_LIMIT)
def suggest(
    request: Request,
    q: str = Query("", description="Partial query text"),
    limit: int = Query(settings.suggestion_limit, ge=1, le=settings.max_suggestion_limit),
    category: str = Query("", description="Selected category, orders room suggestions"),
    lang: str = Query(settings.default_lang, description="Label language (fr, ar)"),
):
    """Ranked autocomplete suggestions for a partial query."""
    lang = _check_lang(lang)
    catalog = get_catalog(request)
    return catalog.ranker.suggest(q, limit=limit, category=category, lang=lang)


@router.post("/suggestions/apply", response_model=FilterState)
@limiter.limit(SEARCH_LIMIT)
def apply_picked_suggestion(request: Request, body: ApplySuggestionRequest):
    """Fold a picked suggestion into the filter state."""
    return apply_suggestion(body.filters, body.suggestion)


@router.post("/chips/remove", response_model=FilterState)
@limiter.limit(SEARCH_LIMIT)
def remove_active_chip(request: Request, body: RemoveChipRequest):
    """Reset the facet behind one active filter chip."""
    return remove_chip(body.filters, body.key)


# ============================================================================
# PRICE RANGE
# ============================================================================

@router.get("/price/bounds", response_model=PriceBounds)
@limiter.limit(SEARCH_LIMIT)
def price_bounds(request: Request):
    """Observed price range of the catalog and the slider step."""
    return get_catalog(request).price_bounds


@router.post("/price/min", response_model=FilterState)
@limiter.limit(SEARCH_LIMIT)
def set_price_min(request: Request, body: PriceCursorRequest):
    """Move the low slider handle; the high handle is pushed up if needed."""
    return get_catalog(request).controller.set_min(body.filters, body.value)


@router.post("/price/max", response_model=FilterState)
@limiter.limit(SEARCH_LIMIT)
def set_price_max(request: Request, body: PriceCursorRequest):
    """Move the high slider handle; the low handle is pulled down if needed."""
    return get_catalog(request).controller.set_max(body.filters, body.value)


# ============================================================================
# LOCATIONS & VOCABULARY
# ============================================================================

@router.get("/locations/communes", response_model=List[str])
@limiter.limit(SEARCH_LIMIT)
def list_communes(request: Request):
    return get_catalog(request).communes.names


@router.get("/locations/parse", response_model=ParsedLocation)
@limiter.limit(SEARCH_LIMIT)
def parse_raw_location(request: Request, raw: str = Query("", description="Free-text location")):
    """Split a free-text location into (commune, district)."""
    return parse_location(raw, get_catalog(request).communes)


@router.get("/options")
@limiter.limit(SEARCH_LIMIT)
def filter_options(request: Request, lang: str = Query(settings.default_lang)) -> Dict[str, Any]:
    """Labelled choices for the filter panel."""
    lang = _check_lang(lang)
    catalog = get_catalog(request)
    return {
        "deal_types": [{"value": d, "label": deal_type_label(d, lang)} for d in DEAL_TYPES],
        "sort_modes": [{"value": s, "label": t(f"sort.{s}", lang)} for s in SORT_MODES],
        "published_within": [
            {"value": p, "label": t(f"published.{p}", lang)} for p in ("all", "7", "30", "90")
        ],
        "rooms": list(ROOM_OPTIONS),
        "amenities": [{"value": k, "label": v} for k, v in AMENITY_OPTIONS.items()],
        "categories": catalog.ranker.categories,
        "communes": catalog.communes.names,
    }


@router.get("/stats", response_model=CatalogStats)
@limiter.limit(SEARCH_LIMIT)
def catalog_stats(request: Request):
    return get_catalog(request).stats()
