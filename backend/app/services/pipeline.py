"""
Search pipeline.

`recompute` is the one entry point the browsing screen calls after every
filter-state change (keystroke, suggestion pick, slider move). It runs
the query extractor, filters and sorts the catalog, ranks suggestions and
reads the price slider, all from the filter state alone. Calling it twice
with the same state gives the same view.
"""

from datetime import datetime
from typing import List, Optional
import logging

from app.core.config import settings
from app.core.monitoring import track_performance
from app.schemas import FilterChip, FilterState, SearchView
from app.services.catalog import ListingCatalog
from app.services.price_range import format_money, parse_money
from app.services.search_engine import apply_filters, sort_listings
from app.services.translations import deal_type_label, t
from app.services.vocabulary import DEAL_ANY, amenity_label

logger = logging.getLogger(__name__)

# Filter state fields reset when a chip is removed
_CHIP_CLEARS = {
    "deal_type": {"deal_type": DEAL_ANY},
    "category": {"category": ""},
    "published_within": {"published_within": "all"},
    "with_photos_only": {"with_photos_only": False},
    "commune": {"commune": "", "district": ""},
    "district": {"district": ""},
    "rooms": {"rooms": ""},
    "price": {"price_min": "", "price_max": ""},
    "area": {"area_min": "", "area_max": ""},
    "beds_min": {"beds_min": ""},
    "baths_min": {"baths_min": ""},
}


def _money_label(value: str, lang: str, fallback: str) -> str:
    amount = parse_money(value)
    return format_money(amount, lang) if amount is not None else fallback


def build_chips(filters: FilterState, lang: str = "fr") -> List[FilterChip]:
    """One removable chip per active facet, in display order."""
    chips: List[FilterChip] = []

    def add(key: str, label: str) -> None:
        clears = list(_CHIP_CLEARS.get(key, {}).keys())
        chips.append(FilterChip(key=key, label=label, clears=clears))

    if filters.deal_type != DEAL_ANY:
        add("deal_type", deal_type_label(filters.deal_type, lang))
    if filters.category:
        add("category", filters.category)
    if filters.published_within != "all":
        add("published_within", t(f"published.{filters.published_within}", lang))
    if filters.with_photos_only:
        add("with_photos_only", t("chip.photos_only", lang))
    if filters.commune:
        add("commune", filters.commune)
    if filters.district:
        add("district", filters.district)
    if filters.rooms:
        add("rooms", filters.rooms)

    for key in sorted(filters.amenities):
        chips.append(FilterChip(key=f"amenity:{key}", label=amenity_label(key), clears=["amenities"]))
    for key in sorted(filters.excluded_amenities):
        chips.append(FilterChip(
            key=f"excluded_amenity:{key}",
            label=t("chip.excluded", lang, label=amenity_label(key)),
            clears=["excluded_amenities"],
        ))

    if filters.price_min or filters.price_max:
        add("price", t(
            "chip.price", lang,
            low=_money_label(filters.price_min, lang, "0"),
            high=_money_label(filters.price_max, lang, "∞"),
        ))
    if filters.area_min or filters.area_max:
        add("area", t("chip.area", lang, low=filters.area_min or "0", high=filters.area_max or "∞"))
    if filters.beds_min:
        add("beds_min", t("chip.beds", lang, count=filters.beds_min))
    if filters.baths_min:
        add("baths_min", t("chip.baths", lang, count=filters.baths_min))

    return chips


def remove_chip(filters: FilterState, key: str) -> FilterState:
    """Filter state with the facet behind chip `key` reset; unknown keys are a no-op."""
    if key.startswith("amenity:"):
        amenity = key.split(":", 1)[1]
        return filters.model_copy(update={"amenities": set(filters.amenities) - {amenity}})
    if key.startswith("excluded_amenity:"):
        amenity = key.split(":", 1)[1]
        return filters.model_copy(
            update={"excluded_amenities": set(filters.excluded_amenities) - {amenity}}
        )
    update = _CHIP_CLEARS.get(key)
    if not update:
        return filters
    return filters.model_copy(update=update, deep=True)


@track_performance("recompute")
def recompute(
    filters: FilterState,
    catalog: ListingCatalog,
    lang: str = "fr",
    now: Optional[datetime] = None,
    suggestion_limit: Optional[int] = None,
) -> SearchView:
    """Derive the whole browsing view from a filter state."""
    state = catalog.extractor.extract(filters)

    matched = apply_filters(catalog.listings, state, catalog.communes, catalog.alias_index, now)
    context = apply_filters(
        catalog.listings, state, catalog.communes, catalog.alias_index, now,
        include_amenities=False,
    )
    results = sort_listings(matched, state.sort)

    limit = suggestion_limit if suggestion_limit is not None else settings.suggestion_limit
    suggestions = catalog.ranker.suggest(state.q, limit=limit, category=state.category, lang=lang)

    logger.debug(f"recompute q={state.q!r}: {len(results)}/{len(catalog)} listings")
    return SearchView(
        filters=state,
        results=results,
        total=len(results),
        context_count=len(context),
        suggestions=suggestions,
        price=catalog.controller.slider(state, lang),
        chips=build_chips(state, lang),
    )
