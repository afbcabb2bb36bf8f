"""
Pydantic models shared by the search engine and the API layer.

Listing      -- one catalog record, immutable for the browsing session.
FilterState  -- the single source of truth for the browsing screen.
Suggestion   -- one autocomplete entry.
PriceBounds / PriceSlider -- observed price range and cursor view.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Literal, Optional, Set, Tuple
from pydantic import BaseModel, Field, validator


# ========================================================================
# CATALOG
# ========================================================================

class Listing(BaseModel):
    """A published property listing, supplied by the data collaborator.

    `price` and `location` are kept as the raw strings the agency typed;
    they are parsed on demand and never rewritten.
    `amenities` is None when the listing carries no amenity data at all.
    """
    id: str
    ref: str
    title: str = ""
    type: str = "Vente"
    location_type: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: str = ""
    location: str = ""
    beds: int = 0
    baths: int = 0
    area: float = 0
    images: Tuple[str, ...] = ()
    amenities: Optional[FrozenSet[str]] = None
    created_at: Optional[str] = None

    class Config:
        frozen = True

    @validator("id", "ref", pre=True)
    def coerce_identifier(cls, v):
        return "" if v is None else str(v)

    @validator("beds", "baths", "area", pre=True)
    def coerce_number(cls, v):
        if v is None or v == "":
            return 0
        return v

    @validator("images", pre=True)
    def coerce_images(cls, v):
        if v is None:
            return ()
        return v


class ParsedLocation(BaseModel):
    commune: str = ""
    district: str = ""


class AliasEntry(BaseModel):
    """Normalized alias pointing back to a (commune, district) pair."""
    alias: str
    commune: str
    district: str

    class Config:
        frozen = True


class Quartier(BaseModel):
    """A known district row from the location reference table."""
    name: str
    commune: Optional[str] = None


# ========================================================================
# FILTER STATE
# ========================================================================

DealType = Literal[
    "Tous", "Vente", "Location", "par_mois", "six_mois", "douze_mois", "par_nuit", "court_sejour",
]
SortMode = Literal["relevance", "newest", "price_asc", "price_desc", "area_desc"]
ViewMode = Literal["grid", "list"]
PublishedWithin = Literal["all", "7", "30", "90"]


class FilterState(BaseModel):
    """Everything the browsing screen can filter and sort on.

    Numeric bounds are strings because they mirror text inputs: an empty
    string means "unbounded".
    """
    q: str = ""
    deal_type: DealType = "Tous"
    category: str = ""
    published_within: PublishedWithin = "all"
    with_photos_only: bool = False
    commune: str = ""
    district: str = ""
    rooms: str = ""
    price_min: str = ""
    price_max: str = ""
    area_min: str = ""
    area_max: str = ""
    beds_min: str = ""
    baths_min: str = ""
    amenities: Set[str] = Field(default_factory=set)
    excluded_amenities: Set[str] = Field(default_factory=set)
    view: ViewMode = "grid"
    sort: SortMode = "relevance"

    @validator(
        "price_min", "price_max", "area_min", "area_max", "beds_min", "baths_min",
        pre=True,
    )
    def bound_to_string(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    def with_commune(self, commune: str) -> "FilterState":
        """Select a commune; the district is cleared when the commune changes."""
        if commune == self.commune:
            return self.model_copy(deep=True)
        return self.model_copy(update={"commune": commune, "district": ""}, deep=True)


# ========================================================================
# SUGGESTIONS
# ========================================================================

class Suggestion(BaseModel):
    key: str
    type: str
    label: str
    value: str
    score: int = 3
    match_count: int = 0
    deal_type: Optional[str] = None
    category: Optional[str] = None
    commune: Optional[str] = None
    district: Optional[str] = None
    room: Optional[str] = None
    amenity: Optional[str] = None
    hint: str = ""


# ========================================================================
# PRICE RANGE
# ========================================================================

class PriceBounds(BaseModel):
    min: int
    max: int
    step: int
    has_data: bool = True


class PriceSlider(BaseModel):
    min: int
    max: int
    step: int
    min_value: int
    max_value: int
    left_pct: float
    right_pct: float
    has_data: bool = True
    min_label: str = ""
    max_label: str = ""


# ========================================================================
# SEARCH VIEW
# ========================================================================

class FilterChip(BaseModel):
    """One removable "active filter" pill; `clears` lists the facet fields it resets."""
    key: str
    label: str
    clears: List[str]


class SearchView(BaseModel):
    filters: FilterState
    results: List[Listing]
    total: int
    context_count: int
    suggestions: List[Suggestion]
    price: PriceSlider
    chips: List[FilterChip] = Field(default_factory=list)


class SearchRequest(BaseModel):
    filters: FilterState = Field(default_factory=FilterState)
    lang: str = "fr"


class ApplySuggestionRequest(BaseModel):
    filters: FilterState = Field(default_factory=FilterState)
    suggestion: Suggestion


class PriceCursorRequest(BaseModel):
    filters: FilterState = Field(default_factory=FilterState)
    value: float = Field(..., allow_inf_nan=False)


class CatalogStats(BaseModel):
    listings: int
    communes: int
    aliases: int
    price: PriceBounds
    source: str
    by_deal_type: Dict[str, int] = Field(default_factory=dict)


class RemoveChipRequest(BaseModel):
    filters: FilterState = Field(default_factory=FilterState)
    key: str
