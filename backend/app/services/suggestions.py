"""
Suggestion ranker.

Builds the autocomplete list shown under the search box. Candidates come
from the vocabulary tables (transactions, categories, rooms, amenities),
the commune list and the district alias index; a candidate is kept when
its searchable text contains the normalized query, then ranked:

    0  label (or the whole searchable text) equals the query
    1  label (or searchable text) starts with the query
    2  label contains the query
    3  only a synonym/alias contains the query

Ties are broken by label. Match counts (how many catalog listings a
suggestion would select) are computed once per catalog.
"""

from __future__ import annotations
from typing import Dict, List, NamedTuple, Sequence
import logging

from app.schemas import FilterState, Listing, Suggestion
from app.services.locations import AliasIndex, CommuneCatalog, parse_location
from app.services.normalizer import normalize, normalize_display
from app.services.search_engine import (
    build_haystack,
    deal_type_matches,
    infer_categories,
    room_matches,
)
from app.services.translations import deal_type_label, t
from app.services.vocabulary import (
    AMENITY_NEGATION_TERMS,
    AMENITY_OPTIONS,
    APARTMENT_TERMS,
    CATEGORY_SUGGESTIONS,
    HOUSE_TERMS,
    NON_ROOM_CATEGORY_TERMS,
    ROOM_OPTIONS,
    TRANSACTION_SUGGESTIONS,
)

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    suggestion: Suggestion
    search_text: str


# ---------------------------------------------------------------------------
# Category-aware room options
# ---------------------------------------------------------------------------

def infer_category_context(query: str, explicit: str = "") -> str:
    """Selected category, else the first seed category the query mentions."""
    explicit = normalize_display(explicit)
    if explicit:
        return explicit
    text = normalize(query)
    if not text:
        return ""
    for entry in CATEGORY_SUGGESTIONS:
        if any(normalize(term) in text for term in entry["terms"]):
            return str(entry["label"])
    return ""


def category_supports_rooms(category: str) -> bool:
    text = normalize(category)
    if not text:
        return True
    return not any(normalize(term) in text for term in NON_ROOM_CATEGORY_TERMS)


def category_aware_rooms(category: str) -> List[str]:
    """Room codes to offer for a category: none for land/shops/offices,
    F-codes first for apartments, T-codes first for houses."""
    if not category:
        return list(ROOM_OPTIONS)
    if not category_supports_rooms(category):
        return []

    text = normalize(category)
    studio = [r for r in ROOM_OPTIONS if normalize(r) == "studio"]
    f_rooms = [r for r in ROOM_OPTIONS if normalize(r).startswith("f")]
    t_rooms = [r for r in ROOM_OPTIONS if normalize(r).startswith("t")]

    if any(normalize(term) in text for term in APARTMENT_TERMS):
        return studio + f_rooms + t_rooms
    if any(normalize(term) in text for term in HOUSE_TERMS):
        return t_rooms + f_rooms + studio
    return list(ROOM_OPTIONS)


def score_candidate(label: str, search_text: str, query: str) -> int:
    label_norm = normalize(label)
    if label_norm == query or search_text == query:
        return 0
    if label_norm.startswith(query) or search_text.startswith(query):
        return 1
    if query in label_norm:
        return 2
    return 3


# ---------------------------------------------------------------------------
# Ranker
# ---------------------------------------------------------------------------

class SuggestionRanker:
    """Autocomplete over one listing collection."""

    def __init__(
        self,
        listings: Sequence[Listing],
        communes: CommuneCatalog,
        alias_index: AliasIndex,
    ):
        self.listings = tuple(listings)
        self.communes = communes
        self.alias_index = alias_index

        self._haystacks = [build_haystack(item, communes) for item in self.listings]
        self._locations = [parse_location(item.location, communes) for item in self.listings]
        self._categories = self._collect_categories()
        self._counts: Dict[str, int] = {}
        for candidate in self._candidates("fr", ROOM_OPTIONS):
            self._counts[candidate.suggestion.key] = self._count(candidate.suggestion)
        logger.info(f"Suggestion ranker ready: {len(self._counts)} candidates")

    def _collect_categories(self) -> List[str]:
        labels = [str(entry["label"]) for entry in CATEGORY_SUGGESTIONS]
        for item in self.listings:
            labels.extend(infer_categories(item))
            if item.category:
                labels.append(normalize_display(item.category))
        seen: Dict[str, str] = {}
        for label in labels:
            if label and normalize(label) not in seen:
                seen[normalize(label)] = label
        return list(seen.values())

    @property
    def categories(self) -> List[str]:
        return list(self._categories)

    def _count(self, suggestion: Suggestion) -> int:
        """Number of listings the suggestion would select on its own."""
        pairs = zip(self.listings, self._haystacks)

        if suggestion.type == "transaction" and suggestion.deal_type:
            return sum(1 for item, hay in pairs if deal_type_matches(item, suggestion.deal_type, hay))
        if suggestion.type == "category" and suggestion.category:
            wanted = normalize(suggestion.category)
            return sum(1 for hay in self._haystacks if wanted in hay)
        if suggestion.type == "commune" and suggestion.commune:
            wanted = normalize(suggestion.commune)
            return sum(1 for loc in self._locations if normalize(loc.commune) == wanted)
        if suggestion.type == "district" and suggestion.district:
            district = normalize(suggestion.district)
            commune = normalize(suggestion.commune)
            return sum(
                1 for loc in self._locations
                if normalize(loc.district) == district
                and (not commune or normalize(loc.commune) == commune)
            )
        if suggestion.type == "room" and suggestion.room:
            return sum(1 for item in self.listings if room_matches(item, suggestion.room))
        if suggestion.type == "amenity" and suggestion.amenity:
            return sum(1 for item in self.listings if item.amenities and suggestion.amenity in item.amenities)
        return 0

    def _candidates(self, lang: str, rooms: Sequence[str]) -> List[Candidate]:
        candidates: List[Candidate] = []

        def push(suggestion: Suggestion, search_text: str) -> None:
            candidates.append(Candidate(suggestion, normalize(search_text)))

        for entry in TRANSACTION_SUGGESTIONS:
            deal_type = str(entry["deal_type"])
            label = deal_type_label(deal_type, lang)
            push(
                Suggestion(
                    key=f"transaction:{deal_type}", type="transaction",
                    label=label, value=label, deal_type=deal_type,
                ),
                " ".join([label, deal_type_label(deal_type, "fr"), *entry["terms"]]),
            )

        for label in self._categories:
            seed = next(
                (e for e in CATEGORY_SUGGESTIONS if normalize(e["label"]) == normalize(label)),
                None,
            )
            terms = list(seed["terms"]) if seed else [label]
            push(
                Suggestion(
                    key=f"category:{normalize(label)}", type="category",
                    label=label, value=label, category=label,
                ),
                " ".join([label, *terms]),
            )

        for commune in self.communes.names:
            push(
                Suggestion(
                    key=f"commune:{normalize(commune)}", type="commune",
                    label=commune, value=commune, commune=commune,
                ),
                commune,
            )

        for commune, district, aliases in self.alias_index.districts():
            push(
                Suggestion(
                    key=f"district:{normalize(commune)}|{normalize(district)}", type="district",
                    label=f"{district} - {commune}", value=district,
                    commune=commune, district=district,
                ),
                " ".join([district, commune, *aliases]),
            )

        for room in rooms:
            push(
                Suggestion(key=f"room:{room}", type="room", label=room, value=room, room=room),
                room,
            )

        for key, label in AMENITY_OPTIONS.items():
            push(
                Suggestion(key=f"amenity:{key}", type="amenity", label=label, value=label, amenity=key),
                " ".join([label, key.replace("_", " "), *AMENITY_NEGATION_TERMS.get(key, [])]),
            )

        return candidates

    def suggest(
        self,
        query: str,
        limit: int = 8,
        category: str = "",
        lang: str = "fr",
    ) -> List[Suggestion]:
        """Ranked, de-duplicated suggestions for a partial query."""
        q = normalize(query)
        if not q or limit <= 0:
            return []

        rooms = category_aware_rooms(infer_category_context(query, category))
        scored = []
        for order, candidate in enumerate(self._candidates(lang, rooms)):
            if q not in candidate.search_text:
                continue
            label = candidate.suggestion.label
            score = score_candidate(label, candidate.search_text, q)
            scored.append((score, normalize(label), order, candidate.suggestion))
        scored.sort(key=lambda row: row[:3])

        seen = set()
        results: List[Suggestion] = []
        for score, _, _, suggestion in scored:
            if suggestion.key in seen:
                continue
            seen.add(suggestion.key)
            results.append(suggestion.model_copy(update={
                "score": score,
                "match_count": self._counts.get(suggestion.key, 0),
                "hint": suggestion_hint(suggestion, lang),
            }))
            if len(results) >= limit:
                break
        return results


def suggestion_hint(suggestion: Suggestion, lang: str = "fr") -> str:
    if suggestion.type == "district" and suggestion.commune:
        return t("hint.district", lang, commune=suggestion.commune)
    return t(f"hint.{suggestion.type}", lang)


def apply_suggestion(filters: FilterState, suggestion: Suggestion) -> FilterState:
    """Fold a picked suggestion into the filter state; unrelated facets are kept."""
    update: Dict[str, object] = {"q": suggestion.value}

    if suggestion.type == "transaction" and suggestion.deal_type:
        update["deal_type"] = suggestion.deal_type
    elif suggestion.type == "category" and suggestion.category:
        update["category"] = suggestion.category
    elif suggestion.type == "commune" and suggestion.commune:
        update["commune"] = suggestion.commune
        update["district"] = ""
    elif suggestion.type == "district":
        if suggestion.commune:
            update["commune"] = suggestion.commune
        if suggestion.district:
            update["district"] = suggestion.district
    elif suggestion.type == "room" and suggestion.room:
        update["rooms"] = suggestion.room
    elif suggestion.type == "amenity" and suggestion.amenity:
        update["amenities"] = set(filters.amenities) | {suggestion.amenity}

    return filters.model_copy(update=update, deep=True)
