"""
Heuristic query extractor.

Reads the free-text query and folds the facets it implies into the
filter state: "F4 vue mer max 2.5M" selects room F4, adds the sea-view
amenity and caps the price at 2 500 000.

Rules are an ordered list of (name, pattern, effect) applied left to
right on the normalized query. An effect only runs when its pattern
matches, and it only writes: amenities are added, never removed, and a
facet set by other means is never cleared.
"""

from __future__ import annotations
from typing import Callable, List, Match, NamedTuple, Optional, Pattern, Set
import logging
import re

from app.schemas import FilterState
from app.services.locations import AliasIndex, CommuneCatalog
from app.services.normalizer import normalize
from app.services.price_range import parse_money
from app.services.vocabulary import (
    AMENITY_NEGATION_TERMS,
    CATEGORY_SUGGESTIONS,
    NEGATION_PREFIXES,
    TRANSACTION_SUGGESTIONS,
)

logger = logging.getLogger(__name__)


class ExtractionContext(NamedTuple):
    communes: CommuneCatalog
    alias_index: AliasIndex
    categories: List[str]
    negated: Set[str]


Effect = Callable[[FilterState, Match, ExtractionContext], FilterState]


class ExtractionRule(NamedTuple):
    name: str
    pattern: Pattern
    effect: Effect


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Amenity keywords, matched on normalized (accent-free) text
AMENITY_KEYWORDS = [
    (r"\bvue\s*mer\b|\bmer\b|\bsea\s*view\b", "vue_mer"),
    (r"\bvue\s*ville\b|\bville\b|\bcity\s*view\b", "vue_ville"),
    (r"\bfibre\b|\bfiber\b|\bwifi\b", "fibre"),
    (r"\blumineu", "lumineux"),
    (r"\bparking\b|\bsous[-\s]?sol\b", "parking_sous_sol"),
    (r"\bgarage\b", "garage"),
    (r"\bbox\b", "box"),
    (r"\bluxe\b", "luxe"),
    (r"\bhaut\s*standing\b", "haut_standing"),
    (r"\bdomotique\b|\bsmart\s*home\b", "domotique"),
    (r"\bclim|\bair\s*condition", "climatisation"),
    (r"\bchauffage\b|\bcentral\b|\bheating\b", "chauffage_central"),
    (r"\bcheminee\b", "cheminee"),
    (r"\bdressing\b", "dressing"),
    (r"\bporte\s*blindee\b", "porte_blindee"),
    (r"\bresidence\s*fermee\b|\bfermee\b|\bgated\b", "residence_fermee"),
    (r"\bsecurite\b|\bh24\b|\bsecurity\b", "securite_h24"),
    (r"\bascenseur\b|\belevator\b|\blift\b", "double_ascenseur"),
    (r"\bconcierge\b|\bgardien\b", "concierge"),
    (r"\bcamera\b|\bsurveillance\b", "camera_surveillance"),
    (r"\bgroupe\s*electrogene\b|\bgenerateur\b", "groupe_electrogene"),
    (r"\bbalcon|\bbalcon(y|ies)\b", "deux_balcons"),
    (r"\bterrasse\b", "terrasse"),
    (r"\bjardin\b", "jardin"),
    (r"\bpiscine\b|\bpool\b", "piscine"),
    (r"\bsalle\s*de\s*sport\b|\bgym\b", "salle_sport"),
    (r"\binterphone\b|\bintercom\b", "interphone"),
    (r"\bcuisine\s*equipee\b|\bequipped\s*kitchen\b", "cuisine_equipee"),
    (r"\bitalienne\b|\bdouche\b|\bmodern\s*bathroom\b", "sdb_italienne"),
]

ROOM_PATTERN = re.compile(r"(?<!\w)(studio|t\s?[1-6]\+?|f\s?[2-6]\+?)(?![\w+])")
PIECES_PATTERN = re.compile(r"\b([1-9])\s*(?:pieces?|rooms?)\b")

_AMOUNT = r"(\d[\d\s.,]*?\s*(?:m|millions?)\b|\d[\d\s.,]*)(?![\d.,]|\s*m2)"
PRICE_MAX_PATTERN = re.compile(r"(?<!\w)(?:max|<=)\s*" + _AMOUNT)
PRICE_MIN_PATTERN = re.compile(r"(?<!\w)(?:min|>=)\s*" + _AMOUNT)
AREA_MAX_PATTERN = re.compile(r"(?<!\w)(?:max|<=)\s*(\d{2,4})\s*m2\b")
AREA_MIN_PATTERN = re.compile(r"(?<!\w)(?:min|>=)\s*(\d{2,4})\s*m2\b")

# Anything, so the location rules always get a chance to look at the text
_ANY = re.compile(r"\S")

# Sub-kinds first: "location 6 mois" is a six-month rental, not just a rental
_TRANSACTION_ORDER = ["six_mois", "douze_mois", "par_nuit", "court_sejour", "par_mois", "Vente", "Location"]


def _phrase(term: str) -> str:
    return r"(?<!\w)" + re.escape(normalize(term)) + r"(?!\w)"


def _mentions(text: str, term: str) -> bool:
    norm = normalize(term)
    return bool(norm) and re.search(_phrase(norm), text) is not None


def find_negated_amenities(normalized_query: str) -> Set[str]:
    """Amenities the query explicitly excludes ("sans piscine", "بدون مصعد")."""
    found: Set[str] = set()
    if not normalized_query:
        return found
    for key, terms in AMENITY_NEGATION_TERMS.items():
        for term in terms:
            if any(
                _mentions(normalized_query, f"{prefix} {term}")
                for prefix in NEGATION_PREFIXES
            ):
                found.add(key)
                break
    return found


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

def _add_amenity(key: str) -> Effect:
    def effect(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
        if key in ctx.negated or key in filters.amenities:
            return filters
        return filters.model_copy(update={"amenities": set(filters.amenities) | {key}})
    return effect


def _exclude_amenities(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    if not ctx.negated or ctx.negated <= filters.excluded_amenities:
        return filters
    return filters.model_copy(
        update={"excluded_amenities": set(filters.excluded_amenities) | ctx.negated}
    )


def _set_room(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    token = match.group(1).replace(" ", "")
    room = "Studio" if token == "studio" else token.upper()
    return filters.model_copy(update={"rooms": room})


def _set_room_from_pieces(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    return filters.model_copy(update={"rooms": f"F{match.group(1)}"})


def _set_price(field: str) -> Effect:
    def effect(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
        amount = parse_money(match.group(1))
        if not amount:
            return filters
        return filters.model_copy(update={field: str(amount)})
    return effect


def _set_area(field: str) -> Effect:
    def effect(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
        return filters.model_copy(update={field: match.group(1)})
    return effect


def _set_deal_type(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    text = match.string
    by_kind = {entry["deal_type"]: entry["terms"] for entry in TRANSACTION_SUGGESTIONS}
    for kind in _TRANSACTION_ORDER:
        terms = [kind.replace("_", " ")] + list(by_kind.get(kind, []))
        if any(_mentions(text, term) for term in terms):
            if filters.deal_type == kind:
                return filters
            return filters.model_copy(update={"deal_type": kind})
    return filters


def _set_category(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    text = match.string
    mention: Optional[str] = None
    for entry in CATEGORY_SUGGESTIONS:
        if any(_mentions(text, term) for term in [entry["label"], *entry["terms"]]):
            mention = str(entry["label"])
            break
    if mention is None:
        mention = next((c for c in ctx.categories if _mentions(text, c)), None)
    if mention is None or normalize(filters.category) == normalize(mention):
        return filters
    return filters.model_copy(update={"category": mention})


def _set_location(filters: FilterState, match: Match, ctx: ExtractionContext) -> FilterState:
    text = match.string
    commune = ctx.communes.find_mention(text)
    if commune:
        return filters.with_commune(commune)

    hint = ctx.alias_index.find_mention(text)
    if hint:
        return filters.with_commune(hint.commune)
    return filters


# ---------------------------------------------------------------------------
# Rule cascade
# ---------------------------------------------------------------------------

def _negation_pattern() -> Pattern:
    prefixes = "|".join(re.escape(normalize(p)) for p in NEGATION_PREFIXES)
    return re.compile(r"(?<!\w)(?:" + prefixes + r")\s")


def _build_rules() -> List[ExtractionRule]:
    rules = [ExtractionRule("excluded_amenities", _negation_pattern(), _exclude_amenities)]
    for pattern, key in AMENITY_KEYWORDS:
        rules.append(ExtractionRule(f"amenity:{key}", re.compile(pattern), _add_amenity(key)))

    transaction_terms = [normalize(t) for entry in TRANSACTION_SUGGESTIONS for t in entry["terms"]]

    rules.extend([
        ExtractionRule("room", ROOM_PATTERN, _set_room),
        ExtractionRule("room_pieces", PIECES_PATTERN, _set_room_from_pieces),
        ExtractionRule("price_max", PRICE_MAX_PATTERN, _set_price("price_max")),
        ExtractionRule("price_min", PRICE_MIN_PATTERN, _set_price("price_min")),
        ExtractionRule("area_max", AREA_MAX_PATTERN, _set_area("area_max")),
        ExtractionRule("area_min", AREA_MIN_PATTERN, _set_area("area_min")),
        ExtractionRule(
            "deal_type",
            re.compile("|".join(_phrase(t) for t in transaction_terms)),
            _set_deal_type,
        ),
        ExtractionRule("category", _ANY, _set_category),
        ExtractionRule("location", _ANY, _set_location),
    ])
    return rules


EXTRACTION_RULES: List[ExtractionRule] = _build_rules()


class QueryExtractor:
    """Applies the rule cascade against one catalog's locations."""

    def __init__(
        self,
        communes: CommuneCatalog,
        alias_index: AliasIndex,
        categories: Optional[List[str]] = None,
        rules: Optional[List[ExtractionRule]] = None,
    ):
        self.communes = communes
        self.alias_index = alias_index
        self.categories = list(categories or [])
        self.rules = rules if rules is not None else EXTRACTION_RULES

    def extract(self, filters: FilterState) -> FilterState:
        """Return `filters` updated with every facet the query text implies."""
        text = normalize(filters.q)
        if not text:
            return filters

        ctx = ExtractionContext(
            communes=self.communes,
            alias_index=self.alias_index,
            categories=self.categories,
            negated=find_negated_amenities(text),
        )
        result = filters
        for rule in self.rules:
            match = rule.pattern.search(text)
            if match is None:
                continue
            result = rule.effect(result, match, ctx)
        return result


def strip_directives(query: str) -> str:
    """Normalized query without its price/area directives ("max 2.5m", "min 80 m2")."""
    text = normalize(query)
    for pattern in (AREA_MAX_PATTERN, AREA_MIN_PATTERN, PRICE_MAX_PATTERN, PRICE_MIN_PATTERN):
        text = pattern.sub(" ", text)
    return re.sub(r"\s+", " ", text).strip()
