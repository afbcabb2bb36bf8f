"""
Location catalog & alias resolver.

Listing locations are free text typed by agencies, combining a commune
(official unit) and a district (neighbourhood) with any delimiter:
  - "Canastel, Bir El Djir"          (district first, commune second)
  - "Oran/Maraval"                    (commune first, district second)
  - "Bir El Djir - Canastel - Res. X" (commune, district, detail)
  - "Oran · Canastel"                 (older separator variant)

The alias index maps every district spelling seen in the catalog back to
its (commune, district) pair so that a bare "canastel" in a query can be
resolved to Bir El Djir.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging
import re

from app.schemas import AliasEntry, Listing, ParsedLocation, Quartier
from app.services.normalizer import normalize, normalize_display

logger = logging.getLogger(__name__)

# Communes of the Oran wilaya covered by the marketplace
ORAN_COMMUNES: List[str] = [
    "Oran",
    "Bir El Djir",
    "Es Senia",
    "Arzew",
    "Ain El Turk",
    "Mers El Kebir",
    "Bethioua",
    "Gdyel",
    "Marsa El Hadjadj",
    "El Ancor",
    "Oued Tlelat",
    "Tafraoui",
    "Sidi Chami",
    "Boufatis",
    "Bousfer",
    "Boutlelis",
    "Ain El Kerma",
    "Hassi Bounif",
    "Hassi Ben Okba",
    "Ben Freha",
    "Hassi Mefsoukh",
]

LOCATION_DELIMITERS = re.compile(r"[-,|/·•–—]")
_ALIAS_DELIMITERS = re.compile(r"\s*[-,|/·•–—]\s*")

# Common misspellings and legacy records: (alias, commune, district)
ALIAS_SAFETY_NET: List[Tuple[str, str, str]] = [
    ("canastel", "Bir El Djir", "Canastel"),
    ("canastl", "Bir El Djir", "Canastel"),
]


# ---------------------------------------------------------------------------
# Commune catalog
# ---------------------------------------------------------------------------

class CommuneCatalog:
    """Known communes, matched by normalized equality."""

    def __init__(self, communes: Optional[Iterable[str]] = None):
        by_norm: Dict[str, str] = {}
        for value in communes or []:
            clean = normalize_display(value)
            norm = normalize(clean)
            if clean and norm and norm not in by_norm:
                by_norm[norm] = clean
        if not by_norm:
            for commune in ORAN_COMMUNES:
                by_norm[normalize(commune)] = commune
        self._by_norm = by_norm
        # Longest names first so "Ain El Kerma" wins over a shorter overlap
        self._by_length = sorted(by_norm.items(), key=lambda item: len(item[0]), reverse=True)

    @property
    def names(self) -> List[str]:
        return sorted(self._by_norm.values(), key=normalize)

    def __len__(self) -> int:
        return len(self._by_norm)

    def __contains__(self, value: str) -> bool:
        return normalize(value) in self._by_norm

    def resolve(self, value: str) -> Optional[str]:
        """Canonical label of the commune `value` names, or None."""
        return self._by_norm.get(normalize(value))

    def find_mention(self, normalized_text: str) -> Optional[str]:
        """Longest commune named (as whole words) inside already-normalized text."""
        if not normalized_text:
            return None
        for norm, raw in self._by_length:
            if _contains_phrase(normalized_text, norm):
                return raw
        return None


def _contains_phrase(haystack: str, phrase: str) -> bool:
    return re.search(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)", haystack) is not None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def split_location(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in LOCATION_DELIMITERS.split(raw or "") if part.strip()]


def parse_location(raw: Optional[str], communes: Optional[CommuneCatalog] = None) -> ParsedLocation:
    """Split a free-text location into (commune, district). Never raises."""
    catalog = communes or DEFAULT_COMMUNES
    parts = split_location(raw)

    if not parts:
        return ParsedLocation()

    if len(parts) == 1:
        found = catalog.resolve(parts[0])
        if found:
            return ParsedLocation(commune=found, district="")
        return ParsedLocation(commune="", district=parts[0])

    for idx, part in enumerate(parts):
        found = catalog.resolve(part)
        if found:
            rest = [p for i, p in enumerate(parts) if i != idx]
            return ParsedLocation(commune=found, district=" - ".join(rest))

    # No official commune in the string: keep everything as district
    return ParsedLocation(commune="", district=" - ".join(parts))


def location_aliases(value: Optional[str]) -> List[str]:
    """Normalized whole value plus each delimiter-split part."""
    normalized = normalize(value)
    if not normalized:
        return []
    parts = [p.strip() for p in _ALIAS_DELIMITERS.split(normalized) if p.strip()]
    return list(dict.fromkeys([normalized] + parts))


# ---------------------------------------------------------------------------
# Alias index
# ---------------------------------------------------------------------------

class AliasIndex:
    """Immutable district alias table, longest alias first."""

    def __init__(self, entries: Sequence[AliasEntry]):
        self._entries: Tuple[AliasEntry, ...] = tuple(entries)

    @property
    def entries(self) -> Tuple[AliasEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def lookup(self, alias: str) -> Optional[AliasEntry]:
        wanted = normalize(alias)
        for entry in self._entries:
            if entry.alias == wanted:
                return entry
        return None

    def find_mention(self, normalized_text: str) -> Optional[AliasEntry]:
        """First (longest) alias named, as whole words, in already-normalized text."""
        if not normalized_text:
            return None
        for entry in self._entries:
            if _contains_phrase(normalized_text, entry.alias):
                return entry
        return None

    def aliases_for(self, commune: str, district: str) -> List[str]:
        commune_norm = normalize(commune)
        district_norm = normalize(district)
        return [
            entry.alias for entry in self._entries
            if normalize(entry.district) == district_norm
            and (not commune_norm or normalize(entry.commune) == commune_norm)
        ]

    def districts(self) -> List[Tuple[str, str, List[str]]]:
        """(commune, district, aliases) grouped per district, index order."""
        grouped: Dict[str, Tuple[str, str, List[str]]] = {}
        for entry in self._entries:
            key = f"{normalize(entry.commune)}|{normalize(entry.district)}"
            if key in grouped:
                grouped[key][2].append(entry.alias)
            else:
                grouped[key] = (entry.commune, entry.district, [entry.alias])
        return list(grouped.values())


def build_alias_index(
    listings: Iterable[Listing],
    communes: Optional[CommuneCatalog] = None,
    quartiers: Iterable[Quartier] = (),
) -> AliasIndex:
    """Mine district aliases from a listing collection.

    First writer wins per normalized alias: listing-derived aliases, then
    the known quartier rows, then the misspelling safety net.
    """
    catalog = communes or DEFAULT_COMMUNES
    hints: Dict[str, AliasEntry] = {}

    def add_hint(alias: str, commune: str, district: str) -> None:
        alias_norm = normalize(alias)
        if not alias_norm or not commune or not district:
            return
        if alias_norm not in hints:
            hints[alias_norm] = AliasEntry(alias=alias_norm, commune=commune, district=district)

    for listing in listings:
        parsed = parse_location(listing.location, catalog)
        if not parsed.commune or not parsed.district:
            continue
        for alias in location_aliases(parsed.district):
            add_hint(alias, parsed.commune, parsed.district)

    for row in quartiers:
        district = normalize_display(row.name)
        raw_commune = normalize_display(row.commune)
        if not district or not raw_commune:
            continue
        commune = catalog.resolve(raw_commune) or raw_commune
        for alias in location_aliases(district):
            add_hint(alias, commune, district)

    for alias, commune, district in ALIAS_SAFETY_NET:
        add_hint(alias, commune, district)

    entries = sorted(hints.values(), key=lambda e: len(e.alias), reverse=True)
    logger.debug(f"Alias index built: {len(entries)} aliases")
    return AliasIndex(entries)


DEFAULT_COMMUNES = CommuneCatalog(ORAN_COMMUNES)
