"""
Text normalization used for every comparison in the search engine.
Normalized text is never shown to the user; use normalize_display for labels.
"""

from typing import List, Optional
import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[\s,;|/]+")
# Punctuation stuck to a token edge ("oran.", "villa?"); "+" belongs to room codes
_TOKEN_EDGE = re.compile(r"^[^\w+]+|[^\w+]+$")
_COMPACT = re.compile(r"[\s-]+")


def normalize(text: Optional[str]) -> str:
    """Lower-case, strip diacritics and collapse whitespace."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()


def normalize_display(text: Optional[str]) -> str:
    """Collapse whitespace only (keeps case and accents for display)."""
    if text is None:
        return ""
    return _WHITESPACE.sub(" ", str(text)).strip()


def compact(text: str) -> str:
    """Drop spaces and hyphens: "bir el-djir" -> "bireldjir"."""
    return _COMPACT.sub("", text)


def tokenize(query: Optional[str]) -> List[str]:
    """Split a query into normalized tokens, trimming edge punctuation."""
    normalized = normalize(query)
    if not normalized:
        return []
    tokens = (_TOKEN_EDGE.sub("", token) for token in _TOKEN_SPLIT.split(normalized))
    return [token for token in tokens if token]
