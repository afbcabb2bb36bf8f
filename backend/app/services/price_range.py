"""
Price Range Controller.

Derives the observed price range of a catalog and drives the dual-thumb
slider: two cursors that always satisfy min <= min_value <= max_value <= max.
Moving one handle past the other drags the other handle along; a move is
never rejected. A cursor left on its observed bound is stored as "" in the
filter state, meaning "no price filter on that side".
"""

from __future__ import annotations
from typing import Iterable, Optional
import logging
import math
import re

from app.core.config import settings
from app.schemas import FilterState, Listing, PriceBounds, PriceSlider

logger = logging.getLogger(__name__)

_MILLIONS = re.compile(r"(\d+(?:[.,]\d+)?)\s*(m|millions?)\b")
_NON_DIGITS = re.compile(r"[^\d]")


def parse_money(value: Optional[str]) -> Optional[int]:
    """Parse a locale-formatted price ("2 500 000 DA", "2.5M") to an integer.

    Returns None when the text holds no digits.
    """
    s = str(value or "").lower().strip()
    if not s:
        return None

    m_match = _MILLIONS.search(s)
    if m_match:
        try:
            val = float(m_match.group(1).replace(",", "."))
        except ValueError:
            val = math.nan
        if math.isfinite(val):
            return int(round(val * 1_000_000))

    digits = _NON_DIGITS.sub("", s)
    if not digits:
        return None
    return int(digits)


def step_for_span(span: int) -> int:
    if span > 30_000_000:
        return 500_000
    if span > 10_000_000:
        return 250_000
    if span > 2_000_000:
        return 100_000
    return 50_000


def compute_bounds(listings: Iterable[Listing]) -> PriceBounds:
    """Observed min/max over the listings whose price parses."""
    prices = [p for p in (parse_money(item.price) for item in listings) if p is not None]

    if not prices:
        return PriceBounds(
            min=settings.default_price_min,
            max=settings.default_price_max,
            step=settings.default_price_step,
            has_data=False,
        )

    low, high = min(prices), max(prices)
    step = step_for_span(max(high - low, 1))
    if high == low:
        high = low + step
    return PriceBounds(min=low, max=high, step=step, has_data=True)


def to_filter_value(value: float, bound: int, kind: str) -> str:
    """Convert a cursor back into a filter string ("" when left on the bound)."""
    rounded = int(round(value))
    if kind == "min" and rounded <= bound:
        return ""
    if kind == "max" and rounded >= bound:
        return ""
    return str(rounded)


def format_money(value: float, lang: str = "fr") -> str:
    """Compact DZD display: 2 500 000 -> "2,5 M DA", 750 000 -> "750 k DA"."""
    currency = "دج" if lang == "ar" else "DA"
    if value is None or not math.isfinite(value):
        return f"0 {currency}"

    amount = abs(value)
    if amount >= 1_000_000_000:
        number, suffix = value / 1_000_000_000, " Md"
    elif amount >= 1_000_000:
        number, suffix = value / 1_000_000, " M"
    elif amount >= 1_000:
        number, suffix = value / 1_000, " k"
    else:
        number, suffix = value, ""

    text = f"{number:.1f}".rstrip("0").rstrip(".")
    if lang != "ar":
        text = text.replace(".", ",")
    return f"{text}{suffix} {currency}"


class PriceRangeController:
    """Clamped dual-cursor state over the observed price bounds."""

    def __init__(self, bounds: PriceBounds):
        self.bounds = bounds

    def _clamp(self, value: float) -> int:
        return int(max(self.bounds.min, min(round(value), self.bounds.max)))

    def cursors(self, filters: FilterState) -> tuple:
        """(min_value, max_value) read from the filter strings, clamped."""
        parsed_min = parse_money(filters.price_min)
        parsed_max = parse_money(filters.price_max)

        min_value = self._clamp(parsed_min if parsed_min is not None else self.bounds.min)
        max_value = self._clamp(parsed_max if parsed_max is not None else self.bounds.max)
        max_value = max(min_value, max_value)
        return min_value, max_value

    def slider(self, filters: FilterState, lang: str = "fr") -> PriceSlider:
        min_value, max_value = self.cursors(filters)
        span = max(self.bounds.max - self.bounds.min, 1)
        return PriceSlider(
            min=self.bounds.min,
            max=self.bounds.max,
            step=self.bounds.step,
            min_value=min_value,
            max_value=max_value,
            left_pct=(min_value - self.bounds.min) / span * 100,
            right_pct=(max_value - self.bounds.min) / span * 100,
            has_data=self.bounds.has_data,
            min_label=format_money(min_value, lang),
            max_label=format_money(max_value, lang),
        )

    def set_min(self, filters: FilterState, value: float) -> FilterState:
        """Move the low handle; a max cursor below it is pulled up to match."""
        _, current_max = self.cursors(filters)
        next_min = self._clamp(value)
        adjusted_max = max(current_max, next_min)
        return filters.model_copy(update={
            "price_min": to_filter_value(next_min, self.bounds.min, "min"),
            "price_max": to_filter_value(adjusted_max, self.bounds.max, "max"),
        })

    def set_max(self, filters: FilterState, value: float) -> FilterState:
        """Move the high handle; a min cursor above it is pulled down to match."""
        current_min, _ = self.cursors(filters)
        next_max = self._clamp(value)
        adjusted_min = min(current_min, next_max)
        return filters.model_copy(update={
            "price_min": to_filter_value(adjusted_min, self.bounds.min, "min"),
            "price_max": to_filter_value(next_max, self.bounds.max, "max"),
        })
