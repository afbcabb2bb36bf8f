"""Tests for price parsing and the dual-cursor price range controller."""

import pytest

from app.core.config import settings
from app.schemas import FilterState, Listing, PriceBounds
from app.services.price_range import (
    PriceRangeController,
    compute_bounds,
    format_money,
    parse_money,
    step_for_span,
    to_filter_value,
)


@pytest.mark.parametrize("raw, expected", [
    ("2 500 000 DA", 2_500_000),
    ("2.5M", 2_500_000),
    ("3,2 M", 3_200_000),
    ("48 millions", 48_000_000),
    ("75 000 DA / mois", 75_000),
    ("12000", 12_000),
    ("Prix sur demande", None),
    ("", None),
    (None, None),
])
def test_parse_money(raw, expected):
    assert parse_money(raw) == expected


def test_step_for_span():
    assert step_for_span(40_000_000) == 500_000
    assert step_for_span(20_000_000) == 250_000
    assert step_for_span(5_000_000) == 100_000
    assert step_for_span(500_000) == 50_000


class TestBounds:

    def test_observed_range(self, catalog):
        bounds = catalog.price_bounds
        assert bounds.min == 12_000
        assert bounds.max == 48_000_000
        assert bounds.step == 500_000
        assert bounds.has_data

    def test_no_parsable_price_uses_defaults(self):
        bounds = compute_bounds([Listing(id="1", ref="A", price="sur demande")])
        assert not bounds.has_data
        assert bounds.min == settings.default_price_min
        assert bounds.max == settings.default_price_max

    def test_single_price_widens_by_one_step(self):
        bounds = compute_bounds([Listing(id="1", ref="A", price="100 000")])
        assert bounds.min == 100_000
        assert bounds.max == 150_000


def test_to_filter_value():
    assert to_filter_value(0, 0, "min") == ""
    assert to_filter_value(1_000, 1_000, "max") == ""
    assert to_filter_value(150.4, 100, "min") == "150"
    assert to_filter_value(99.6, 100, "max") == ""


class TestController:

    @pytest.fixture
    def controller(self):
        return PriceRangeController(PriceBounds(min=0, max=1_000_000, step=50_000))

    def test_untouched_state_reads_bounds(self, controller):
        assert controller.cursors(FilterState()) == (0, 1_000_000)

    def test_garbage_reads_as_unbounded(self, controller):
        filters = FilterState(price_min="abc", price_max="")
        assert controller.cursors(filters) == (0, 1_000_000)

    def test_cursors_never_cross(self, controller):
        filters = FilterState(price_min="900000", price_max="100000")
        low, high = controller.cursors(filters)
        assert low <= high

    def test_set_min(self, controller):
        filters = controller.set_min(FilterState(), 300_000)
        assert filters.price_min == "300000"
        assert filters.price_max == ""

    def test_set_min_pushes_max_up(self, controller):
        filters = controller.set_min(FilterState(price_max="200000"), 500_000)
        assert filters.price_min == "500000"
        assert filters.price_max == "500000"

    def test_set_max_pulls_min_down(self, controller):
        filters = controller.set_max(FilterState(price_min="600000"), 400_000)
        assert filters.price_min == "400000"
        assert filters.price_max == "400000"

    def test_out_of_range_clamps_to_unbounded(self, controller):
        assert controller.set_min(FilterState(), -5).price_min == ""
        assert controller.set_max(FilterState(), 5e9).price_max == ""

    def test_other_facets_untouched(self, controller):
        filters = controller.set_min(FilterState(commune="Oran", rooms="F3"), 250_000)
        assert filters.commune == "Oran"
        assert filters.rooms == "F3"

    def test_slider(self, controller):
        slider = controller.slider(FilterState(price_min="250000"))
        assert slider.min_value == 250_000
        assert slider.max_value == 1_000_000
        assert slider.left_pct == 25.0
        assert slider.right_pct == 100.0
        assert slider.min_label == "250 k DA"


def test_format_money():
    assert format_money(2_500_000) == "2,5 M DA"
    assert format_money(750_000) == "750 k DA"
    assert format_money(3_000_000) == "3 M DA"
    assert format_money(2_500_000, "ar") == "2.5 M دج"
    assert format_money(500) == "500 DA"
