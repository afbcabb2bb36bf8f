"""Tests for the recompute pipeline and the active filter chips."""

from app.schemas import FilterState
from app.services.pipeline import build_chips, recompute, remove_chip


class TestRecompute:

    def test_untouched_state(self, catalog, now):
        view = recompute(FilterState(), catalog, now=now)
        assert view.total == len(catalog)
        assert view.context_count == len(catalog)
        assert view.suggestions == []
        assert view.chips == []
        assert view.price.min_value == catalog.price_bounds.min
        assert view.price.max_value == catalog.price_bounds.max

    def test_natural_language_query(self, catalog, now):
        view = recompute(FilterState(q="F4 vue mer max 2.5M"), catalog, now=now)
        assert view.filters.rooms == "F4"
        assert "vue_mer" in view.filters.amenities
        assert view.filters.price_max == "2500000"
        assert [item.ref for item in view.results] == ["RST-0001"]
        assert view.price.max_value == 2_500_000

    def test_context_count_ignores_amenities(self, catalog, now):
        view = recompute(FilterState(amenities={"vue_mer"}), catalog, now=now)
        assert view.total == 4
        assert view.context_count == len(catalog)

    def test_results_are_sorted(self, catalog, now):
        view = recompute(FilterState(deal_type="Vente", sort="price_desc"), catalog, now=now)
        assert [item.ref for item in view.results] == ["RST-0003", "RST-0004", "RST-0008", "RST-0001"]

    def test_same_state_same_view(self, catalog, now):
        first = recompute(FilterState(q="appartement a vendre canastel"), catalog, now=now)
        second = recompute(first.filters, catalog, now=now)
        assert second.filters == first.filters
        assert second.results == first.results
        assert second.suggestions == first.suggestions

    def test_suggestion_limit(self, catalog, now):
        view = recompute(FilterState(q="a"), catalog, now=now, suggestion_limit=2)
        assert len(view.suggestions) == 2

    def test_input_state_untouched(self, catalog, now):
        filters = FilterState(q="villa sans piscine")
        recompute(filters, catalog, now=now)
        assert filters.excluded_amenities == set()
        assert filters.category == ""


class TestChips:

    def test_one_chip_per_facet(self):
        filters = FilterState(
            deal_type="Vente", commune="Oran", amenities={"piscine"},
            excluded_amenities={"garage"}, price_max="3000000",
        )
        chips = {chip.key: chip for chip in build_chips(filters)}
        assert set(chips) == {"deal_type", "commune", "amenity:piscine", "excluded_amenity:garage", "price"}
        assert chips["price"].label == "0 → 3 M DA"
        assert chips["excluded_amenity:garage"].label == "Sans Garage"
        assert chips["commune"].clears == ["commune", "district"]

    def test_arabic_labels(self):
        chips = build_chips(FilterState(deal_type="Location", with_photos_only=True), "ar")
        assert [chip.label for chip in chips] == ["كراء", "صور فقط"]

    def test_remove_commune_clears_district(self):
        filters = remove_chip(FilterState(commune="Oran", district="Maraval"), "commune")
        assert (filters.commune, filters.district) == ("", "")

    def test_remove_amenity(self):
        filters = remove_chip(FilterState(amenities={"piscine", "garage"}), "amenity:piscine")
        assert filters.amenities == {"garage"}

    def test_remove_price(self):
        filters = remove_chip(FilterState(price_min="1", price_max="2", rooms="F3"), "price")
        assert (filters.price_min, filters.price_max, filters.rooms) == ("", "", "F3")

    def test_unknown_key_is_noop(self):
        filters = FilterState(rooms="F3")
        assert remove_chip(filters, "nope") == filters
