"""Tests for the autocomplete ranker and suggestion application."""

from app.schemas import FilterState, Suggestion
from app.services.suggestions import (
    apply_suggestion,
    category_aware_rooms,
    infer_category_context,
    score_candidate,
)
from app.services.vocabulary import ROOM_OPTIONS


class TestRanking:

    def test_exact_commune_first(self, catalog):
        results = catalog.ranker.suggest("oran")
        first = results[0]
        assert first.type == "commune"
        assert first.label == "Oran"
        assert first.score == 0
        assert first.match_count == 5

    def test_scores_never_decrease(self, catalog):
        scores = [s.score for s in catalog.ranker.suggest("a", limit=20)]
        assert scores == sorted(scores)

    def test_keys_unique_and_limit_respected(self, catalog):
        results = catalog.ranker.suggest("a", limit=3)
        assert len(results) == 3
        assert len({s.key for s in results}) == 3

    def test_empty_query_or_limit(self, catalog):
        assert catalog.ranker.suggest("") == []
        assert catalog.ranker.suggest("   ") == []
        assert catalog.ranker.suggest("oran", limit=0) == []

    def test_transaction(self, catalog):
        first = catalog.ranker.suggest("vente")[0]
        assert first.key == "transaction:Vente"
        assert first.deal_type == "Vente"
        assert first.match_count == 4

    def test_district_with_commune_hint(self, catalog):
        first = catalog.ranker.suggest("canastel")[0]
        assert first.type == "district"
        assert first.commune == "Bir El Djir"
        assert first.district == "Canastel"
        assert first.hint == "Commune: Bir El Djir"

    def test_district_found_by_misspelling(self, catalog):
        keys = [s.key for s in catalog.ranker.suggest("canastl")]
        assert "district:bir el djir|canastel" in keys

    def test_amenity_by_synonym(self, catalog):
        results = catalog.ranker.suggest("pool")
        assert results[0].key == "amenity:piscine"
        assert results[0].score == 3

    def test_arabic_labels(self, catalog):
        first = catalog.ranker.suggest("vente", lang="ar")[0]
        assert first.label == "بيع"
        assert first.hint == ""

    def test_no_rooms_for_land(self, catalog):
        results = catalog.ranker.suggest("t", limit=20, category="Terrain")
        assert not [s for s in results if s.type == "room"]


class TestHelpers:

    def test_score_candidate(self):
        assert score_candidate("Oran", "oran", "oran") == 0
        assert score_candidate("Oran", "oran", "or") == 1
        assert score_candidate("Es Senia", "es senia", "senia") == 2
        assert score_candidate("Piscine", "piscine pool", "pool") == 3

    def test_category_context(self):
        assert infer_category_context("villa f4", "Terrain") == "Terrain"
        assert infer_category_context("villa avec jardin") == "Villa"
        assert infer_category_context("") == ""

    def test_category_aware_rooms(self):
        assert category_aware_rooms("") == ROOM_OPTIONS
        assert category_aware_rooms("Terrain") == []
        assert category_aware_rooms("Bureau") == []
        assert category_aware_rooms("Appartement")[:2] == ["Studio", "F2"]
        assert category_aware_rooms("Villa")[0] == "T1"


class TestApplySuggestion:

    def test_commune_clears_district(self):
        filters = FilterState(commune="Oran", district="Maraval", price_min="100000")
        suggestion = Suggestion(
            key="commune:bir el djir", type="commune", label="Bir El Djir",
            value="Bir El Djir", commune="Bir El Djir",
        )
        result = apply_suggestion(filters, suggestion)
        assert (result.commune, result.district) == ("Bir El Djir", "")
        assert result.q == "Bir El Djir"
        assert result.price_min == "100000"

    def test_district_sets_both(self, catalog):
        suggestion = catalog.ranker.suggest("canastel")[0]
        result = apply_suggestion(FilterState(q="canas"), suggestion)
        assert (result.commune, result.district) == ("Bir El Djir", "Canastel")
        assert result.q == "Canastel"

    def test_amenity_is_added(self):
        suggestion = Suggestion(key="amenity:piscine", type="amenity", label="Piscine",
                                value="Piscine", amenity="piscine")
        result = apply_suggestion(FilterState(amenities={"garage"}), suggestion)
        assert result.amenities == {"garage", "piscine"}

    def test_room_and_transaction(self):
        room = Suggestion(key="room:F3", type="room", label="F3", value="F3", room="F3")
        deal = Suggestion(key="transaction:Location", type="transaction", label="Location",
                          value="Location", deal_type="Location")
        result = apply_suggestion(apply_suggestion(FilterState(), room), deal)
        assert result.rooms == "F3"
        assert result.deal_type == "Location"

    def test_input_is_not_mutated(self):
        filters = FilterState(amenities={"garage"})
        suggestion = Suggestion(key="amenity:jardin", type="amenity", label="Jardin",
                                value="Jardin", amenity="jardin")
        apply_suggestion(filters, suggestion)
        assert filters.amenities == {"garage"}
        assert filters.q == ""
