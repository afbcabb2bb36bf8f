"""Tests for text normalization."""

from app.services.normalizer import compact, normalize, normalize_display, tokenize


class TestNormalize:

    def test_lowercases_and_strips_accents(self):
        assert normalize("  Résidence   FERMÉE ") == "residence fermee"

    def test_keeps_hyphens(self):
        assert normalize("Bir El-Djir") == "bir el-djir"

    def test_empty_and_none(self):
        assert normalize(None) == ""
        assert normalize("") == ""
        assert normalize("   ") == ""

    def test_arabic_passes_through(self):
        assert normalize("  وهران ") == "وهران"

    def test_is_idempotent(self):
        once = normalize("Éléphant  Vue Mer")
        assert normalize(once) == once


class TestDisplayAndTokens:

    def test_display_keeps_case_and_accents(self):
        assert normalize_display("  Canastel   Résidence ") == "Canastel Résidence"
        assert normalize_display(None) == ""

    def test_compact(self):
        assert compact("bir el-djir") == "bireldjir"

    def test_tokenize_splits_on_delimiters(self):
        assert tokenize("Vente, F4 / Oran|Canastel") == ["vente", "f4", "oran", "canastel"]

    def test_tokenize_trims_edge_punctuation(self):
        assert tokenize("Oran. villa? (F3) T6+ 2.5m !") == ["oran", "villa", "f3", "t6+", "2.5m"]
        assert tokenize("bir el-djir...") == ["bir", "el-djir"]

    def test_tokenize_empty(self):
        assert tokenize("") == []
        assert tokenize(None) == []
