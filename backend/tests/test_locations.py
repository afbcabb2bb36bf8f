"""Tests for location parsing and the district alias index."""

import pytest

from app.schemas import Listing, Quartier
from app.services.locations import (
    CommuneCatalog,
    DEFAULT_COMMUNES,
    ORAN_COMMUNES,
    build_alias_index,
    location_aliases,
    parse_location,
)


class TestParseLocation:

    @pytest.mark.parametrize("raw, commune, district", [
        ("Canastel, Bir El Djir", "Bir El Djir", "Canastel"),
        ("Oran/Maraval", "Oran", "Maraval"),
        ("Oran", "Oran", ""),
        ("oran", "Oran", ""),
        ("Ain El Turk · Trouville", "Ain El Turk", "Trouville"),
        ("Bir El Djir - Canastel - Résidence El Bahia", "Bir El Djir", "Canastel - Résidence El Bahia"),
        ("Quelque part", "", "Quelque part"),
        ("Hai Sabah, Cite 200", "", "Hai Sabah - Cite 200"),
        ("", "", ""),
        (None, "", ""),
        (" - , / ", "", ""),
    ])
    def test_parse(self, raw, commune, district):
        parsed = parse_location(raw)
        assert parsed.commune == commune
        assert parsed.district == district

    def test_uses_given_commune_catalog(self):
        communes = CommuneCatalog(["Tlemcen"])
        parsed = parse_location("Tlemcen - Imama", communes)
        assert (parsed.commune, parsed.district) == ("Tlemcen", "Imama")


class TestCommuneCatalog:

    def test_falls_back_to_oran_communes(self):
        assert len(CommuneCatalog([])) == len(ORAN_COMMUNES)

    def test_resolve_is_accent_and_case_insensitive(self):
        assert DEFAULT_COMMUNES.resolve("ES SÉNIA") == "Es Senia"
        assert DEFAULT_COMMUNES.resolve("Paris") is None
        assert "bir el djir" in DEFAULT_COMMUNES

    def test_find_mention_whole_words(self):
        assert DEFAULT_COMMUNES.find_mention("appartement bir el djir vue mer") == "Bir El Djir"
        assert DEFAULT_COMMUNES.find_mention("style oranais") is None

    def test_find_mention_prefers_longest(self):
        assert DEFAULT_COMMUNES.find_mention("villa ain el kerma") == "Ain El Kerma"


class TestAliasIndex:

    def test_location_aliases(self):
        assert location_aliases("Canastel - Résidence El Bahia") == [
            "canastel - residence el bahia", "canastel", "residence el bahia",
        ]
        assert location_aliases("") == []

    def test_mined_from_listings(self, catalog):
        entry = catalog.alias_index.lookup("Canastel")
        assert entry.commune == "Bir El Djir"
        assert entry.district == "Canastel"
        assert catalog.alias_index.lookup("maraval").commune == "Oran"

    def test_misspelling_safety_net(self, catalog):
        entry = catalog.alias_index.lookup("canastl")
        assert (entry.commune, entry.district) == ("Bir El Djir", "Canastel")

    def test_longest_alias_first(self, catalog):
        lengths = [len(entry.alias) for entry in catalog.alias_index]
        assert lengths == sorted(lengths, reverse=True)

    def test_first_writer_wins(self):
        listings = [
            Listing(id="1", ref="A", location="Canastel, Bir El Djir"),
            Listing(id="2", ref="B", location="Oran - Canastel"),
        ]
        index = build_alias_index(listings)
        assert index.lookup("canastel").commune == "Bir El Djir"

    def test_quartier_rows_are_indexed(self):
        index = build_alias_index([], quartiers=[Quartier(name="Hai Sabah", commune="oran")])
        entry = index.lookup("hai sabah")
        assert (entry.commune, entry.district) == ("Oran", "Hai Sabah")

    def test_quartier_without_commune_is_skipped(self):
        index = build_alias_index([], quartiers=[Quartier(name="Nulle Part")])
        assert index.lookup("nulle part") is None

    def test_find_mention(self, catalog):
        assert catalog.alias_index.find_mention("f3 canastel").district == "Canastel"
        assert catalog.alias_index.find_mention("") is None

    def test_alias_needs_word_boundary(self):
        index = build_alias_index([], quartiers=[Quartier(name="Usto", commune="Oran")])
        assert index.find_mention("appartement bustop") is None
        assert index.find_mention("f3 usto, oran").district == "Usto"

    def test_districts_grouped(self, catalog):
        grouped = {(c, d): aliases for c, d, aliases in catalog.alias_index.districts()}
        assert set(grouped[("Bir El Djir", "Canastel")]) == {"canastel", "canastl"}
