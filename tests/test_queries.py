"""Tests for the SPARQL query templates."""

import pytest

from wdplaces.queries import (
    ValidationError,
    build_country_query,
    build_place_detail_query,
    build_places_query,
    clamp_limit,
    clamp_min_sitelinks,
    normalize_iso_code,
    validate_qid,
)


class TestNormalizeIsoCode:
    """ISO 3166 numeric code handling."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("528", "528"), (" 528 ", "528"), ("4", "004"), ("56", "056"), (528, "528")],
    )
    def test_valid(self, raw, expected):
        assert normalize_iso_code(raw) == expected

    @pytest.mark.parametrize(
        "raw", ["", None, "5280", "52a", "NLD", '528" } #', "-52"],
    )
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            normalize_iso_code(raw)

    def test_blank_is_not_padded(self):
        with pytest.raises(ValidationError):
            normalize_iso_code("   ")

    @pytest.mark.parametrize("raw", ["\u0665\u0662\u0668", "\uff15\uff12\uff18", "\u0664"])
    def test_only_ascii_digits(self, raw):
        with pytest.raises(ValidationError):
            normalize_iso_code(raw)


class TestValidateQid:
    """Wikidata item identifier handling."""

    def test_valid(self):
        assert validate_qid("Q727") == "Q727"
        assert validate_qid(" Q55 ") == "Q55"

    @pytest.mark.parametrize(
        "raw", ["", None, "q727", "P17", "Q", "Q12a", "Q1 . ?s ?p ?o", "wd:Q1"],
    )
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            validate_qid(raw)

    @pytest.mark.parametrize("raw", ["Q\u0667\u0662\u0667", "Q\uff17\uff12\uff17", "Q727\nQ1"])
    def test_only_ascii_digits(self, raw):
        with pytest.raises(ValidationError):
            validate_qid(raw)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_qid("nope")


class TestClamping:
    """Limit and sitelink clamping."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (999, 60),
            (0, 1),
            (-5, 1),
            (5, 5),
            ("12", 12),
            (None, 30),
            ("", 30),
            ("abc", 30),
            ("nan", 30),
            (float("inf"), 30),
        ],
    )
    def test_clamp_limit(self, value, expected):
        assert clamp_limit(value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, 0), (-3, 0), (0, 0), ("25", 25), (10**6, 10**6), ("x", 0)],
    )
    def test_clamp_min_sitelinks(self, value, expected):
        assert clamp_min_sitelinks(value) == expected


class TestCountryQuery:
    """Country lookup template."""

    def test_contains_code_literal(self):
        query = build_country_query("528")
        assert 'wdt:P299 "528"' in query
        assert "LIMIT 1" in query

    def test_pads_code(self):
        assert 'wdt:P299 "004"' in build_country_query("4")

    def test_optional_joins(self):
        query = build_country_query("528")
        for prop in ("P36", "P30", "P1082"):
            assert f"OPTIONAL {{ ?country wdt:{prop}" in query

    def test_languages(self):
        query = build_country_query("528", languages="de,en")
        assert 'wikibase:language "de,en"' in query

    def test_rejects_injection(self):
        with pytest.raises(ValidationError):
            build_country_query('528" } ?s ?p ?o {')

    def test_rejects_bad_languages(self):
        with pytest.raises(ValidationError):
            build_country_query("528", languages='en". } DROP ALL #')

    def test_rejects_languages_with_newline(self):
        with pytest.raises(ValidationError):
            build_country_query("528", languages="en\n")


class TestPlacesQuery:
    """Places-in-country template."""

    def test_defaults(self):
        query = build_places_query("528")
        assert "LIMIT 30" in query
        assert "FILTER(COALESCE" not in query
        assert "ORDER BY DESC(COALESCE(?sitelinks, 0))" in query

    def test_excludes_meta_pages(self):
        query = build_places_query("528")
        assert "FILTER NOT EXISTS { ?place wdt:P31 wd:Q4167836 }" in query
        assert "FILTER NOT EXISTS { ?place wdt:P31 wd:Q13406463 }" in query

    def test_limit_clamped(self):
        assert "LIMIT 60" in build_places_query("528", limit=999)
        assert build_places_query("528", limit=0).endswith("LIMIT 1")

    def test_min_sitelinks_filter(self):
        query = build_places_query("528", min_sitelinks=20)
        assert "FILTER(COALESCE(?sitelinks, 0) >= 20)" in query

    def test_negative_min_sitelinks_disables_filter(self):
        assert "FILTER(COALESCE" not in build_places_query("528", min_sitelinks=-4)

    def test_rejects_bad_code(self):
        with pytest.raises(ValidationError):
            build_places_query("abc")


class TestPlaceDetailQuery:
    """Single place detail template."""

    def test_binds_item(self):
        query = build_place_detail_query("Q727")
        assert "BIND(wd:Q727 AS ?place)" in query

    def test_aggregates(self):
        query = build_place_detail_query("Q727")
        assert 'GROUP_CONCAT(DISTINCT ?typeLabel; separator=", ")' in query
        for var in ("website", "inception", "population", "area", "countryLabel", "adminLabel", "image"):
            assert f"(SAMPLE(?{var}) AS ?{var})" in query

    def test_rejects_bad_qid(self):
        with pytest.raises(ValidationError):
            build_place_detail_query("Q1 AS ?place) } #")
