"""Lookup service: validation, caching, querying and normalization.

:class:`PlacesService` is the single entry point used by the HTTP
routes and the CLI.  Inputs are validated before anything else, so a
malformed code or identifier never reaches the cache or the endpoint.
Upstream failures propagate and are never cached.
"""

from __future__ import annotations

import logging

from .cache import ReadThroughCache, cache_key
from .normalize import (
    CountryInfo,
    PlaceDetail,
    PlaceSummary,
    normalize_country,
    normalize_place_detail,
    normalize_places,
)
from .queries import (
    DEFAULT_LANGUAGES,
    build_country_query,
    build_place_detail_query,
    build_places_query,
    clamp_limit,
    clamp_min_sitelinks,
    normalize_iso_code,
    validate_qid,
)
from .sparql_helper import SparqlHelper

logger = logging.getLogger(__name__)

__all__ = ["PlacesService"]


class PlacesService:
    """Country, place list and place detail lookups against Wikidata."""

    def __init__(
        self,
        helper: SparqlHelper,
        cache: ReadThroughCache,
        languages: str = DEFAULT_LANGUAGES,
    ) -> None:
        self.helper = helper
        self.cache = cache
        self.languages = languages

    def country(self, iso_code: str) -> CountryInfo:
        """Resolve an ISO 3166 numeric code to a :class:`CountryInfo`."""
        iso3 = normalize_iso_code(iso_code)

        def load() -> CountryInfo:
            query = build_country_query(iso3, self.languages)
            return normalize_country(iso3, self.helper.get_bindings(query))

        return self.cache.get_or_load(cache_key("country", iso3), load)

    def places(
        self,
        iso_code: str,
        limit: object = None,
        min_sitelinks: object = None,
    ) -> list[PlaceSummary]:
        """List geolocated places in a country, most linked first.

        *limit* is clamped into ``[1, 60]`` (default 30) and
        *min_sitelinks* to ``>= 0`` (default 0) before the cache key is
        built, so equivalent requests share one entry.
        """
        iso3 = normalize_iso_code(iso_code)
        n_rows = clamp_limit(limit)
        min_links = clamp_min_sitelinks(min_sitelinks)
        key = cache_key("places", iso3, limit=n_rows, minSitelinks=min_links)

        def load() -> tuple[PlaceSummary, ...]:
            query = build_places_query(iso3, n_rows, min_links, self.languages)
            places = normalize_places(self.helper.get_bindings(query))
            logger.info("Fetched %d places for %s", len(places), iso3)
            return tuple(places)

        return list(self.cache.get_or_load(key, load))

    def place(self, qid: str) -> PlaceDetail:
        """Fetch aggregated details for one Wikidata item."""
        item = validate_qid(qid)

        def load() -> PlaceDetail:
            query = build_place_detail_query(item, self.languages)
            return normalize_place_detail(self.helper.get_bindings(query))

        return self.cache.get_or_load(cache_key("place", item), load)
