"""Normalization of SPARQL JSON bindings into compact output records.

The query service returns rows as ``{variable: {"type", "value", ...}}``
mappings where any optional variable may be unbound.  The functions in
this module turn those rows into the pydantic models below, in which
every field is always present with a defined default.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

__all__ = [
    "COMMONS_FILE_PATH",
    "DETAIL_IMAGE_WIDTH",
    "LIST_IMAGE_WIDTH",
    "MISSING_LABEL",
    "CountryInfo",
    "CountryMeta",
    "ParseError",
    "PlaceDetail",
    "PlaceSummary",
    "commons_image_url",
    "normalize_country",
    "normalize_place_detail",
    "normalize_places",
    "parse_wkt_point",
    "qid_from_uri",
]

COMMONS_FILE_PATH = "https://commons.wikimedia.org/wiki/Special:FilePath/"
WIKIDATA_ENTITY_PAGE = "https://www.wikidata.org/wiki/"
LIST_IMAGE_WIDTH = 560
DETAIL_IMAGE_WIDTH = 760
MISSING_LABEL = "—"

_QID_URI_RE = re.compile(r"/(Q[0-9]+)\Z")
_WKT_NUMBER = r"[-+]?[0-9.]+(?:[eE][-+]?[0-9]+)?"
_WKT_POINT_RE = re.compile(
    rf"Point\(\s*({_WKT_NUMBER})\s+({_WKT_NUMBER})\s*\)", re.IGNORECASE,
)


class ParseError(ValueError):
    """Raised when a geometry literal cannot be parsed."""


# ── Output models ─────────────────────────────────────────────────


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> dict[str, Any]:
        """Dump using the client-facing (camelCase) field names."""
        return self.model_dump(by_alias=True)


class CountryMeta(_Record):
    """Optional country facts shown alongside the map."""

    capital: str = MISSING_LABEL
    continent: str = MISSING_LABEL
    population: str = ""


class CountryInfo(_Record):
    """A country resolved from its ISO 3166 numeric code."""

    iso3: str
    country_qid: str = Field(default="", alias="countryQid")
    wikidata_url: str = Field(default="", alias="wikidataUrl")
    meta: CountryMeta = Field(default_factory=CountryMeta)


class PlaceSummary(_Record):
    """One geolocated place in a country listing."""

    qid: str
    label: str
    desc: str = ""
    lat: float
    lng: float
    image: str = ""
    sitelinks: int = 0
    wikidata_url: str = Field(default="", alias="wikidataUrl")


class PlaceDetail(_Record):
    """Aggregated facts about a single place."""

    types: str = ""
    website: str = ""
    inception: str = ""
    population: str = ""
    area: str = ""
    country: str = ""
    admin: str = ""
    image: str = ""


# ── Field helpers ─────────────────────────────────────────────────


def _value(row: dict[str, Any], var: str) -> str:
    """Return the bound value of *var* in *row*, or ``""`` if unbound."""
    cell = row.get(var)
    if not cell:
        return ""
    return str(cell.get("value") or "")


def qid_from_uri(uri: Any) -> str:
    """Return the trailing ``Q<digits>`` of an entity URI, or ``""``."""
    match = _QID_URI_RE.search(str(uri or ""))
    return match.group(1) if match else ""


def parse_wkt_point(wkt: Any) -> tuple[float, float]:
    """Parse a WKT ``Point(<lon> <lat>)`` literal.

    Returns
    -------
    tuple[float, float]
        ``(lat, lon)``.

    Raises
    ------
    ParseError
        If the literal does not match or either coordinate is not a
        finite number (``Point(NaN NaN)`` included).
    """
    match = _WKT_POINT_RE.search(str(wkt or ""))
    if not match:
        raise ParseError(f"Not a WKT point: {wkt!r}")
    try:
        lon = float(match.group(1))
        lat = float(match.group(2))
    except ValueError as exc:
        raise ParseError(f"Not a WKT point: {wkt!r}") from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ParseError(f"Non-finite coordinates: {wkt!r}")
    return lat, lon


def commons_image_url(file_uri_or_name: Any, width: int = LIST_IMAGE_WIDTH) -> str:
    """Return a Wikimedia Commons thumbnail URL at a fixed *width*.

    Values already pointing at ``Special:FilePath/`` only get the width
    parameter appended; bare file names are URL-encoded under
    :data:`COMMONS_FILE_PATH`.
    """
    value = str(file_uri_or_name or "")
    if not value:
        return ""
    if "Special:FilePath/" in value:
        return f"{value}?width={width}"
    return f"{COMMONS_FILE_PATH}{quote(value, safe='')}?width={width}"


def _to_int(value: str) -> int:
    if not value:
        return 0
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return 0


# ── Normalizers ───────────────────────────────────────────────────


def normalize_country(iso3: str, bindings: list[dict[str, Any]]) -> CountryInfo:
    """Build a :class:`CountryInfo` from the first row of *bindings*.

    A code without a matching country yields the defaulted record.
    """
    row = bindings[0] if bindings else {}
    uri = _value(row, "country")
    qid = qid_from_uri(uri)
    wikidata_url = uri or (f"{WIKIDATA_ENTITY_PAGE}{qid}" if qid else "")

    return CountryInfo(
        iso3=iso3,
        country_qid=qid,
        wikidata_url=wikidata_url,
        meta=CountryMeta(
            capital=_value(row, "capitalLabel") or MISSING_LABEL,
            continent=_value(row, "continentLabel") or MISSING_LABEL,
            population=_value(row, "population"),
        ),
    )


def normalize_places(bindings: list[dict[str, Any]]) -> list[PlaceSummary]:
    """Build the place list, preserving the upstream order.

    Rows without an item id, rows repeating an already seen id and rows
    whose coordinates do not parse are skipped.
    """
    seen: set[str] = set()
    places: list[PlaceSummary] = []

    for row in bindings:
        place_uri = _value(row, "place")
        qid = qid_from_uri(place_uri)
        if not qid or qid in seen:
            continue

        try:
            lat, lng = parse_wkt_point(_value(row, "coord"))
        except ParseError as exc:
            logger.debug("Skipping %s: %s", qid, exc)
            continue

        seen.add(qid)
        image = _value(row, "image")
        places.append(
            PlaceSummary(
                qid=qid,
                label=_value(row, "placeLabel") or qid,
                desc=_value(row, "placeDescription"),
                lat=lat,
                lng=lng,
                image=commons_image_url(image, LIST_IMAGE_WIDTH),
                sitelinks=_to_int(_value(row, "sitelinks")),
                wikidata_url=place_uri,
            )
        )

    return places


def normalize_place_detail(bindings: list[dict[str, Any]]) -> PlaceDetail:
    """Build a :class:`PlaceDetail` from the single aggregated row."""
    row = bindings[0] if bindings else {}
    return PlaceDetail(
        types=_value(row, "types"),
        website=_value(row, "website"),
        inception=_value(row, "inception"),
        population=_value(row, "population"),
        area=_value(row, "area"),
        country=_value(row, "countryLabel"),
        admin=_value(row, "adminLabel"),
        image=commons_image_url(_value(row, "image"), DETAIL_IMAGE_WIDTH),
    )
