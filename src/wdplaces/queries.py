"""SPARQL query templates for the three fixed Wikidata lookups.

Every builder here is a pure function.  Values interpolated into a
query are re-validated against a narrow pattern first (digits for ISO
codes, ``Q<digits>`` for entity identifiers) and literals are
serialized through :meth:`rdflib.term.Literal.n3`, so no caller-supplied
text reaches the query unchecked.
"""

from __future__ import annotations

import re
from typing import Any

from rdflib import Literal

__all__ = [
    "DEFAULT_LANGUAGES",
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "ValidationError",
    "build_country_query",
    "build_place_detail_query",
    "build_places_query",
    "clamp_limit",
    "clamp_min_sitelinks",
    "normalize_iso_code",
    "validate_qid",
]

DEFAULT_LANGUAGES = "nl,en"
DEFAULT_LIMIT = 30
MAX_LIMIT = 60

# Wikidata items used as exclusion filters in the places query
DISAMBIGUATION_PAGE = "Q4167836"
LIST_ARTICLE = "Q13406463"

_ISO_RE = re.compile(r"[0-9]{1,3}")
_QID_RE = re.compile(r"Q[0-9]+")
_LANGUAGES_RE = re.compile(r"[a-z]{2,3}(-[a-z0-9]+)*(,[a-z]{2,3}(-[a-z0-9]+)*)*")


class ValidationError(ValueError):
    """Raised when a country code or entity identifier is malformed."""


# ── Input normalization ───────────────────────────────────────────


def normalize_iso_code(raw: Any) -> str:
    """Return *raw* as a zero-padded ISO 3166 numeric code.

    ``"4"`` becomes ``"004"``.  Anything that is not one to three
    digits raises :class:`ValidationError`.
    """
    code = str(raw if raw is not None else "").strip()
    if not _ISO_RE.fullmatch(code):
        raise ValidationError(f"Invalid country code: {raw!r}")
    return code.zfill(3)


def validate_qid(raw: Any) -> str:
    """Return *raw* stripped if it is a Wikidata item id (``Q<digits>``)."""
    qid = str(raw if raw is not None else "").strip()
    if not _QID_RE.fullmatch(qid):
        raise ValidationError(f"Invalid QID: {raw!r}")
    return qid


def _validate_languages(languages: str) -> str:
    langs = languages.replace(" ", "").lower()
    if not _LANGUAGES_RE.fullmatch(langs):
        raise ValidationError(f"Invalid label languages: {languages!r}")
    return langs


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def clamp_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    """Clamp a requested row limit into ``[1, MAX_LIMIT]``."""
    return max(1, min(MAX_LIMIT, _to_int(value, default)))


def clamp_min_sitelinks(value: Any, default: int = 0) -> int:
    """Clamp a minimum sitelink count to a non-negative integer."""
    return max(0, _to_int(value, default))


# ── Query templates ───────────────────────────────────────────────


def _label_service(languages: str) -> str:
    lang = Literal(_validate_languages(languages)).n3()
    return f"SERVICE wikibase:label {{ bd:serviceParam wikibase:language {lang}. }}"


def build_country_query(
    iso_code: str,
    languages: str = DEFAULT_LANGUAGES,
) -> str:
    """Build the query resolving an ISO numeric code to its country item.

    Capital, continent and population are optional joins; at most one
    row is returned.
    """
    code = Literal(normalize_iso_code(iso_code)).n3()
    return f"""
SELECT ?country ?capitalLabel ?continentLabel ?population WHERE {{
  ?country wdt:P299 {code} .
  OPTIONAL {{ ?country wdt:P36 ?capital . }}
  OPTIONAL {{ ?country wdt:P30 ?continent . }}
  OPTIONAL {{ ?country wdt:P1082 ?population . }}
  {_label_service(languages)}
}}
LIMIT 1
""".strip()


def build_places_query(
    iso_code: str,
    limit: Any = DEFAULT_LIMIT,
    min_sitelinks: Any = 0,
    languages: str = DEFAULT_LANGUAGES,
) -> str:
    """Build the query listing geolocated places inside a country.

    Parameters
    ----------
    iso_code:
        ISO 3166 numeric code of the country.
    limit:
        Maximum number of rows, clamped into ``[1, 60]``.
    min_sitelinks:
        Only keep places with at least this many sitelinks; ``0``
        disables the filter.
    languages:
        Comma separated label languages in order of preference.

    Returns
    -------
    str
        SPARQL SELECT ordered by descending sitelink count, places
        without a sitelink count sorting as ``0``.
    """
    code = Literal(normalize_iso_code(iso_code)).n3()
    n_rows = clamp_limit(limit)
    min_links = clamp_min_sitelinks(min_sitelinks)

    sitelink_filter = ""
    if min_links > 0:
        sitelink_filter = f"FILTER(COALESCE(?sitelinks, 0) >= {min_links})"

    return f"""
SELECT ?place ?placeLabel ?placeDescription ?coord ?image ?sitelinks WHERE {{
  ?country wdt:P299 {code} .
  ?place wdt:P625 ?coord .
  ?place wdt:P17 ?country .
  FILTER NOT EXISTS {{ ?place wdt:P31 wd:{DISAMBIGUATION_PAGE} }}
  FILTER NOT EXISTS {{ ?place wdt:P31 wd:{LIST_ARTICLE} }}
  OPTIONAL {{ ?place wdt:P18 ?image . }}
  OPTIONAL {{ ?place wikibase:sitelinks ?sitelinks . }}
  {sitelink_filter}
  {_label_service(languages)}
}}
ORDER BY DESC(COALESCE(?sitelinks, 0))
LIMIT {n_rows}
""".strip()


def build_place_detail_query(
    qid: str,
    languages: str = DEFAULT_LANGUAGES,
) -> str:
    """Build the aggregated detail query for a single item.

    Single-valued properties use ``SAMPLE`` (first wins), the type list
    is a distinct ``GROUP_CONCAT`` joined with ``", "``.
    """
    item = validate_qid(qid)
    return f"""
SELECT
  (GROUP_CONCAT(DISTINCT ?typeLabel; separator=", ") AS ?types)
  (SAMPLE(?website) AS ?website)
  (SAMPLE(?inception) AS ?inception)
  (SAMPLE(?population) AS ?population)
  (SAMPLE(?area) AS ?area)
  (SAMPLE(?countryLabel) AS ?countryLabel)
  (SAMPLE(?adminLabel) AS ?adminLabel)
  (SAMPLE(?image) AS ?image)
WHERE {{
  BIND(wd:{item} AS ?place)
  OPTIONAL {{ ?place wdt:P31 ?type . }}
  OPTIONAL {{ ?place wdt:P856 ?website . }}
  OPTIONAL {{ ?place wdt:P571 ?inception . }}
  OPTIONAL {{ ?place wdt:P1082 ?population . }}
  OPTIONAL {{ ?place wdt:P2046 ?area . }}
  OPTIONAL {{ ?place wdt:P17 ?country . }}
  OPTIONAL {{ ?place wdt:P131 ?admin . }}
  OPTIONAL {{ ?place wdt:P18 ?image . }}
  {_label_service(languages)}
}}
""".strip()
