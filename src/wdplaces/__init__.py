"""wdplaces: a caching Wikidata proxy for country and place lookups.

Main modules:
- queries: SPARQL templates for the three fixed lookups
- sparql_helper: HTTP client for the query service
- normalize: SPARQL JSON bindings to compact output records
- cache: read-through cache with TTL expiry
- service: the lookup pipeline tying them together
"""

from .cache import ReadThroughCache
from .normalize import CountryInfo, PlaceDetail, PlaceSummary
from .queries import ValidationError
from .service import PlacesService
from .sparql_helper import SparqlHelper, TransportError, UpstreamError
from .version import VERSION

__all__ = [
    "VERSION",
    "CountryInfo",
    "PlaceDetail",
    "PlaceSummary",
    "PlacesService",
    "ReadThroughCache",
    "SparqlHelper",
    "TransportError",
    "UpstreamError",
    "ValidationError",
]
