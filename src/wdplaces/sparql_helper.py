"""
SPARQL Helper - HTTP client for the Wikidata Query Service.

This module issues SELECT queries against a SPARQL endpoint and
classifies failures:
- Non-success HTTP responses raise UpstreamError (status, reason, body excerpt)
- Network-level failures (timeout, DNS, connection reset) raise TransportError
- Optional bounded retry with exponential backoff, for transport failures only

Usage:
    from wdplaces.sparql_helper import SparqlHelper

    with SparqlHelper("https://query.wikidata.org/sparql") as helper:
        rows = helper.get_bindings("SELECT ?s WHERE { ?s ?p ?o } LIMIT 1")
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any

import requests

from .version import VERSION

logger = logging.getLogger(__name__)

WDQS_ENDPOINT = "https://query.wikidata.org/sparql"
DEFAULT_USER_AGENT = f"wdplaces/{VERSION} (Wikidata places proxy)"

# Size of the response body kept on UpstreamError for diagnostics
BODY_EXCERPT_CHARS = 200


class SparqlHelperError(Exception):
    """Base exception for SPARQL helper errors."""

    pass


class UpstreamError(SparqlHelperError):
    """Raised when the endpoint answers with a non-success response."""

    def __init__(self, status: int, status_text: str = "", body_excerpt: str = "") -> None:
        self.status = status
        self.status_text = status_text
        self.body_excerpt = body_excerpt
        super().__init__(f"WDQS error: {status} {status_text} {body_excerpt}".rstrip())


class TransportError(SparqlHelperError):
    """Raised when the endpoint cannot be reached."""

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        self.timeout = timeout
        super().__init__(message)


class MimeTypes:
    """Standard MIME types for SPARQL protocol."""

    JSON = "application/sparql-results+json"
    FORM = "application/x-www-form-urlencoded; charset=UTF-8"


class SparqlHelper:
    """
    SELECT query executor for a single SPARQL endpoint.

    Queries are sent with HTTP POST (form-encoded ``query`` field) and
    request SPARQL JSON results.  By default a failed call surfaces
    immediately; set ``max_retries`` above 1 to retry transport failures
    with exponential backoff.  HTTP error responses are never retried.

    Attributes:
        endpoint_url: The SPARQL endpoint URL
        user_agent: User-Agent header sent with every request
        timeout: Request timeout in seconds (None waits indefinitely)
        max_retries: Maximum number of attempts per query
        initial_backoff: Initial backoff delay in seconds
        max_backoff: Maximum backoff delay in seconds

    Example:
        >>> helper = SparqlHelper("https://query.wikidata.org/sparql")
        >>> for binding in helper.get_bindings(query):
        ...     print(binding["place"]["value"])
    """

    def __init__(
        self,
        endpoint_url: str = WDQS_ENDPOINT,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float | None = 60.0,
        max_retries: int = 1,
        initial_backoff: float = 1.0,
        max_backoff: float = 30.0,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff

        # Session for connection pooling
        self._session = requests.Session()

        logger.debug(f"SparqlHelper initialized for {self.endpoint_url}")

    def select(self, query: str) -> dict[str, Any]:
        """
        Execute a SELECT query and return JSON results.

        Args:
            query: SPARQL SELECT query string

        Returns:
            Dictionary with SPARQL JSON results format:
            {
                "head": {"vars": [...]},
                "results": {"bindings": [...]}
            }

        Raises:
            UpstreamError: If the endpoint returns a non-success response
            TransportError: If the endpoint could not be reached
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._post_query(query)
            except TransportError as e:
                self._handle_retry(attempt, e)

        # Should not reach here, but just in case
        raise TransportError("Query failed unexpectedly")

    def get_bindings(self, query: str) -> list[dict[str, Any]]:
        """
        Execute SELECT query and return the raw bindings list.

        Each row maps a variable name to its bound cell
        (``{"type": ..., "value": ...}``); unbound variables are absent.
        """
        results = self.select(query)
        return (results.get("results") or {}).get("bindings") or []

    def _post_query(self, query: str) -> dict[str, Any]:
        """
        Execute SPARQL query using HTTP POST.

        Uses application/x-www-form-urlencoded encoding as per SPARQL protocol.
        """
        headers = {
            "Accept": MimeTypes.JSON,
            "Content-Type": MimeTypes.FORM,
            "User-Agent": self.user_agent,
        }

        logger.debug(f"POST {self.endpoint_url}: {query[:120]!r}")
        try:
            response = self._session.post(
                self.endpoint_url,
                data={"query": query},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"WDQS timeout: {e}", timeout=True) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"WDQS unreachable: {e}") from e

        if not response.ok:
            excerpt = (response.text or "")[:BODY_EXCERPT_CHARS]
            logger.error(f"WDQS returned {response.status_code} {response.reason}")
            raise UpstreamError(response.status_code, response.reason or "", excerpt)

        try:
            result: dict[str, Any] = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            excerpt = (response.text or "")[:BODY_EXCERPT_CHARS]
            raise UpstreamError(response.status_code, "Invalid JSON", excerpt) from e
        return result

    def _handle_retry(self, attempt: int, error: Exception) -> None:
        """
        Handle retry logic with exponential backoff.

        Raises:
            The original error if max retries exceeded
        """
        if attempt >= self.max_retries:
            if self.max_retries > 1:
                logger.error(f"Query failed after {self.max_retries} tries: {error}")
            raise error

        logger.warning(f"Query attempt {attempt}/{self.max_retries} failed: {error}")

        # Exponential backoff with jitter
        backoff = min(self.initial_backoff * (2 ** (attempt - 1)), self.max_backoff)
        jitter = secrets.randbelow(int(backoff * 0.1 * 1000) + 1) / 1000
        sleep_time = backoff + jitter

        logger.info(f"Retrying in {sleep_time:.1f}s (attempt {attempt + 1}/{self.max_retries})")
        time.sleep(sleep_time)

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> SparqlHelper:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit - close session."""
        self.close()

    def __repr__(self) -> str:
        return f"SparqlHelper({self.endpoint_url!r}, max_retries={self.max_retries})"
