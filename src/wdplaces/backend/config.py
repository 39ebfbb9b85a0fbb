"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os

from wdplaces import cache, queries, sparql_helper


class Config:
    """Default configuration for the Flask backend."""

    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"
    PORT = int(os.getenv("PORT", "10000"))

    # CORS — origins allowed to call this API
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # Wikidata Query Service
    WDQS_ENDPOINT = os.getenv("WDQS_ENDPOINT", sparql_helper.WDQS_ENDPOINT)
    WDQS_USER_AGENT = os.getenv("WDQS_USER_AGENT", sparql_helper.DEFAULT_USER_AGENT)
    LABEL_LANGUAGES = os.getenv("LABEL_LANGUAGES", queries.DEFAULT_LANGUAGES)

    # Per-request timeout in seconds; 1 attempt means no retry
    SPARQL_TIMEOUT = float(os.getenv("SPARQL_TIMEOUT", "60"))
    SPARQL_MAX_RETRIES = int(os.getenv("SPARQL_MAX_RETRIES", "1"))

    # Cache TTL in seconds
    CACHE_TTL = int(os.getenv("CACHE_TTL", str(cache.DEFAULT_TTL)))

    # Path to the built frontend (index.html and assets)
    FRONTEND_DIST = os.getenv("FRONTEND_DIST", "")


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    WDQS_ENDPOINT = "http://wdqs.test/sparql"
    SPARQL_MAX_RETRIES = 1
    FRONTEND_DIST = ""
