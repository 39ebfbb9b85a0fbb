"""Flask application factory for the wdplaces backend API."""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from wdplaces.backend.config import Config
from wdplaces.cache import ReadThroughCache
from wdplaces.queries import ValidationError
from wdplaces.service import PlacesService
from wdplaces.sparql_helper import SparqlHelper, TransportError, UpstreamError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register consistent JSON error handlers."""

    @app.errorhandler(ValidationError)
    def bad_request(exc):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(UpstreamError)
    def bad_gateway(exc):
        return jsonify({
            "error": "Upstream SPARQL endpoint error",
            "details": str(exc),
        }), 502

    @app.errorhandler(TransportError)
    def unreachable(exc):
        if exc.timeout:
            return jsonify({"error": "SPARQL endpoint timeout"}), 504
        return jsonify({
            "error": "SPARQL endpoint unreachable",
            "details": str(exc),
        }), 502

    @app.errorhandler(Exception)
    def unhandled(exc):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application.

    The cache and the SPARQL client are built once here and shared by
    every request through ``app.config["SERVICE"]``.

    Parameters
    ----------
    config_class:
        Configuration class (default :class:`Config`).

    Returns
    -------
    Flask
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # ── CORS ──────────────────────────────────────────────────────────
    CORS(app, resources={
        r"/api/*": {
            "origins": config_class.CORS_ORIGINS,
            "methods": ["GET", "OPTIONS"],
        },
    })

    # ── Lookup service ────────────────────────────────────────────────
    helper = SparqlHelper(
        config_class.WDQS_ENDPOINT,
        user_agent=config_class.WDQS_USER_AGENT,
        timeout=config_class.SPARQL_TIMEOUT,
        max_retries=config_class.SPARQL_MAX_RETRIES,
    )
    cache = ReadThroughCache(ttl=config_class.CACHE_TTL)
    app.config["SERVICE"] = PlacesService(
        helper, cache, languages=config_class.LABEL_LANGUAGES,
    )

    # ── Blueprints ────────────────────────────────────────────────────
    from wdplaces.backend.routes.places import places_bp

    app.register_blueprint(places_bp, url_prefix="/api")

    # ── Error handlers ────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Health check ──────────────────────────────────────────────────
    @app.route("/api/health")
    def health():
        return jsonify({"ok": True})

    # ── Frontend serving ──────────────────────────────────────────────
    frontend_dist = config_class.FRONTEND_DIST
    if frontend_dist:
        dist = Path(frontend_dist).resolve()
        if dist.is_dir():
            logger.info("Serving frontend from %s", dist)

            @app.route("/")
            def serve_index():
                return send_from_directory(str(dist), "index.html")

            @app.route("/<path:filename>")
            def serve_static(filename):
                return send_from_directory(str(dist), filename)
        else:
            logger.warning(
                "FRONTEND_DIST=%s is not a directory", dist,
            )

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=Config.PORT, debug=Config.DEBUG)
