"""Wikidata lookup routes — /api/country, /api/places, /api/place."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from wdplaces.service import PlacesService

places_bp = Blueprint("places", __name__)


def _service() -> PlacesService:
    return current_app.config["SERVICE"]


@places_bp.route("/country/<iso3>")
def country(iso3: str):
    """Country facts for an ISO 3166 numeric code (e.g. ``528``)."""
    return jsonify(_service().country(iso3).to_json())


@places_bp.route("/places/<iso3>")
def places(iso3: str):
    """Geolocated places in a country, most sitelinks first."""
    result = _service().places(
        iso3,
        limit=request.args.get("limit"),
        min_sitelinks=request.args.get("minSitelinks"),
    )
    return jsonify([place.to_json() for place in result])


@places_bp.route("/place/<qid>")
def place(qid: str):
    """Detail card data for one Wikidata item."""
    return jsonify(_service().place(qid).to_json())
