"""Fixtures for backend tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from wdplaces.backend.app import create_app
from wdplaces.backend.config import TestConfig


@pytest.fixture()
def app():
    """Create a test Flask application."""
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def upstream(app):
    """Mocked ``requests.Session`` behind the app's SPARQL client."""
    session = MagicMock()
    app.config["SERVICE"].helper._session = session
    return session


@pytest.fixture()
def sparql_response():
    """Factory for mocked SPARQL JSON responses."""

    def make(bindings, status=200, reason="OK", text=""):
        resp = MagicMock()
        resp.ok = 200 <= status < 300
        resp.status_code = status
        resp.reason = reason
        resp.text = text
        resp.json.return_value = {"head": {"vars": []}, "results": {"bindings": bindings}}
        return resp

    return make
