"""Tests for the command line interface."""

import json
from unittest.mock import MagicMock, patch

import requests
from click.testing import CliRunner

from wdplaces.cli import main

WD = "http://www.wikidata.org/entity/"


def sparql_response(bindings):
    resp = MagicMock()
    resp.ok = True
    resp.status_code = 200
    resp.json.return_value = {"results": {"bindings": bindings}}
    return resp


@patch("wdplaces.sparql_helper.requests.Session")
def test_country(mock_session_cls):
    mock_session = MagicMock()
    mock_session_cls.return_value = mock_session
    mock_session.post.return_value = sparql_response([
        {"country": {"type": "uri", "value": f"{WD}Q55"}},
    ])

    result = CliRunner().invoke(main, ["country", "528"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["countryQid"] == "Q55"
    assert data["meta"]["capital"] == "—"
    mock_session.close.assert_called_once()


@patch("wdplaces.sparql_helper.requests.Session")
def test_places_options(mock_session_cls):
    mock_session = MagicMock()
    mock_session_cls.return_value = mock_session
    mock_session.post.return_value = sparql_response([
        {
            "place": {"type": "uri", "value": f"{WD}Q727"},
            "coord": {"type": "literal", "value": "Point(4.9 52.4)"},
        },
    ])

    result = CliRunner().invoke(
        main, ["--languages", "en", "places", "528", "--limit", "3", "--min-sitelinks", "10"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)[0]["label"] == "Q727"
    query = mock_session.post.call_args.kwargs["data"]["query"]
    assert "LIMIT 3" in query
    assert ">= 10" in query
    assert 'wikibase:language "en"' in query


def test_place_invalid_qid():
    result = CliRunner().invoke(main, ["place", "nope"])
    assert result.exit_code == 2
    assert "Invalid QID" in result.output


@patch("wdplaces.sparql_helper.requests.Session")
def test_place_upstream_failure(mock_session_cls):
    mock_session = MagicMock()
    mock_session_cls.return_value = mock_session
    mock_session.post.side_effect = requests.exceptions.ConnectionError("reset")

    result = CliRunner().invoke(main, ["place", "Q727"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_version():
    from wdplaces.version import VERSION

    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert VERSION in result.output
