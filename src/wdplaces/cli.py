"""Command line interface for :mod:`wdplaces`."""

import json
from typing import Optional

import click

from .backend.config import Config
from .cache import ReadThroughCache
from .queries import ValidationError
from .service import PlacesService
from .sparql_helper import SparqlHelper, SparqlHelperError
from .version import get_version

__all__ = [
    "main",
]


@click.group()
@click.version_option(get_version())
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--endpoint", default=Config.WDQS_ENDPOINT, show_default=True, help="SPARQL endpoint URL")
@click.option("--languages", default=Config.LABEL_LANGUAGES, show_default=True, help="Label languages")
@click.pass_context
def main(ctx: click.Context, verbose: bool, endpoint: str, languages: str) -> None:
    r"""wdplaces - Wikidata places lookup and caching proxy.

    Look up countries and places directly, or run the HTTP proxy with
    wdplaces serve.
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["endpoint"] = endpoint
    ctx.obj["languages"] = languages

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("wdplaces").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


def _service(ctx: click.Context) -> PlacesService:
    helper = SparqlHelper(
        ctx.obj["endpoint"],
        user_agent=Config.WDQS_USER_AGENT,
        timeout=Config.SPARQL_TIMEOUT,
        max_retries=Config.SPARQL_MAX_RETRIES,
    )
    ctx.call_on_close(helper.close)
    return PlacesService(helper, ReadThroughCache(), languages=ctx.obj["languages"])


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _run(lookup):
    try:
        return lookup()
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e
    except SparqlHelperError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e


@main.command()
@click.argument("iso3")
@click.pass_context
def country(ctx: click.Context, iso3: str) -> None:
    """Show country facts for an ISO 3166 numeric code.

    Example:
      wdplaces country 528
    """
    info = _run(lambda: _service(ctx).country(iso3))
    _echo_json(info.to_json())


@main.command()
@click.argument("iso3")
@click.option("--limit", type=int, default=None, help="Number of places (1-60, default 30)")
@click.option("--min-sitelinks", type=int, default=None, help="Minimum sitelink count")
@click.pass_context
def places(ctx: click.Context, iso3: str, limit: Optional[int], min_sitelinks: Optional[int]) -> None:
    """List geolocated places in a country, most linked first.

    Example:
      wdplaces places 528 --limit 5
    """
    result = _run(lambda: _service(ctx).places(iso3, limit=limit, min_sitelinks=min_sitelinks))
    _echo_json([p.to_json() for p in result])


@main.command()
@click.argument("qid")
@click.pass_context
def place(ctx: click.Context, qid: str) -> None:
    """Show details for a single Wikidata item.

    Example:
      wdplaces place Q727
    """
    detail = _run(lambda: _service(ctx).place(qid))
    _echo_json(detail.to_json())


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=Config.PORT, show_default=True, type=int)
@click.option("--debug", is_flag=True, default=Config.DEBUG)
def serve(host: str, port: int, debug: bool) -> None:
    """Run the HTTP proxy (development server)."""
    from .backend.app import create_app

    click.echo(f"Server will be available at: http://localhost:{port}")
    create_app().run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
