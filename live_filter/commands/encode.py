"""Encode a JSON filter description as a query string."""

from __future__ import annotations

import json
from typing import IO

import click

from live_filter.cli import Context, pass_context
from live_filter.exceptions import LiveFilterError
from live_filter.filters.params import encode_params
from live_filter.filters.querystring import encode_query
from live_filter.utils.describe import (
    group_from_dict,
    pagination_from_dict,
    sorts_from_dict,
)
from live_filter.utils.output import error

EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1


@click.command("encode")
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--base-url",
    "-u",
    default=None,
    help="Prefix the query string with this URL",
)
@pass_context
def cli(ctx: Context, source: IO[str], base_url: str | None) -> None:
    """Turn a JSON filter description into URL query parameters.

    SOURCE is a JSON file, or '-' (the default) for stdin. The JSON has the
    shape written by 'decode --format json':

    \b
      {"conjunction": "and",
       "filters": [{"field": "status", "operator": "equals",
                    "value": "open", "type": "enum"}],
       "groups": [],
       "sort": [{"field": "due_date", "direction": "asc"}],
       "page": 2, "per_page": 25}

    \b
    Examples:
      live-filter encode filters.json
      echo '{"filters": []}' | live-filter encode --base-url https://example.com/todos
    """
    try:
        data = json.load(source)
    except json.JSONDecodeError as e:
        error(f"Invalid JSON: {e}")
        raise SystemExit(EXIT_INVALID_INPUT)

    if not isinstance(data, dict):
        error("Expected a JSON object at the top level")
        raise SystemExit(EXIT_INVALID_INPUT)

    try:
        group = group_from_dict(data)
        sorts = sorts_from_dict(data)
        pagination = pagination_from_dict(data)
    except LiveFilterError as e:
        error(str(e))
        raise SystemExit(EXIT_INVALID_INPUT)

    params = encode_params(group, sorts, pagination, param_key=ctx.config.param_key)
    query = encode_query(params)
    if base_url:
        click.echo(f"{base_url}?{query}" if query else base_url)
    else:
        click.echo(query)
