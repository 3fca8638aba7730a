"""Decode a query string into filters, sorts and pagination."""

from __future__ import annotations

import json

import click

from live_filter.cli import Context, pass_context
from live_filter.filters.ast_nodes import FilterGroup
from live_filter.filters.fields import retype_group
from live_filter.filters.params import decode_params
from live_filter.filters.querystring import parse_query_string
from live_filter.utils.describe import state_to_dict
from live_filter.utils.output import console, create_table, info, verbose

EXIT_SUCCESS = 0


def _format_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_value(item) for item in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _add_rows(table, group: FilterGroup, depth: int = 0) -> None:
    indent = "  " * depth
    for flt in group.filters:
        table.add_row(
            f"{indent}{flt.field}",
            str(flt.operator),
            _format_value(flt.value),
            str(flt.type),
        )
    for nested in group.groups:
        table.add_row(f"{indent}({nested.conjunction})", "", "", "")
        _add_rows(table, nested, depth + 1)


@click.command("decode")
@click.argument("query_string")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--typed",
    is_flag=True,
    default=False,
    help="Convert numeric strings using each filter's declared type",
)
@pass_context
def cli(ctx: Context, query_string: str, output_format: str, typed: bool) -> None:
    """Show what a filter query string decodes to.

    QUERY_STRING is the part of a URL after '?'; a leading '?' is ignored.

    \b
    Examples:
      live-filter decode 'filters[status][value]=open&filters[status][operator]=equals'
      live-filter decode "$URL_QUERY" --format json
    """
    params = parse_query_string(query_string)
    verbose(f"Parsed parameters: {params}")

    group, sorts, pagination = decode_params(params, param_key=ctx.config.param_key)
    if typed:
        group = retype_group(group)

    if output_format == "json":
        click.echo(json.dumps(state_to_dict(group, sorts, pagination), indent=2))
        return

    if not group.has_filters():
        info("No filters")
    else:
        table = create_table(
            title=f"Filters ({group.conjunction})", show_header=True, header_style="bold"
        )
        table.add_column("Field", style="field", no_wrap=True)
        table.add_column("Operator", style="operator", no_wrap=True)
        table.add_column("Value", style="value")
        table.add_column("Type", no_wrap=True)
        _add_rows(table, group)
        console.print(table)

    if sorts:
        info("Sort: " + ", ".join(f"{s.field} {s.direction}" for s in sorts))
    info(f"Page {pagination.page}, {pagination.per_page} per page")
