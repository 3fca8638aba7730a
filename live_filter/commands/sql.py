"""Compile a filter query string into a SQL SELECT statement."""

from __future__ import annotations

import click
from sqlalchemy import literal_column, select, table
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import CompileError

from live_filter.cli import Context, pass_context
from live_filter.config import SQL_DIALECTS
from live_filter.filters.params import PAGE_KEY, PER_PAGE_KEY, decode_params
from live_filter.filters.query import (
    apply_filters,
    apply_pagination,
    apply_sort,
    expand_search,
)
from live_filter.filters.querystring import parse_query_string
from live_filter.utils.output import debug, error, warning

EXIT_SUCCESS = 0
EXIT_COMPILE_ERROR = 1

_DIALECTS = {
    "sqlite": sqlite.dialect,
    "postgresql": postgresql.dialect,
    "mysql": mysql.dialect,
}


def build_statement(params: dict, table_name: str, param_key: str, search_fields: list[str]):
    """Build the SELECT for decoded request parameters."""
    group, sorts, pagination = decode_params(params, param_key=param_key)
    if search_fields:
        group = expand_search(group, search_fields)

    stmt = select(literal_column("*")).select_from(table(table_name))
    stmt = apply_filters(stmt, group)
    stmt = apply_sort(stmt, sorts)
    if PAGE_KEY in params or PER_PAGE_KEY in params:
        stmt = apply_pagination(stmt, pagination)
    return stmt


@click.command("sql")
@click.argument("query_string")
@click.option(
    "--dialect",
    "-d",
    type=click.Choice(list(SQL_DIALECTS)),
    default=None,
    help="SQL dialect (default: from config)",
)
@click.option(
    "--table",
    "-t",
    "table_name",
    default="records",
    show_default=True,
    help="Table to select from",
)
@click.option(
    "--search-field",
    "-s",
    "search_fields",
    multiple=True,
    help="Column searched by _search (repeatable; default: from config)",
)
@click.option(
    "--params/--literal",
    "show_params",
    default=False,
    help="Keep bound parameters instead of inlining values",
)
@pass_context
def cli(
    ctx: Context,
    query_string: str,
    dialect: str | None,
    table_name: str,
    search_fields: tuple[str, ...],
    show_params: bool,
) -> None:
    """Print the SELECT a filter query string compiles to.

    \b
    Examples:
      live-filter sql 'filters[title][value]=report&filters[title][operator]=contains'
      live-filter sql "$URL_QUERY" --dialect sqlite --table todos
      live-filter sql 'filters[_search][value]=bug&filters[_search][operator]=custom' \\
          -s title -s description
    """
    config = ctx.config
    dialect_name = dialect or config.sql_dialect
    fields = list(search_fields) or config.search_fields

    params = parse_query_string(query_string)
    stmt = build_statement(params, table_name, config.param_key, fields)
    # Named binds keep "%" in LIKE patterns from being doubled in the output.
    sql_dialect = _DIALECTS[dialect_name](paramstyle="named")

    if not show_params:
        try:
            compiled = stmt.compile(dialect=sql_dialect, compile_kwargs={"literal_binds": True})
            click.echo(str(compiled))
            return
        except (CompileError, NotImplementedError) as e:
            warning(f"Cannot inline values for {dialect_name}, showing parameters instead")
            debug(str(e))

    try:
        compiled = stmt.compile(dialect=sql_dialect)
    except CompileError as e:
        error(f"Cannot compile for {dialect_name}: {e}")
        raise SystemExit(EXIT_COMPILE_ERROR)
    click.echo(str(compiled))
    for name, value in compiled.params.items():
        click.echo(f"-- {name} = {value!r}")
