"""List field types and the operators each one accepts."""

from __future__ import annotations

import json

import click

from live_filter.cli import Context, pass_context
from live_filter.filters.vocabulary import (
    field_types,
    input_component_for,
    operator_label,
    operators_for,
    parse_field_type,
    requires_value,
)
from live_filter.utils.output import console, create_table, error

EXIT_SUCCESS = 0
EXIT_UNKNOWN_TYPE = 1


@click.command("operators")
@click.argument("field_type", required=False)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@pass_context
def cli(ctx: Context, field_type: str | None, output_format: str) -> None:
    """Show the operators valid for each field type.

    FIELD_TYPE limits the output to one type.

    \b
    Examples:
      live-filter operators
      live-filter operators date
      live-filter operators array --format json
    """
    if field_type is None:
        types = field_types()
    else:
        parsed = parse_field_type(field_type)
        if parsed is None:
            error(
                f"Unknown field type: {field_type}",
                hint=f"Available: {', '.join(str(t) for t in field_types())}",
            )
            raise SystemExit(EXIT_UNKNOWN_TYPE)
        types = [parsed]

    if output_format == "json":
        data = {
            str(t): [
                {
                    "operator": str(op),
                    "label": operator_label(op),
                    "requires_value": requires_value(op),
                    "input": input_component_for(t, op),
                }
                for op in operators_for(t)
            ]
            for t in types
        }
        click.echo(json.dumps(data, indent=2))
        return

    table = create_table(show_header=True, header_style="bold")
    table.add_column("Type", style="field", no_wrap=True)
    table.add_column("Operator", style="operator", no_wrap=True)
    table.add_column("Label", no_wrap=True)
    table.add_column("Value", justify="center", no_wrap=True)
    table.add_column("Input", no_wrap=True)

    for t in types:
        for index, op in enumerate(operators_for(t)):
            table.add_row(
                str(t) if index == 0 else "",
                str(op),
                operator_label(op),
                "yes" if requires_value(op) else "-",
                input_component_for(t, op) or "",
            )

    console.print(table)
