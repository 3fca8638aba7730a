"""Resolve date range presets to concrete ranges."""

from __future__ import annotations

import json
from datetime import datetime

import click

from live_filter.cli import Context, pass_context
from live_filter.filters.coerce import to_wire
from live_filter.filters.dates import (
    DATE,
    DATETIME,
    NAIVE_DATETIME,
    PRESET_LABELS,
    UTC_DATETIME,
    preset_names,
    resolve_preset,
)
from live_filter.utils.output import console, create_table, error

EXIT_SUCCESS = 0
EXIT_UNKNOWN_PRESET = 1


@click.command("presets")
@click.argument("name", required=False)
@click.option(
    "--type",
    "-t",
    "target_type",
    type=click.Choice([DATE, DATETIME, UTC_DATETIME, NAIVE_DATETIME]),
    default=DATE,
    help="Representation of the range boundaries (default: date)",
)
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference day as YYYY-MM-DD (default: today in UTC)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@pass_context
def cli(
    ctx: Context,
    name: str | None,
    target_type: str,
    today: datetime | None,
    output_format: str,
) -> None:
    """Show the date range each preset resolves to.

    NAME limits the output to one preset.

    \b
    Examples:
      live-filter presets
      live-filter presets last_7_days --today 2025-07-09
      live-filter presets this_month --type datetime
    """
    if name is None:
        names = preset_names()
    elif name in PRESET_LABELS:
        names = [name]
    else:
        error(f"Unknown preset: {name}", hint=f"Available: {', '.join(preset_names())}")
        raise SystemExit(EXIT_UNKNOWN_PRESET)

    reference = today.date() if today is not None else None
    rows = []
    for preset in names:
        start, end = resolve_preset(preset, target_type, today=reference)
        rows.append((preset, PRESET_LABELS[preset], to_wire(start), to_wire(end)))

    if output_format == "json":
        data = [
            {"name": preset, "label": label, "start": start, "end": end}
            for preset, label, start, end in rows
        ]
        click.echo(json.dumps(data, indent=2))
        return

    table = create_table(show_header=True, header_style="bold")
    table.add_column("Preset", style="field", no_wrap=True)
    table.add_column("Label", no_wrap=True)
    table.add_column("Start", style="value", no_wrap=True)
    table.add_column("End", style="value", no_wrap=True)
    for row in rows:
        table.add_row(*row)
    console.print(table)
