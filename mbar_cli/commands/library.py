"""Media library commands: measure, filtered listing and filter controls."""

from __future__ import annotations

from typing import Any, Dict, List

import typer
from rich.columns import Columns
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mbar_cli.commands.common import get_state, open_store, print_json_payload, require_plugin
from mbar_cli.commands.measure import measure_command
from mbar_cli.core.constants import (
    ALL_DATES,
    ALL_RATIOS,
    ATTACHMENT_STATUS,
    DATE_FILTER_PARAM,
    MODE_PARAM,
    RATIO_FILTER_PARAM,
)
from mbar_cli.core.models import MediaItem
from mbar_cli.core.plugin import FILTER_CONTROLS, QUERY_ATTACHMENTS
from mbar_cli.core.ratios import RatioCatalog
from mbar_cli.core.store import StorageUnavailable
from mbar_cli.utils.formatting import format_date, format_dimensions, format_match, format_ratio

app = typer.Typer(help="Work with the media library")

app.command("measure")(measure_command)


def _params(ratio: str, date: str, mode: str) -> Dict[str, str]:
    return {RATIO_FILTER_PARAM: ratio, DATE_FILTER_PARAM: date, MODE_PARAM: mode}


def _base_query() -> Dict[str, Any]:
    return {
        "post_type": "attachment",
        "post_status": ATTACHMENT_STATUS,
        "orderby": "ID",
        "order": "ASC",
    }


def _item_payload(item: MediaItem, catalog: RatioCatalog) -> Dict[str, Any]:
    return {
        "id": item.id,
        "title": item.title,
        "date": item.date,
        "mime_type": item.mime_type,
        "width": item.width,
        "height": item.height,
        "ratio": format_ratio(item.ratio) if item.ratio is not None else None,
        "match": format_match(item, catalog) or None,
    }


def _grid(items: List[MediaItem], catalog: RatioCatalog) -> Columns:
    cards = []
    for item in items:
        body = "\n".join(
            [
                format_dimensions(item.width, item.height),
                f"ratio {format_ratio(item.ratio)}",
                escape(format_match(item, catalog)),
            ]
        ).rstrip()
        cards.append(Panel(body, title=str(item.id), subtitle=format_date(item.date), expand=False))
    return Columns(cards)


@app.command("list")
def list_command(
    ctx: typer.Context,
    ratio: str = typer.Option(ALL_RATIOS, help="Ratio key to filter by, or 'all'"),
    date: str = typer.Option(ALL_DATES, help="Month label such as 'March 2024', or 'All dates'"),
    mode: str = typer.Option("list", help="Display mode: grid|list"),
) -> None:
    """List attachments filtered by aspect ratio and upload month."""
    state = get_state(ctx)
    plugin = require_plugin(state)
    params = _params(ratio, date, mode)

    query = state.dispatcher.apply_filters(QUERY_ATTACHMENTS, _base_query(), params)
    try:
        items = open_store(state).query(query)
    except StorageUnavailable as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(
            state,
            {"query": query, "items": [_item_payload(item, plugin.catalog) for item in items]},
        )
        return

    if state.plain_output:
        typer.echo("id\tdate\tsize\tratio\tmatch\ttitle")
        for item in items:
            typer.echo(
                "\t".join(
                    [
                        str(item.id),
                        format_date(item.date),
                        format_dimensions(item.width, item.height),
                        format_ratio(item.ratio),
                        format_match(item, plugin.catalog),
                        item.title,
                    ]
                )
            )
        typer.echo(f"total\t{len(items)}")
        return

    if mode.lower() == "grid":
        state.console.print(_grid(items, plugin.catalog))
    else:
        table = Table(title=f"Attachments ({len(items)} total)")
        table.add_column("ID", justify="right")
        table.add_column("Date")
        table.add_column("Size")
        table.add_column("Ratio")
        table.add_column("Match")
        table.add_column("Title")
        for item in items:
            table.add_row(
                str(item.id),
                format_date(item.date),
                format_dimensions(item.width, item.height),
                format_ratio(item.ratio),
                escape(format_match(item, plugin.catalog)),
                escape(item.title),
            )
        state.console.print(table)
    state.console.print(f"Found {len(items)} attachments")


@app.command("filters")
def filters_command(
    ctx: typer.Context,
    ratio: str = typer.Option(ALL_RATIOS, help="Currently selected ratio key"),
) -> None:
    """Show the options the aspect ratio filter control is rendered from."""
    state = get_state(ctx)
    require_plugin(state)

    context = state.dispatcher.apply_filters(FILTER_CONTROLS, {}, _params(ratio, ALL_DATES, "grid"))

    if state.json_output:
        print_json_payload(
            state,
            {
                "current": context["current"],
                "ratios": [{"key": key, "label": label} for key, label in context["ratios"]],
            },
        )
        return

    for key, label in context["ratios"]:
        marker = "*" if key == context["current"] else " "
        if state.plain_output:
            typer.echo(f"{marker}\t{key}\t{label}")
        else:
            state.console.print(f"{marker} {escape(label)} [dim]({key})[/dim]")
