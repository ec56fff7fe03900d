"""Aspect ratio catalog commands."""

from __future__ import annotations

from typing import Any, Dict, List

import typer
from rich.markup import escape
from rich.table import Table

from mbar_cli.commands.common import get_state, print_json_payload, require_plugin
from mbar_cli.core.config import store_catalog
from mbar_cli.core.plugin import ACTIVATE
from mbar_cli.core.ratios import AspectRatio, InvalidDimension, RatioCatalog

app = typer.Typer(help="Manage the named aspect ratios offered as filters")


def _ratio_payload(ratio: AspectRatio) -> Dict[str, Any]:
    return {
        "key": ratio.key,
        "width": ratio.width,
        "height": ratio.height,
        "name": ratio.name,
        "label": ratio.label,
    }


def _catalog_payload(catalog: RatioCatalog) -> List[Dict[str, Any]]:
    return [_ratio_payload(ratio) for ratio in catalog.list()]


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List the configured aspect ratios."""
    state = get_state(ctx)
    catalog = require_plugin(state).catalog

    if state.json_output:
        print_json_payload(state, {"ratios": _catalog_payload(catalog)})
        return

    if state.plain_output:
        for ratio in catalog.list():
            typer.echo(f"{ratio.key}\t{ratio.label}")
        return

    if not len(catalog):
        state.console.print("No aspect ratios configured. Run `mbar ratios seed` to add the defaults.")
        return

    table = Table(title=f"Aspect ratios ({len(catalog)})")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")
    for ratio in catalog.list():
        table.add_row(ratio.key, escape(ratio.label), str(ratio.width), str(ratio.height))
    state.console.print(table)


@app.command("add")
def add_command(
    ctx: typer.Context,
    width: int = typer.Argument(..., help="Width component, e.g. 16"),
    height: int = typer.Argument(..., help="Height component, e.g. 9"),
    name: str = typer.Option("", help="Display name, e.g. Widescreen"),
) -> None:
    """Add or replace an aspect ratio."""
    state = get_state(ctx)
    plugin = require_plugin(state)

    try:
        ratio = plugin.catalog.add(width, height, name)
    except InvalidDimension as exc:
        raise typer.BadParameter(str(exc))
    store_catalog(state.config, plugin.catalog, state.config_path)

    if state.json_output:
        print_json_payload(state, {"status": "saved", "ratio": _ratio_payload(ratio)})
        return
    if state.plain_output:
        typer.echo(f"saved\t{ratio.key}\t{ratio.label}")
        return
    state.console.print(f"Saved {escape(ratio.label)} as {ratio.key}")


@app.command("remove")
def remove_command(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Ratio key as shown by `ratios list`, e.g. 1.778"),
) -> None:
    """Remove an aspect ratio by key."""
    state = get_state(ctx)
    plugin = require_plugin(state)

    try:
        ratio = plugin.catalog.remove(key)
    except KeyError:
        raise typer.BadParameter(f"Unknown aspect ratio key: {key}")
    store_catalog(state.config, plugin.catalog, state.config_path)

    if state.json_output:
        print_json_payload(state, {"status": "removed", "ratio": _ratio_payload(ratio)})
        return
    if state.plain_output:
        typer.echo(f"removed\t{ratio.key}")
        return
    state.console.print(f"Removed {escape(ratio.label)}")


@app.command("seed")
def seed_command(ctx: typer.Context) -> None:
    """Add the default ratios (1:1, 4:3, 16:9, 16:10) when none exist yet."""
    state = get_state(ctx)
    plugin = require_plugin(state)

    before = len(plugin.catalog)
    state.dispatcher.do_action(ACTIVATE)
    seeded = before == 0 and len(plugin.catalog) > 0

    if state.json_output:
        print_json_payload(state, {"seeded": seeded, "ratios": _catalog_payload(plugin.catalog)})
        return
    if state.plain_output:
        typer.echo(f"seeded\t{str(seeded).lower()}")
        return
    if seeded:
        state.console.print(f"Seeded {len(plugin.catalog)} default aspect ratios")
    else:
        state.console.print("Aspect ratios already configured; nothing changed")
