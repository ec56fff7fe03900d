"""Entry point for mbar."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from mbar_cli import __version__
from mbar_cli.commands import library as library_commands
from mbar_cli.commands import ratios as ratio_commands
from mbar_cli.core.config import ConfigError, default_config_path, load_catalog, load_config, store_catalog
from mbar_cli.core.hooks import EventDispatcher
from mbar_cli.core.logs import configure_logging
from mbar_cli.core.plugin import initialize_plugin
from mbar_cli.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="Measure images and filter a media library by aspect ratio",
    invoke_without_command=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    library: Optional[Path] = typer.Option(
        None,
        "--library",
        help="Media library file (JSON/YAML); implies the file store backend",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    configure_logging(verbose=verbose, quiet=quiet)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    dispatcher = EventDispatcher()
    plugin = initialize_plugin(
        dispatcher,
        load_catalog=lambda: load_catalog(cfg),
        persist=lambda catalog: store_catalog(cfg, catalog, cfg_path),
    )
    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
        dispatcher=dispatcher,
        plugin=plugin,
        library_path=library,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


app.add_typer(library_commands.app, name="media")
app.add_typer(ratio_commands.app, name="ratios")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
