"""Shared command helpers."""

from __future__ import annotations

import json
from typing import Any

import typer

from mbar_cli.core.api import RestMediaStore, WordPressAPI
from mbar_cli.core.config import resolve_app_password, resolve_library_path
from mbar_cli.core.plugin import MediaByAspectRatio
from mbar_cli.core.state import CLIState
from mbar_cli.core.store import FileMediaStore, MediaStore


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def require_plugin(state: CLIState) -> MediaByAspectRatio:
    """Return the registered plugin or stop when it failed to initialize."""
    if state.plugin is None:
        typer.echo("Aspect ratio features are unavailable; see the log for the initialization error.")
        raise typer.Exit(code=1)
    return state.plugin


def open_store(state: CLIState) -> MediaStore:
    """Build the configured media store (local library file or REST site)."""
    store_cfg = state.config.get("store", {})
    backend = str(store_cfg.get("backend") or "file").lower()

    if backend == "file" or state.library_path is not None:
        return FileMediaStore(resolve_library_path(state.config, explicit=state.library_path))

    if backend == "rest":
        site_cfg = state.config.get("site", {})
        url = site_cfg.get("url")
        if not url:
            raise typer.BadParameter("site.url must be set to use the rest store backend")
        api_cfg = state.config.get("api", {})
        api = WordPressAPI(
            site_url=str(url),
            username=site_cfg.get("username") or None,
            app_password=resolve_app_password(state.config),
            rate_limit_delay=float(api_cfg.get("rate_limit_delay", 0.0)),
            max_retries=int(api_cfg.get("max_retries", 3)),
            timeout_seconds=int(api_cfg.get("timeout_seconds", 30)),
        )
        return RestMediaStore(api, per_page=int(api_cfg.get("per_page", 100)))

    raise typer.BadParameter(f"Unknown store backend: {backend} (expected file or rest)")


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)
