"""Image measurement command."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from decimal import Decimal
from typing import Optional

import typer

from mbar_cli.commands.common import get_state, open_store, print_json_payload
from mbar_cli.core.constants import DEFAULT_TIME_LIMIT
from mbar_cli.core.measure import BatchClassifier, parse_time_limit
from mbar_cli.core.models import BatchStatus
from mbar_cli.core.store import StorageUnavailable

logger = logging.getLogger("mbar.commands.measure")

MESSAGES = {
    BatchStatus.COMPLETE: "Success: Images measured.",
    BatchStatus.PARTIAL: "Warning: Some images measured; run again to proceed.",
    BatchStatus.EMPTY: "Warning: No unmeasured images found.",
}


def measure_command(
    ctx: typer.Context,
    time_limit: Optional[str] = typer.Option(
        None,
        "--time-limit",
        "--timeout",
        help="Seconds to work before stopping (default 30, 0 for unlimited)",
    ),
) -> None:
    """Measure aspect ratios for images in the media library.

    Images already measured are skipped, so a partial run can simply be
    repeated until every image has a ratio.
    """
    state = get_state(ctx)
    configured = parse_time_limit(state.config.get("measure", {}).get("time_limit"), DEFAULT_TIME_LIMIT)
    limit = parse_time_limit(time_limit, default=configured) if time_limit is not None else configured

    classifier = BatchClassifier(open_store(state))

    show_status = not (state.plain_output or state.json_output or state.quiet)
    status_ctx = state.console.status("Measuring images...") if show_status else nullcontext()
    with status_ctx as status:
        def on_item(item_id: int, ratio: Decimal) -> None:
            if status is not None:
                status.update(f"Measured attachment {item_id} ({ratio})")

        try:
            result = classifier.run(limit, default_if_missing=configured, on_item=on_item)
        except StorageUnavailable as exc:
            logger.debug("Measurement aborted", exc_info=True)
            if state.json_output:
                print_json_payload(state, {"status": "error", "error": str(exc)})
            else:
                typer.echo(f"Error: {exc}")
            raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, result.to_dict())
        return

    if state.plain_output:
        typer.echo(f"status\t{result.status.value}")
        typer.echo(f"processed\t{result.processed}")
        typer.echo(f"total\t{result.total}")
        return

    state.console.print(MESSAGES[result.status])
    if result.status is BatchStatus.PARTIAL:
        state.console.print(f"Measured {result.processed} of {result.total} images")
