"""Formatting helpers used for console output."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from mbar_cli.core.models import MediaItem
from mbar_cli.core.ratios import RatioCatalog, ratio_key


def format_ratio(value: Optional[Decimal]) -> str:
    """Format a stored ratio; unmeasured shows as "-" and the 0 sentinel as "unknown"."""
    if value is None:
        return "-"
    if value == 0:
        return "unknown"
    return ratio_key(value)


def format_dimensions(width: Optional[int], height: Optional[int]) -> str:
    if not width or not height:
        return "N/A"
    return f"{width}x{height}"


def format_match(item: MediaItem, catalog: RatioCatalog) -> str:
    """Label of the named ratio an item matches, or an empty string."""
    match = catalog.match(item.ratio) if item.ratio else None
    return match.label if match else ""


def format_date(value: str) -> str:
    return value[:10] if value else "N/A"
