"""Map media library filter selections onto attachment query arguments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from mbar_cli.core.constants import (
    ALL_DATES,
    ALL_RATIOS,
    ALL_RATIOS_LABEL,
    DATE_FILTER_PARAM,
    DATE_LABEL_FORMAT,
    IMAGE_MIME_TYPE,
    MODE_PARAM,
    RATIO_FILTER_PARAM,
    RATIO_META_KEY,
    VIEW_MODES,
)
from mbar_cli.core.ratios import RatioCatalog

logger = logging.getLogger("mbar.filters")


def _param(params: Mapping[str, Any], name: str) -> str:
    value = params.get(name)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True)
class FilterRequest:
    """Validated media library filter selections for one request."""

    ratio: str = ALL_RATIOS
    date: str = ALL_DATES
    mode: str = "grid"

    @classmethod
    def from_params(cls, params: Mapping[str, Any], catalog: RatioCatalog) -> "FilterRequest":
        ratio = _param(params, RATIO_FILTER_PARAM) or ALL_RATIOS
        if ratio != ALL_RATIOS and ratio not in catalog:
            logger.debug("Unknown aspect ratio filter %r; showing all ratios", ratio)
            ratio = ALL_RATIOS

        date = _param(params, DATE_FILTER_PARAM) or ALL_DATES

        mode = _param(params, MODE_PARAM).lower() or "grid"
        if mode not in VIEW_MODES:
            mode = "grid"

        return cls(ratio=ratio, date=date, mode=mode)

    @property
    def is_filtered(self) -> bool:
        return self.ratio != ALL_RATIOS or self.date != ALL_DATES


def parse_month_label(label: str) -> Optional[str]:
    """Turn a date filter label such as "March 2024" into "202403"."""
    try:
        parsed = datetime.strptime(label.strip(), DATE_LABEL_FORMAT)
    except ValueError:
        return None
    return parsed.strftime("%Y%m")


def build_query(request: FilterRequest, base: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Add ratio and month constraints to attachment query arguments.

    Grid and list views both go through here, so a selection filters the same
    attachments in either mode.
    """
    query: Dict[str, Any] = dict(base or {})

    if request.ratio != ALL_RATIOS:
        meta_query = list(query.get("meta_query") or [])
        meta_query.append({"key": RATIO_META_KEY, "value": request.ratio, "compare": "="})
        query["meta_query"] = meta_query
        query["post_mime_type"] = IMAGE_MIME_TYPE

    if request.date != ALL_DATES:
        month = parse_month_label(request.date)
        if month:
            query["m"] = month
        else:
            logger.debug("Ignoring unparseable date filter %r", request.date)

    return query


def dropdown_context(catalog: RatioCatalog, request: Optional[FilterRequest] = None) -> Dict[str, Any]:
    """Values the filter control is rendered from."""
    options: List[Tuple[str, str]] = [(ALL_RATIOS, ALL_RATIOS_LABEL)]
    options.extend((ratio.key, catalog.label(ratio)) for ratio in catalog.list())
    return {
        "current": request.ratio if request else ALL_RATIOS,
        "ratios": options,
    }
