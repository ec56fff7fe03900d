"""Plugin handlers and their registration with the event dispatcher."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from mbar_cli.core.filters import FilterRequest, build_query, dropdown_context
from mbar_cli.core.hooks import EventDispatcher, Handler
from mbar_cli.core.ratios import RatioCatalog

logger = logging.getLogger("mbar.plugin")

ACTIVATE = "activate"
QUERY_ATTACHMENTS = "query_attachments"
FILTER_CONTROLS = "filter_controls"


class MediaByAspectRatio:
    """Handlers for seeding the catalog and filtering attachments by ratio."""

    def __init__(self, catalog: RatioCatalog, persist: Callable[[RatioCatalog], Any]) -> None:
        self.catalog = catalog
        self._persist = persist

    def hooks(self) -> Dict[str, Handler]:
        return {
            ACTIVATE: self.activation,
            QUERY_ATTACHMENTS: self.filter_query,
            FILTER_CONTROLS: self.filter_controls,
        }

    def activation(self) -> bool:
        """Seed the default ratios when no catalog exists yet."""
        if len(self.catalog):
            return False
        self.catalog = RatioCatalog.defaults()
        self._persist(self.catalog)
        logger.info("Seeded %d default aspect ratios", len(self.catalog))
        return True

    def filter_query(self, query: Mapping[str, Any], params: Mapping[str, Any]) -> Dict[str, Any]:
        return build_query(FilterRequest.from_params(params, self.catalog), query)

    def filter_controls(self, context: Optional[Mapping[str, Any]], params: Mapping[str, Any]) -> Dict[str, Any]:
        merged: Dict[str, Any] = dict(context or {})
        merged.update(dropdown_context(self.catalog, FilterRequest.from_params(params, self.catalog)))
        return merged


def initialize_plugin(
    dispatcher: EventDispatcher,
    load_catalog: Callable[[], RatioCatalog],
    persist: Callable[[RatioCatalog], Any],
) -> Optional[MediaByAspectRatio]:
    """Register the plugin, or log and carry on without it when setup fails."""
    try:
        plugin = MediaByAspectRatio(catalog=load_catalog(), persist=persist)
        dispatcher.register_table(plugin.hooks())
    except Exception:
        logger.exception("Unable to initialize the media-by-aspect-ratio plugin")
        return None
    return plugin
