"""Explicit event table used to wire handlers into the host lifecycle."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List, Tuple

logger = logging.getLogger("mbar.hooks")

Handler = Callable[..., Any]


class EventDispatcher:
    """In-process action/filter dispatcher.

    Actions call every handler for their side effects. Filters pass a value
    through each handler in priority order and return the final value.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, List[Tuple[int, int, Handler]]] = defaultdict(list)
        self._counter = 0

    def register(self, event: str, handler: Handler, priority: int = 10) -> None:
        self._counter += 1
        self._handlers[event].append((priority, self._counter, handler))
        self._handlers[event].sort(key=lambda entry: (entry[0], entry[1]))

    def register_table(self, table: Dict[str, Handler], priority: int = 10) -> None:
        for event, handler in table.items():
            self.register(event, handler, priority=priority)

    def has(self, event: str) -> bool:
        return bool(self._handlers.get(event))

    def events(self) -> List[str]:
        return sorted(event for event, handlers in self._handlers.items() if handlers)

    def do_action(self, event: str, *args: Any) -> None:
        for _, _, handler in list(self._handlers.get(event, [])):
            logger.debug("Action %s -> %s", event, getattr(handler, "__name__", handler))
            handler(*args)

    def apply_filters(self, event: str, value: Any, *args: Any) -> Any:
        for _, _, handler in list(self._handlers.get(event, [])):
            logger.debug("Filter %s -> %s", event, getattr(handler, "__name__", handler))
            value = handler(value, *args)
        return value
