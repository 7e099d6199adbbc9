# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from ._concepts import Handler
from .config import settings

__all__ = ("EventBus",)

logger = logging.getLogger(__name__)


class EventBus:
    """Synchronous in-proc pub/sub keyed by event name.

    Handlers for a name are called in subscription order, on the caller's
    thread, before ``emit`` returns. Emission iterates over a copy of the
    handler list, so subscribing or unsubscribing from inside a handler
    only affects later emissions.

    With ``isolate_errors`` a failing handler is logged and counted and the
    remaining handlers still run; without it the exception reaches the
    emitter and the remaining handlers are skipped.
    """

    def __init__(self, isolate_errors: bool | None = None):
        self._subs: dict[str, list[Handler]] = defaultdict(list)
        self.isolate_errors = (
            settings.MODELPILE_ISOLATE_HANDLER_ERRORS
            if isolate_errors is None
            else isolate_errors
        )
        self._stats: dict[str, dict[str, int]] = defaultdict(
            lambda: {"emitted": 0, "handled": 0, "failed": 0}
        )

    def subscribe(self, topic: str, handler: Handler) -> None:
        """Register a handler for a topic."""
        if not callable(handler):
            raise TypeError(f"Handler must be callable, got {handler!r}")
        self._subs[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        """Remove a handler from a topic (idempotent)."""
        if topic in self._subs and handler in self._subs[topic]:
            self._subs[topic].remove(handler)
            if not self._subs[topic]:
                del self._subs[topic]

    def has_subscribers(self, topic: str) -> bool:
        return bool(self._subs.get(topic))

    def topics(self) -> list[str]:
        return list(self._subs)

    def clear(self) -> None:
        self._subs.clear()

    def statistics(self, topic: str) -> dict[str, int]:
        """Get statistics for a topic."""
        return dict(self._stats[topic])

    def emit(self, topic: str, *args: Any, **kw: Any) -> None:
        """Call every handler of ``topic`` with the given arguments."""
        handlers = list(self._subs.get(topic, []))
        self._stats[topic]["emitted"] += 1

        if not handlers:
            logger.debug(f"Emitting event to topic '{topic}' with no subscribers")
            return

        for h in handlers:
            try:
                h(*args, **kw)
            except Exception as e:
                self._stats[topic]["failed"] += 1
                if not self.isolate_errors:
                    raise
                handler_name = getattr(h, "__name__", repr(h))
                logger.error(
                    f"Handler '{handler_name}' failed for topic '{topic}': {e}",
                    exc_info=True,
                )
            else:
                self._stats[topic]["handled"] += 1

    def __len__(self) -> int:
        return sum(len(v) for v in self._subs.values())
