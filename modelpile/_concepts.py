# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

__all__ = (
    "Identifiable",
    "Observable",
    "Handler",
    "M",
)

Handler = Callable[..., Any]


@runtime_checkable
class Identifiable(Protocol):
    """Anything exposing its fields through ``get(key)``.

    Plain mappings qualify, which is enough for a model to be stored and
    indexed by a collection.
    """

    def get(self, key: str, default: Any = None) -> Any: ...


@runtime_checkable
class Observable(Identifiable, Protocol):
    """A model the collection can both index and listen to.

    Implementations emit a change notification carrying
    ``(key, new_value, old_value, model)`` whenever a field changes.
    """

    def subscribe(self, event: str, handler: Handler) -> None: ...

    def unsubscribe(self, event: str, handler: Handler) -> None: ...


M = TypeVar("M", bound=Identifiable)
