# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, Generic

from ._concepts import Handler, M
from ._errors import CapabilityError, ItemNotFoundError, ValidationError
from .config import settings
from .eventbus import EventBus

__all__ = ("Collection",)

logger = logging.getLogger(__name__)

Comparator = str | Callable[..., Any]


class Collection(Generic[M]):
    """An ordered, observable collection of identifiable models.

    Models keep the order they were inserted in until ``sort`` is called.
    Models whose identifier (read through ``model.get(id_attribute)``) is not
    None are also indexed for O(1) lookup with ``get``; when several models
    share an identifier the most recently added one wins.

    Events, subscribed to with ``subscribe``:
        - ``add`` (model, collection)
        - ``remove`` (model, collection)
        - ``reset`` ()
        - ``sort`` (collection,)
        - ``<field>`` (new_value, old_value, model), forwarded from the
          change notification of any contained model.

    Dispatch is synchronous. A handler that mutates the collection while an
    event is being dispatched sees it in the middle of that mutation.
    """

    def __init__(
        self,
        models: M | Iterable[M] | None = None,
        *,
        order_by: Comparator | None = None,
        id_attribute: str | None = None,
        bus: EventBus | None = None,
    ):
        self.order_by = order_by
        self.id_attribute = id_attribute or settings.MODELPILE_ID_ATTRIBUTE
        self._bus = bus if bus is not None else EventBus()
        self._items: list[M] = []
        self._index: dict[Any, M] = {}
        # id(model) -> (model, forwarding handler); one per contained instance
        self._forwarders: dict[int, tuple[M, Handler]] = {}
        self.reset(models)

    # ------------------------------------------------------------------
    # events
    # ------------------------------------------------------------------

    def subscribe(self, event: str, handler: Handler) -> None:
        self._bus.subscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        self._bus.unsubscribe(event, handler)

    def emit(self, event: str, *args: Any) -> None:
        self._bus.emit(event, *args)

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def reset(self, models: M | Iterable[M] | None = None) -> None:
        """Drop every model, optionally reseed, then emit ``reset``.

        Seeded models do not emit ``add``. Lists previously returned by
        ``all`` are not affected and no longer reflect the collection.
        """
        # read every identifier first so a bad seed leaves the old state intact
        seeds = [(m, self._identify(m)) for m in self._as_list(models)]

        for model, handler in self._forwarders.values():
            model.unsubscribe(settings.MODELPILE_CHANGE_EVENT, handler)
        self._forwarders = {}
        self._items = []
        self._index = {}

        for model, identifier in seeds:
            self._insert(model, None, identifier)

        logger.debug(f"Reset collection with {len(self._items)} model(s)")
        self.emit("reset")

    def add(
        self, models: M | Sequence[M], at: int | None = None
    ) -> M | list[M]:
        """Insert one model, or each model of a sequence, at ``at``.

        ``at`` follows ``list.insert``; None appends. A sequence is added
        one model at a time, each at the same position, so adding
        ``[m1, m2]`` at 0 leaves ``m2`` before ``m1``.
        """
        if self._is_many(models):
            return [self.add(model, at) for model in models]

        self._insert(models, at, self._identify(models))
        self.emit("add", models, self)
        return models

    def remove(self, models: M | Sequence[M]) -> M | list[M] | None:
        """Remove a model, or each model of a sequence.

        The first item equal to the model is removed and ``remove`` is
        emitted with it. A model that is not contained is ignored and
        emits nothing.
        """
        if self._is_many(models):
            removed = [self.remove(model) for model in models]
            return [m for m in removed if m is not None]

        index = self.index_of(models)
        if index < 0:
            return None

        model = self._items.pop(index)
        self._unindex(model, self._identify(model))
        if not self._holds(model):
            self._detach(model)

        logger.debug(f"Removed model at position {index}")
        self.emit("remove", model, self)
        return model

    def sort(self, comparator: Comparator | None = None) -> None:
        """Sort in place, then emit ``sort``.

        Uses ``comparator``, else ``order_by``, else the models' natural
        ordering, keeping the current order when the models define none.
        A comparator is a field name, a one-argument key
        function, or a two-argument ``cmp(a, b)`` function.
        """
        comparator = comparator if comparator is not None else self.order_by
        if comparator is None:
            try:
                # sorted copy, list.sort may leave a partial order on failure
                self._items = sorted(self._items)
            except TypeError:
                logger.debug("Models are not orderable, order left unchanged")
        else:
            self._items.sort(key=self._sort_key(comparator))
        self.emit("sort", self)

    # ------------------------------------------------------------------
    # access
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return len(self._items)

    def at(self, index: int) -> M | None:
        """Model at ``index``, or None when it is out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def all(self) -> list[M]:
        return list(self._items)

    def get(self, identifier: Any, default: Any = None) -> M | Any:
        if identifier is None:
            return default
        return self._index.get(identifier, default)

    def require(self, identifier: Any) -> M:
        """Like ``get`` but raises ItemNotFoundError for unknown identifiers."""
        if identifier is None or identifier not in self._index:
            raise ItemNotFoundError(
                f"No model with {self.id_attribute}={identifier!r}",
                details={"identifier": identifier},
            )
        return self._index[identifier]

    def index_of(self, model: M) -> int:
        """Position of the first item equal to ``model``, -1 when absent."""
        try:
            return self._items.index(model)
        except ValueError:
            return -1

    # ------------------------------------------------------------------
    # iteration helpers
    # ------------------------------------------------------------------

    def filter(self, predicate: Callable[[M], Any]) -> list[M]:
        return [m for m in self._items if predicate(m)]

    def for_each(self, fn: Callable[[M], Any]) -> None:
        for m in list(self._items):
            fn(m)

    def every(self, predicate: Callable[[M], Any]) -> bool:
        return all(predicate(m) for m in self._items)

    def map(self, fn: Callable[[M], Any]) -> list[Any]:
        return [fn(m) for m in self._items]

    def some(self, predicate: Callable[[M], Any]) -> bool:
        return any(predicate(m) for m in self._items)

    def find(self, predicate: Callable[[M], Any]) -> M | None:
        return next((m for m in self._items if predicate(m)), None)

    def where(self, **attrs: Any) -> list[M]:
        """Models whose fields equal every given keyword value."""
        return self.filter(self._matcher(attrs))

    def find_where(self, **attrs: Any) -> M | None:
        return self.find(self._matcher(attrs))

    def pluck(self, key: str) -> list[Any]:
        return [self._read(m, key) for m in self._items]

    # ------------------------------------------------------------------
    # dunder
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[M]:
        return iter(list(self._items))

    def __contains__(self, model: Any) -> bool:
        return model in self._items

    def __getitem__(self, key: int | slice) -> M | list[M]:
        return self._items[key]

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _insert(self, model: M, at: int | None, identifier: Any) -> None:
        if at is None:
            self._items.append(model)
        else:
            self._items.insert(at, model)
        if identifier is not None:
            self._index[identifier] = model
        self._attach(model)

    def _identify(self, model: M) -> Any:
        return self._read(model, self.id_attribute)

    def _read(self, model: M, key: str) -> Any:
        try:
            getter = model.get
        except AttributeError as e:
            raise CapabilityError.from_model(model, "get", cause=e) from e
        return getter(key)

    def _unindex(self, model: M, identifier: Any) -> None:
        if identifier is None or self._index.get(identifier) is not model:
            return
        del self._index[identifier]
        # another contained model may still carry the identifier
        for other in reversed(self._items):
            if other is not model and self._identify(other) == identifier:
                self._index[identifier] = other
                return
        if self._holds(model) and self._identify(model) == identifier:
            self._index[identifier] = model

    def _holds(self, model: M) -> bool:
        return any(m is model for m in self._items)

    def _attach(self, model: M) -> None:
        key = id(model)
        if key in self._forwarders:
            return
        subscribe = getattr(model, "subscribe", None)
        if subscribe is None:
            logger.debug(
                f"{type(model).__name__} has no change notification, "
                "field events will not be forwarded"
            )
            return

        def forward(field: str, value: Any, previous: Any, *_: Any) -> None:
            self._on_model_change(model, field, value, previous)

        subscribe(settings.MODELPILE_CHANGE_EVENT, forward)
        self._forwarders[key] = (model, forward)

    def _detach(self, model: M) -> None:
        entry = self._forwarders.pop(id(model), None)
        if entry is not None:
            model.unsubscribe(settings.MODELPILE_CHANGE_EVENT, entry[1])

    def _on_model_change(
        self, model: M, field: str, value: Any, previous: Any
    ) -> None:
        if field == self.id_attribute:
            self._unindex(model, previous)
            if value is not None:
                self._index[value] = model
        self.emit(field, value, previous, model)

    def _sort_key(self, comparator: Comparator) -> Callable[[M], Any]:
        if isinstance(comparator, str):
            return lambda m: self._read(m, comparator)
        if not callable(comparator):
            raise ValidationError.from_value(
                comparator,
                expected="field name, key function or cmp function",
                message="Invalid comparator",
            )
        if _positional_arity(comparator) >= 2:
            return functools.cmp_to_key(comparator)
        return comparator

    def _matcher(self, attrs: dict[str, Any]) -> Callable[[M], bool]:
        return lambda m: all(self._read(m, k) == v for k, v in attrs.items())

    @staticmethod
    def _is_many(value: Any) -> bool:
        return isinstance(value, (list, tuple))

    @classmethod
    def _as_list(cls, models: Any) -> list[Any]:
        if models is None:
            return []
        if cls._is_many(models):
            return list(models)
        return [models]


def _positional_arity(fn: Callable[..., Any]) -> int:
    """Number of required positional parameters, 1 when unknown."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    return sum(
        1
        for p in sig.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        and p.default is p.empty
    )
