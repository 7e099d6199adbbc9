# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ._concepts import Handler
from .config import settings
from .eventbus import EventBus

__all__ = ("Element",)


class Element(BaseModel):
    """An observable model.

    Every assignment to a field (declared or extra) that changes its value
    emits a change notification with ``(key, new_value, old_value, self)``
    to the handlers subscribed on the element.

    Example:
        >>> el = Element(id=1, name="Alice")
        >>> el.subscribe("change", print)
        >>> el.name = "Bob"
        name Bob Alice id=1 name='Bob'
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    id: Any = Field(default=None)
    """Identifier of the element, None until one is assigned."""

    _bus: EventBus = PrivateAttr(default_factory=EventBus)

    def get(self, key: str, default: Any = None) -> Any:
        """Current value of a field, or ``default`` when it was never set."""
        if key in type(self).model_fields:
            return getattr(self, key)
        extra = self.__pydantic_extra__ or {}
        return extra.get(key, default)

    def set(self, key: str | None = None, value: Any = None, /, **fields: Any):
        """Assign one field by name, or several as keyword arguments.

        Each changed field emits its own notification, in argument order.
        """
        if key is not None:
            fields = {key: value, **fields}
        for k, v in fields.items():
            setattr(self, k, v)
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
            return
        old = self.get(name)
        super().__setattr__(name, value)
        new = self.get(name)
        if new is not old and new != old:
            self._bus.emit(
                settings.MODELPILE_CHANGE_EVENT, name, new, old, self
            )

    def subscribe(self, event: str, handler: Handler) -> None:
        self._bus.subscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        self._bus.unsubscribe(event, handler)

    def to_dict(self, **kw) -> dict[str, Any]:
        return self.model_dump(**kw)

    def __bool__(self) -> bool:
        """Elements are always considered truthy."""
        return True

    def __hash__(self) -> int:
        return hash(self.id)
