# Copyright (c) 2023 - 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "ModelPileError",
    "ValidationError",
    "CapabilityError",
    "ItemNotFoundError",
)


class ModelPileError(Exception):
    default_message: ClassVar[str] = "modelpile error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class ValidationError(ModelPileError):
    """Exception raised when a value handed to the library is unusable."""

    default_message = "Validation failed"

    @classmethod
    def from_value(
        cls,
        value: Any,
        *,
        expected: str | None = None,
        message: str | None = None,
        cause: Exception | None = None,
        **extra: Any,
    ):
        details = {
            "value": value,
            "type": type(value).__name__,
            **({"expected": expected} if expected else {}),
            **extra,
        }
        return cls(message=message, details=details, cause=cause)


class CapabilityError(ModelPileError, AttributeError):
    """A model is missing a capability the collection needs from it.

    Raised at the moment the capability is used, never when a model is
    merely stored.
    """

    default_message = "Model is missing a required capability"

    @classmethod
    def from_model(
        cls, model: Any, capability: str, *, cause: Exception | None = None
    ):
        return cls(
            f"{type(model).__name__} object has no '{capability}' capability",
            details={"capability": capability, "type": type(model).__name__},
            cause=cause,
        )


class ItemNotFoundError(ModelPileError, LookupError):
    default_message = "Item not found"
