# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("ModelPileSettings", "settings")


class ModelPileSettings(BaseSettings, frozen=True):
    """Library settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # field read through ``model.get`` to index models
    MODELPILE_ID_ATTRIBUTE: str = "id"

    # notification a model emits when one of its fields changes
    MODELPILE_CHANGE_EVENT: str = "change"

    # log and count handler failures instead of raising them at the emitter
    MODELPILE_ISOLATE_HANDLER_ERRORS: bool = True

    MODELPILE_LOG_LEVEL: Literal[
        "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    ] = "WARNING"

    @field_validator("MODELPILE_ID_ATTRIBUTE", "MODELPILE_CHANGE_EVENT")
    def _validate_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("MODELPILE_LOG_LEVEL", mode="before")
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


settings = ModelPileSettings()
