# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._concepts import Identifiable, Observable
from ._errors import (
    CapabilityError,
    ItemNotFoundError,
    ModelPileError,
    ValidationError,
)
from .collection import Collection
from .config import settings
from .element import Element
from .eventbus import EventBus
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.MODELPILE_LOG_LEVEL)

__all__ = (
    "Collection",
    "Element",
    "EventBus",
    "Identifiable",
    "Observable",
    "ModelPileError",
    "ValidationError",
    "CapabilityError",
    "ItemNotFoundError",
    "settings",
    "__version__",
)
