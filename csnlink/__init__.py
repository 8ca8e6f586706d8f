# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Reflection of CSN documents into linked class models.

Exports resolve on first access, so importing ``csnlink`` stays cheap.
"""

import logging
import sys

from .config import settings
from .lazy import Lazy, LazyFacade, lazified, lazify
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.log_level)

require = lazified(sys.modules[__name__])

# linked definitions
Linked = require(".reflect.classes", "Linked")
Association = require(".reflect.classes", "Association")
Composition = require(".reflect.classes", "Composition")
Entity = require(".reflect.classes", "Entity")
Event = require(".reflect.classes", "Event")
Type = require(".reflect.classes", "Type")
Array = require(".reflect.classes", "Array")
Struct = require(".reflect.classes", "Struct")
Service = require(".server", "Service")
entity = Entity
event = Event
type = Type
array = Array
struct = Struct
builtin = require(".reflect._builtin", "builtin")
LinkedModel = require(".reflect.model", "LinkedModel")
linked = require(".reflect.model", "linked")
CSN = require(".csn", "CSN")

# extensions
extend = require(".extension", "extend")
extensions_of = require(".extension", "extensions_of")
provenance = require(".extension", "provenance")
CapabilitySet = require(".capabilities", "CapabilitySet")
capability = require(".capabilities", "capability")

# errors
CsnLinkError = require("._errors", "CsnLinkError")
ResolutionError = require("._errors", "ResolutionError")
CyclicStructError = require("._errors", "CyclicStructError")
ConflictError = require("._errors", "ConflictError")

del require
lazify(sys.modules[__name__])

__all__ = (
    "__version__",
    "Array",
    "Association",
    "CSN",
    "CapabilitySet",
    "Composition",
    "ConflictError",
    "CsnLinkError",
    "CyclicStructError",
    "Entity",
    "Event",
    "Lazy",
    "LazyFacade",
    "Linked",
    "LinkedModel",
    "ResolutionError",
    "Service",
    "Struct",
    "Type",
    "array",
    "builtin",
    "capability",
    "entity",
    "event",
    "extend",
    "extensions_of",
    "lazified",
    "lazify",
    "linked",
    "logger",
    "provenance",
    "settings",
    "struct",
    "type",
)
