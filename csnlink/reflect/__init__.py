# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import sys

from ..lazy import lazified, lazify

require = lazified(sys.modules[__name__])

Linked = require(".classes", "Linked")
Association = require(".classes", "Association")
Composition = require(".classes", "Composition")
Entity = require(".classes", "Entity")
Event = require(".classes", "Event")
Type = require(".classes", "Type")
Array = require(".classes", "Array")
Struct = require(".classes", "Struct")
Elements = require(".elements", "Elements")
Linker = require(".linker", "Linker")
builtin = require("._builtin", "builtin")
LinkedModel = require(".model", "LinkedModel")
linked = require(".model", "linked")

del require
lazify(sys.modules[__name__])

__all__ = (
    "Array",
    "Association",
    "Composition",
    "Elements",
    "Entity",
    "Event",
    "Linked",
    "LinkedModel",
    "Linker",
    "Struct",
    "Type",
    "builtin",
    "linked",
)
