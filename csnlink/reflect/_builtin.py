# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Builtin classes and ``cds.*`` types, created once per process."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ..server import Service
from .classes import (
    Array,
    Association,
    Composition,
    Entity,
    Event,
    Linked,
    Struct,
    Type,
)

__all__ = ("Builtin", "builtin")

# scalar name -> the scalar it specializes
_SCALARS: dict[str, str | None] = {
    "String": None,
    "LargeString": "String",
    "UUID": "String",
    "Boolean": None,
    "Integer": None,
    "UInt8": "Integer",
    "Int16": "Integer",
    "Int32": "Integer",
    "Int64": "Integer",
    "Integer64": "Integer",
    "Decimal": None,
    "DecimalFloat": "Decimal",
    "Double": None,
    "Date": None,
    "Time": None,
    "DateTime": None,
    "Timestamp": None,
    "Binary": None,
    "LargeBinary": "Binary",
    "Vector": None,
    "Map": None,
    # database specific
    "hana.VARCHAR": "String",
    "hana.CHAR": "String",
    "hana.NCHAR": "String",
    "hana.CLOB": "LargeString",
    "hana.SMALLINT": "Integer",
    "hana.TINYINT": "Integer",
    "hana.SMALLDECIMAL": "Decimal",
    "hana.REAL": "Double",
    "hana.BINARY": "Binary",
    "hana.ST_POINT": None,
    "hana.ST_GEOMETRY": None,
}


def _scalar_types() -> dict[str, type[Linked]]:
    types: dict[str, type[Linked]] = {}
    for name, base in _SCALARS.items():
        parent = types[f"cds.{base}"] if base else Type
        types[f"cds.{name}"] = type(
            name.rpartition(".")[2],
            (parent,),
            {"name": f"cds.{name}", "__module__": __name__, "__qualname__": f"cds.{name}"},
        )
    return types


class Builtin:
    """Read-only registry of builtin classes and types."""

    __slots__ = ("classes", "types")

    def __init__(
        self,
        classes: Mapping[str, type[Linked]],
        types: Mapping[str, type[Linked]],
    ):
        self.classes = MappingProxyType(dict(classes))
        self.types = MappingProxyType(dict(types))

    def lookup(self, name: str) -> type[Linked] | None:
        """Builtin type by ``cds.X`` or unqualified ``X`` name."""
        if name in self.types:
            return self.types[name]
        return self.types.get(f"cds.{name}")

    def __repr__(self) -> str:
        return f"Builtin(classes={list(self.classes)}, types={len(self.types)})"


builtin = Builtin(
    classes={
        "Association": Association,
        "Composition": Composition,
        "entity": Entity,
        "event": Event,
        "type": Type,
        "array": Array,
        "struct": Struct,
        "service": Service,
    },
    types={
        **_scalar_types(),
        "cds.Association": Association,
        "cds.Composition": Composition,
    },
)
