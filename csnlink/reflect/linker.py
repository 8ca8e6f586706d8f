# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Turns raw CSN definition mappings into linked definitions."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import Any

from .._errors import ResolutionError
from ..lazy import Lazy
from ..server import Service
from ._builtin import builtin
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
from .elements import Elements

__all__ = ("Linker", "linker_of", "root_for_kind", "is_reference")

_KIND_ROOTS: dict[str, type[Linked]] = {
    "entity": Entity,
    "event": Event,
    "action": Event,
    "function": Event,
    "struct": Struct,
    "aspect": Struct,
    "array": Array,
    "Association": Association,
    "Composition": Composition,
    "service": Service,
    "context": Linked,
}

_REFERENCE_TYPES: dict[str, type[Linked]] = {
    "cds.Association": Association,
    "cds.Composition": Composition,
    "Association": Association,
    "Composition": Composition,
}


def root_for_kind(kind: str | None) -> type[Linked] | None:
    return _KIND_ROOTS.get(kind) if kind else None


def is_reference(node: Mapping[str, Any]) -> bool:
    """Whether *node* declares an association or composition."""
    kind, type_ = node.get("kind"), node.get("type")
    return kind in ("Association", "Composition") or (
        isinstance(type_, str) and type_ in _REFERENCE_TYPES
    )


class Linker:
    """Resolves type names and links raw definitions against a namespace.

    Args:
        classes: Linked classes by fully qualified name. Builtin types are
            always resolvable; document classes take precedence.
    """

    def __init__(self, classes: Mapping[str, type[Linked]] | None = None):
        self.classes = classes if classes is not None else {}

    def lookup(self, name: str | None, *, referrer: str) -> type[Linked]:
        if isinstance(name, str):
            if name in self.classes:
                return self.classes[name]
            if (found := builtin.lookup(name)) is not None:
                return found
        raise ResolutionError.from_reference(str(name), referrer=referrer)

    def base_for(self, node: Mapping[str, Any], *, referrer: str) -> type[Linked]:
        """Class a definition derives from: its root or its declared type."""
        kind, type_ = node.get("kind"), node.get("type")
        if kind in ("Association", "Composition"):
            return _KIND_ROOTS[kind]
        if isinstance(type_, str) and type_ in _REFERENCE_TYPES:
            return _REFERENCE_TYPES[type_]
        if kind != "type" and (root := root_for_kind(kind)) is not None:
            return root
        if isinstance(type_, str):
            return self.lookup(type_, referrer=referrer)
        if "elements" in node:
            return Struct
        if "items" in node:
            return Array
        return Type

    def link(self, node: Mapping[str, Any], name: str, parent: Any = None) -> Linked:
        """Link an element (or items/returns) definition owned by *parent*."""
        owner = getattr(parent, "name", None)
        base = self.base_for(node, referrer=f"{owner}:{name}" if owner else name)
        return base(node, name=name, parent=parent, _linker=self)

    def elements(self, raw: Mapping[str, Any], owner: Any = None) -> Elements:
        return Elements(
            {
                name: Lazy(partial(self.link, node, name, owner), label=name)
                for name, node in raw.items()
            }
        )


DEFAULT_LINKER = Linker()


def linker_of(obj: Any) -> Linker:
    """The linker of a definition, or the builtin-only default."""
    return getattr(obj, "_linker", None) or DEFAULT_LINKER
