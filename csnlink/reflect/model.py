# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Linked models: one class per CSN definition.

    model = linked(csn)
    Books = model["my.bookshop.Books"]
    Books.elements.author.target     # 'my.bookshop.Authors'
    Books.elements.author._target    # the Authors class
    issubclass(Books, Entity)        # True

Classes derive from the root matching their kind (or from the class of the
type they declare), so extending a root afterwards reaches every linked
definition of that kind.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from .._errors import ResolutionError
from ..csn import CSN
from ._builtin import builtin
from .classes import LINKED_PROPS, Entity, Event, Linked
from .graph import dependency_order, walk
from .linker import Linker, is_reference

__all__ = ("LinkedModel", "linked")

logger = logging.getLogger(__name__)


def _check_names(definitions: Mapping[str, Mapping[str, Any]]) -> None:
    """Every type, include and target must name something that exists."""

    def known(name: str) -> bool:
        return name in definitions or builtin.lookup(name) is not None

    for name, definition in definitions.items():
        for path, node in walk(definition, name):
            if is_reference(node):
                target = node.get("target")
                if target is None and "targetAspect" not in node:
                    raise ResolutionError(
                        f"Reference '{path}' has no target",
                        details={"referrer": path},
                    )
                if isinstance(target, str) and target not in definitions:
                    raise ResolutionError.from_reference(
                        target, referrer=path, expected="entity"
                    )
                continue
            type_ = node.get("type")
            if isinstance(type_, str) and not known(type_):
                raise ResolutionError.from_reference(type_, referrer=path)
            for include in node.get("includes") or ():
                if include not in definitions:
                    raise ResolutionError.from_reference(include, referrer=path)


def _check_targets(
    definitions: Mapping[str, Mapping[str, Any]],
    classes: Mapping[str, type[Linked]],
) -> None:
    for name, definition in definitions.items():
        for path, node in walk(definition, name):
            target = node.get("target")
            if not is_reference(node) or not isinstance(target, str):
                continue
            if not issubclass(classes[target], Entity):
                raise ResolutionError.from_reference(
                    target,
                    referrer=path,
                    expected="entity",
                    message=f"Target '{target}' of '{path}' is not an entity",
                )


class LinkedModel:
    """Reflection surface over the linked classes of one CSN document."""

    def __init__(self, csn: CSN | Mapping[str, Any]):
        self.csn = CSN.coerce(csn)
        raw = self.csn.raw_definitions()
        logger.debug("Linking %d definitions", len(raw))

        _check_names(raw)
        order = dependency_order(raw)

        # nothing is published before every class is built and checked
        classes: dict[str, type[Linked]] = {}
        linker = Linker(classes)
        merged: dict[str, dict[str, Any] | None] = {}
        for name in order:
            classes[name] = self._synthesize(name, raw, linker, merged)
        _check_targets(raw, classes)

        self._classes = classes
        self.linker = linker
        self.definitions: Mapping[str, type[Linked]] = MappingProxyType(classes)
        logger.debug("Linked model with %d classes", len(classes))

    @staticmethod
    def _merged_elements(
        name: str,
        raw: Mapping[str, Mapping[str, Any]],
        merged: dict[str, dict[str, Any] | None],
    ) -> dict[str, Any] | None:
        # includes come first; own elements override included ones
        if name in merged:
            return merged[name]
        node = raw[name]
        elements: dict[str, Any] = {}
        for include in node.get("includes") or ():
            elements.update(LinkedModel._merged_elements(include, raw, merged) or {})
        own = node.get("elements")
        result = None if own is None and not elements else {**elements, **(own or {})}
        merged[name] = result
        return result

    def _synthesize(
        self,
        name: str,
        raw: Mapping[str, Mapping[str, Any]],
        linker: Linker,
        merged: dict[str, dict[str, Any] | None],
    ) -> type[Linked]:
        node = raw[name]
        base = linker.base_for(node, referrer=name)
        namespace = {k: v for k, v in node.items() if k not in LINKED_PROPS}
        namespace.update(
            name=name,
            _linker=linker,
            __module__=__name__,
            __qualname__=name,
        )
        cls = type(name.rpartition(".")[2], (base,), namespace)

        if (elements := self._merged_elements(name, raw, merged)) is not None:
            cls.elements = linker.elements(elements, cls)
        if (params := node.get("params")) is not None:
            cls.params = linker.elements(params, cls)
        for key in ("items", "returns"):
            if (child := node.get(key)) is not None:
                setattr(cls, key, linker.link(child, key, cls))
        return cls

    def __getitem__(self, name: str) -> type[Linked]:
        return self._classes[name]

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[str]:
        return iter(self._classes)

    def __len__(self) -> int:
        return len(self._classes)

    def get(self, name: str, default: Any = None) -> Any:
        return self._classes.get(name, default)

    @property
    def builtin(self):
        return builtin

    @property
    def classes(self) -> Mapping[str, type[Linked]]:
        """Builtin root classes together with this model's classes."""
        return MappingProxyType({**builtin.classes, **self._classes})

    def each(
        self, root: str | type = Linked, namespace: str | None = None
    ) -> Iterator[type[Linked]]:
        """Linked classes deriving from *root*, optionally within *namespace*."""
        if isinstance(root, str):
            root = builtin.classes[root]
        prefix = f"{namespace}." if namespace else ""
        for name, cls in self._classes.items():
            if name.startswith(prefix) and issubclass(cls, root):
                yield cls

    def _by_name(self, root: str | type, namespace: str | None) -> dict[str, type[Linked]]:
        cut = len(namespace) + 1 if namespace else 0
        return {cls.name[cut:]: cls for cls in self.each(root, namespace)}

    def entities(self, namespace: str | None = None) -> dict[str, type[Entity]]:
        """Entities keyed by their name relative to *namespace*."""
        return self._by_name("entity", namespace)

    def events(self, namespace: str | None = None) -> dict[str, type[Event]]:
        return {
            n: cls
            for n, cls in self._by_name("event", namespace).items()
            if cls.kind == "event"
        }

    @property
    def services(self) -> dict[str, type[Linked]]:
        return self._by_name("service", None)

    def __repr__(self) -> str:
        return f"LinkedModel({len(self._classes)} definitions)"


def linked(csn: CSN | Mapping[str, Any]) -> LinkedModel:
    """Link a CSN document (or definitions mapping) into a model."""
    return LinkedModel(csn)
