# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Capability sets - named bundles of members that can be attached to
arbitrary targets with :func:`csnlink.extend`.

Usage:
    @capability("timestamps")
    class Timestamps:
        @property
        def created_at(self): ...

    extend(Entity).with_("timestamps")
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Callable, TypeVar

from ._errors import ItemExistsError, ItemNotFoundError

__all__ = (
    "CapabilitySet",
    "capability",
    "clear_capabilities",
    "get_capability",
    "list_capabilities",
    "register_capability",
)

C = TypeVar("C")

# Class bookkeeping and constructors never travel with a capability
_SKIPPED = frozenset(
    {
        "__init__",
        "__new__",
        "__module__",
        "__qualname__",
        "__doc__",
        "__dict__",
        "__weakref__",
        "__slots__",
        "__annotations__",
        "__annotate__",
        "__annotate_func__",
        "__annotations_cache__",
        "__firstlineno__",
        "__static_attributes__",
        "__orig_bases__",
        "__parameters__",
        "__abstractmethods__",
        "_abc_impl",
    }
)


def _collect(source: Any) -> dict[str, Any]:
    if isinstance(source, Mapping):
        return {str(k): source[k] for k in source}
    if inspect.isclass(source):
        members: dict[str, Any] = {}
        # most generic first, so subclasses override their bases
        for klass in reversed(source.__mro__):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                if name not in _SKIPPED:
                    members[name] = member
        return members
    return {k: v for k, v in vars(source).items() if k not in _SKIPPED}


class CapabilitySet:
    """An ordered, immutable bundle of members.

    Every instance is a distinct identity, even when two sets were collected
    from the same source or define the same member names. Constructors
    (``__init__``, ``__new__``) are never collected, so extending a class
    cannot replace how it is built.
    """

    __slots__ = ("name", "origin", "_members")

    def __init__(self, source: Any, name: str | None = None):
        self.origin = source
        self.name = name or getattr(source, "__name__", type(source).__name__)
        self._members = MappingProxyType(_collect(source))

    @classmethod
    def of(cls, source: Any) -> CapabilitySet:
        """Coerce *source* (a set, registered name, class, mapping or object)."""
        if isinstance(source, CapabilitySet):
            return source
        if isinstance(source, str):
            return get_capability(source)
        return cls(source)

    @property
    def members(self) -> Mapping[str, Any]:
        return self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __repr__(self) -> str:
        return f"CapabilitySet({self.name!r}, members={list(self._members)})"


_CAPABILITY_REGISTRY: dict[str, CapabilitySet] = {}


def register_capability(name: str, source: Any) -> CapabilitySet:
    """Store a capability set under *name* for later ``extend().with_(name)``."""
    if name in _CAPABILITY_REGISTRY:
        raise ItemExistsError(
            f"Capability '{name}' already registered", details={"name": name}
        )
    cap = source if isinstance(source, CapabilitySet) else CapabilitySet(source, name)
    _CAPABILITY_REGISTRY[name] = cap
    return cap


def capability(name: str | None = None) -> Callable[[C], C]:
    """Class decorator registering the class body as a capability set."""

    def decorator(cls: C) -> C:
        register_capability(name or cls.__name__, cls)
        return cls

    return decorator


def get_capability(name: str) -> CapabilitySet:
    try:
        return _CAPABILITY_REGISTRY[name]
    except KeyError:
        raise ItemNotFoundError(
            f"Capability '{name}' is not registered", details={"name": name}
        ) from None


def list_capabilities() -> list[str]:
    return sorted(_CAPABILITY_REGISTRY)


def clear_capabilities() -> None:
    """Clear all registrations (mainly for testing)."""
    _CAPABILITY_REGISTRY.clear()
