# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Service root of linked models.

Serving is out of scope here; ``Service`` only reflects the definitions a
service exposes so hosting code can discover them.
"""

from __future__ import annotations

from typing import Any

from .reflect.classes import Entity, Event, Linked, hybridproperty

__all__ = ("Service",)


def _members(service: Any, root: type[Linked], kinds: tuple[str, ...] = ()) -> dict[str, type]:
    from .reflect.linker import linker_of

    prefix = f"{service.name}."
    found = {}
    for name, cls in linker_of(service).classes.items():
        if not name.startswith(prefix):
            continue
        if issubclass(cls, root) and (not kinds or cls.kind in kinds):
            found[name[len(prefix):]] = cls
    return found


class Service(Linked):
    kind = "service"

    @hybridproperty
    def entities(self) -> dict[str, type[Entity]]:
        """Entities exposed by this service, by unqualified name."""
        return _members(self, Entity)

    @hybridproperty
    def events(self) -> dict[str, type[Event]]:
        return _members(self, Event, ("event",))

    @hybridproperty
    def operations(self) -> dict[str, type[Event]]:
        """Actions and functions declared by this service."""
        return _members(self, Event, ("action", "function"))
