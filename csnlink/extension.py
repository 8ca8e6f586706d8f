# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Add capabilities to an existing object, for example:

    extend(Entity).with_(
        class_with_members,
        {"answer": 42},
        "registered-capability",
    )

The target is mutated in place and returned; every existing holder of the
target sees the new members immediately. Later capabilities shadow earlier
ones (and members the target defined itself).
"""

from __future__ import annotations

import inspect
import logging
import weakref
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Generic, TypeVar

from ._errors import ConflictError
from .capabilities import CapabilitySet
from .config import settings

__all__ = (
    "Extension",
    "ExtensionRecord",
    "extend",
    "extensions_of",
    "provenance",
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_POLICIES = ("override", "warn", "error")
_INSTANCE_MARK = "__csnlink_instance__"
_MISSING = object()

# holder (class / module / per-instance class) -> applied records, in order
_LEDGER: weakref.WeakKeyDictionary[Any, list[ExtensionRecord]] = (
    weakref.WeakKeyDictionary()
)


@dataclass(slots=True, frozen=True)
class ExtensionRecord:
    capability: CapabilitySet
    members: tuple[str, ...]
    policy: str

    @property
    def name(self) -> str:
        return self.capability.name


def _holder(target: Any, *, create: bool) -> Any:
    """Return the object whose namespace receives the members."""
    if inspect.isclass(target) or isinstance(target, ModuleType):
        return target
    cls = type(target)
    if vars(cls).get(_INSTANCE_MARK):
        return cls
    if not create:
        return None
    # private subclass with an identical layout, so __class__ can be swapped
    sub = type(cls)(
        cls.__name__,
        (cls,),
        {
            _INSTANCE_MARK: True,
            "__slots__": (),
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
        },
    )
    target.__class__ = sub
    return sub


def _own_dict(target: Any) -> dict[str, Any] | None:
    if inspect.isclass(target) or isinstance(target, ModuleType):
        return None
    return getattr(target, "__dict__", None)


def _current(target: Any, holder: Any, name: str) -> Any:
    own = _own_dict(target)
    if own is not None and name in own:
        return own[name]
    if holder is None:
        return _MISSING
    if isinstance(holder, ModuleType):
        return holder.__dict__.get(name, _MISSING)
    return vars(holder).get(name, _MISSING)


def _assign(target: Any, holder: Any, name: str, member: Any) -> None:
    own = _own_dict(target)
    if own is not None:
        # single objects: plain values live on the object, descriptors on
        # its private class (where they can bind)
        if not hasattr(type(member), "__get__"):
            own[name] = member
            return
        own.pop(name, None)
    setattr(holder, name, member)
    if not isinstance(holder, ModuleType):
        set_name = getattr(type(member), "__set_name__", None)
        if set_name is not None:
            set_name(member, holder, name)


def _same_bundle(record: ExtensionRecord, cap: CapabilitySet) -> bool:
    """Whether *cap* re-applies what *record* already applied."""
    old = record.capability
    if old is cap:
        return True
    if old.origin is not cap.origin or record.members != tuple(cap.members):
        return False
    return all(old.members[n] is cap.members[n] for n in record.members)


class Extension(Generic[T]):
    """Builder returned by :func:`extend`."""

    __slots__ = ("target", "policy")

    def __init__(self, target: T, policy: str | None = None):
        policy = policy or settings.conflict_policy
        if policy not in _POLICIES:
            raise ValueError(
                f"Invalid conflict policy: {policy!r}, expected one of {_POLICIES}"
            )
        self.target = target
        self.policy = policy

    def _conflicts(
        self, holder: Any, caps: list[CapabilitySet]
    ) -> list[tuple[str, str]]:
        found = []
        staged: dict[str, Any] = {}
        for cap in caps:
            for name, member in cap.members.items():
                existing = staged.get(name, _MISSING)
                if existing is _MISSING:
                    existing = _current(self.target, holder, name)
                if existing is not _MISSING and existing is not member:
                    found.append((cap.name, name))
                staged[name] = member
        return found

    def with_(self, *capabilities: Any) -> T:
        """Apply *capabilities* in order and return the target itself."""
        caps = [CapabilitySet.of(c) for c in capabilities]
        if not caps:
            return self.target

        if self.policy != "override":
            holder = _holder(self.target, create=False)
            conflicts = self._conflicts(holder, caps)
            if conflicts and self.policy == "error":
                raise ConflictError(
                    f"Capabilities would shadow existing members of {self.target!r}",
                    details={
                        "conflicts": [
                            {"capability": c, "member": m} for c, m in conflicts
                        ]
                    },
                )
            for cap_name, member in conflicts:
                logger.warning(
                    "Capability %r shadows member %r of %r",
                    cap_name,
                    member,
                    self.target,
                )

        holder = _holder(self.target, create=True)
        records = _LEDGER.setdefault(holder, [])
        for cap in caps:
            for name, member in cap.members.items():
                _assign(self.target, holder, name, member)
            # re-applying moves the record to the end instead of duplicating it
            records[:] = [r for r in records if not _same_bundle(r, cap)]
            records.append(ExtensionRecord(cap, tuple(cap.members), self.policy))
            logger.debug(
                "Extended %r with %r (%d members)", holder, cap.name, len(cap)
            )
        return self.target


def extend(target: T, *, policy: str | None = None) -> Extension[T]:
    """Start extending *target*; finish with ``.with_(*capabilities)``.

    Args:
        target: A class (commonly one of the linked roots), a module, or
            any single object.
        policy: ``"override"``, ``"warn"`` or ``"error"``. Defaults to
            ``settings.conflict_policy``.
    """
    return Extension(target, policy)


def extensions_of(target: Any) -> tuple[ExtensionRecord, ...]:
    """Records applied directly to *target*, oldest first."""
    holder = _holder(target, create=False)
    if holder is None:
        return ()
    return tuple(_LEDGER.get(holder, ()))


def provenance(target: Any, name: str) -> ExtensionRecord | None:
    """The record whose member currently provides *name* on *target*.

    Returns ``None`` when the member was not contributed by an extension
    (or was overwritten afterwards by plain assignment).
    """
    holder = _holder(target, create=False)
    if holder is None:
        return None
    current = _current(target, holder, name)
    for record in reversed(_LEDGER.get(holder, ())):
        if record.capability.members.get(name, _MISSING) is current:
            return record
    return None
