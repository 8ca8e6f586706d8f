# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Lazy facades: properties that resolve on first access.

Example:
    facade = lazify({
        "sub": lambda lazy: import_module("pkg.sub"),
        "answer": 42,
    })
    facade.answer       # plain value
    facade.sub          # imports pkg.sub once, then a plain attribute

Modules can be equipped the same way (PEP 562 ``__getattr__``)::

    require = lazified(sys.modules[__name__])
    Session = require(".session", "Session")
    lazify(sys.modules[__name__])
"""

from __future__ import annotations

import importlib
import inspect
import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from types import FunctionType, ModuleType
from typing import Any, TypeVar

__all__ = (
    "Lazy",
    "LazyFacade",
    "is_thunk",
    "lazified",
    "lazify",
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# mapping methods that keys never shadow on attribute access
_PROTOCOL = frozenset({"keys", "items", "values", "get", "is_resolved"})


class Lazy:
    """Explicit marker for a deferred value."""

    __slots__ = ("resolver", "label")

    def __init__(self, resolver: Callable[[], Any], label: str | None = None):
        self.resolver = resolver
        self.label = label

    def __call__(self) -> Any:
        return self.resolver()

    def __repr__(self) -> str:
        return f"Lazy({self.label or self.resolver!r})"


def is_thunk(value: Any, /) -> bool:
    """Whether *value* is a resolver rather than a value.

    Thunks are ``Lazy`` instances and lambdas taking either nothing or a
    single parameter named ``lazy``. Named functions stay plain values.
    """
    if isinstance(value, Lazy):
        return True
    if not isinstance(value, FunctionType) or value.__name__ != "<lambda>":
        return False
    params = tuple(inspect.signature(value).parameters)
    return params == () or params == ("lazy",)


def _resolve(thunk: Any) -> Any:
    if isinstance(thunk, Lazy):
        return thunk()
    if inspect.signature(thunk).parameters:
        return thunk(None)
    return thunk()


class LazyFacade:
    """Mapping/attribute facade whose thunk-valued keys resolve once.

    Every key is either resolved (a plain instance attribute) or pending
    (a thunk kept aside). Reading a pending key runs its thunk, stores the
    result as an ordinary attribute and forgets the thunk. Enumeration does
    not resolve anything.

    Keys are also attributes, except those named like the mapping
    methods (``keys``, ``items``, ``values``, ``get``, ``is_resolved``):
    ``facade.items`` is always the method and ``facade["items"]`` the key.
    """

    def __init__(self, source: Mapping[str, Any] | None = None, /, **kwargs):
        object.__setattr__(self, "_LazyFacade__keys", {})
        object.__setattr__(self, "_LazyFacade__pending", {})
        object.__setattr__(self, "_LazyFacade__lock", threading.RLock())
        for key, value in {**(source or {}), **kwargs}.items():
            LazyFacade._put(self, key, value)

    def __getattribute__(self, name: str) -> Any:
        if name in _PROTOCOL:
            return getattr(type(self), name).__get__(self, type(self))
        if name[:2] != "__":
            state = object.__getattribute__(self, "__dict__")
            if name in state["_LazyFacade__keys"]:
                if name in state:
                    return state[name]
                return LazyFacade._resolve_key(self, name)
        return object.__getattribute__(self, name)

    def _put(self, key: str, value: Any) -> None:
        self.__keys[key] = None
        if is_thunk(value):
            self.__dict__.pop(key, None)
            self.__pending[key] = value
        else:
            self.__pending.pop(key, None)
            self.__dict__[key] = value

    def _resolve_key(self, key: str) -> Any:
        # double-checked: a concurrent reader may have stored it already
        with self.__lock:
            if key in self.__dict__:
                return self.__dict__[key]
            thunk = self.__pending[key]
            logger.debug("Resolving lazy key %r", key)
            value = _resolve(thunk)
            self.__dict__[key] = value
            del self.__pending[key]
            return value

    def __setattr__(self, name: str, value: Any) -> None:
        LazyFacade._put(self, name, value)

    def __delattr__(self, name: str) -> None:
        if name not in self.__keys:
            raise AttributeError(name)
        del self.__keys[name]
        self.__pending.pop(name, None)
        self.__dict__.pop(name, None)

    def __getitem__(self, key: str) -> Any:
        if key not in self.__keys:
            raise KeyError(key)
        if key in self.__dict__:
            return self.__dict__[key]
        return LazyFacade._resolve_key(self, key)

    def __setitem__(self, key: str, value: Any) -> None:
        LazyFacade._put(self, key, value)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.__keys))

    def __len__(self) -> int:
        return len(self.__keys)

    def __contains__(self, key: object) -> bool:
        return key in self.__keys

    def __dir__(self) -> list[str]:
        return sorted({*object.__dir__(self), *self.__keys})

    def keys(self) -> list[str]:
        return list(self.__keys)

    def values(self) -> list[Any]:
        return [LazyFacade.__getitem__(self, k) for k in self.__keys]

    def items(self) -> list[tuple[str, Any]]:
        return [(k, LazyFacade.__getitem__(self, k)) for k in self.__keys]

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self.__keys:
            return default
        return LazyFacade.__getitem__(self, key)

    def is_resolved(self, key: str) -> bool:
        """Check if *key* holds a plain value (no pending thunk)."""
        if key not in self.__keys:
            raise KeyError(key)
        return key not in self.__pending

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{k}=<lazy>" if k in self.__pending else f"{k}={self.__dict__[k]!r}"
            for k in self.__keys
        )
        return f"{type(self).__name__}({shown})"


Mapping.register(LazyFacade)


def _lazify_module(module: ModuleType) -> ModuleType:
    globs = module.__dict__
    pending = globs.setdefault("__lazy_pending__", {})
    for key, value in list(globs.items()):
        if not key.startswith("__") and is_thunk(value):
            pending[key] = globs.pop(key)
    lock = threading.RLock()
    previous = globs.get("__getattr__")

    def __getattr__(name: str) -> Any:
        if name in pending:
            with lock:
                if name in globs:
                    return globs[name]
                value = _resolve(pending[name])
                globs[name] = value
                del pending[name]
                return value
        if previous is not None:
            return previous(name)
        raise AttributeError(
            f"module '{module.__name__}' has no attribute '{name}'"
        )

    def __dir__() -> list[str]:
        return sorted({*globs, *pending})

    globs["__getattr__"] = __getattr__
    globs["__dir__"] = __dir__
    return module


def lazify(target: T) -> T:
    """Equip *target* with lazily resolving keys.

    Mappings and plain objects are wrapped in a :class:`LazyFacade`;
    modules are patched in place.
    """
    if isinstance(target, LazyFacade):
        return target
    if isinstance(target, ModuleType):
        return _lazify_module(target)
    if isinstance(target, Mapping):
        return LazyFacade(target)  # type: ignore[return-value]
    return LazyFacade(vars(target))  # type: ignore[return-value]


def lazified(module: ModuleType) -> Callable[..., Lazy]:
    """Return a ``require`` that defers imports relative to *module*.

    ``require(".sub")`` yields a thunk importing ``<package>.sub`` on first
    use; ``require(".sub", "Name")`` yields ``Name`` from that module.
    """
    package = module.__package__ or module.__name__.rpartition(".")[0]

    def require(name: str, attr: str | None = None) -> Lazy:
        def _load():
            mod = importlib.import_module(name, package if name.startswith(".") else None)
            return getattr(mod, attr) if attr else mod

        return Lazy(_load, label=f"{name}:{attr}" if attr else name)

    return require
