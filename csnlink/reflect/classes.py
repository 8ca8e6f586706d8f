# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Root classes of linked definitions.

Every linked definition - a class synthesized from a CSN definition, an
element, or an object built by hand - derives from exactly one of the seven
roots below. The roots do not inherit from each other; shared behaviour
comes from the internal ``_Structured`` and ``_Reference`` mixins.

Reflection helpers are hybrid: ``Books.keys`` evaluates against the class,
``Books().keys`` against the instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MethodType
from typing import TYPE_CHECKING, Any, Callable, ClassVar

if TYPE_CHECKING:
    from .elements import Elements
    from .linker import Linker

__all__ = (
    "Array",
    "Association",
    "Composition",
    "Entity",
    "Event",
    "Linked",
    "ROOTS",
    "Struct",
    "Type",
    "hybridmethod",
    "hybridproperty",
)

# properties turned into linked definitions on construction
LINKED_PROPS = frozenset({"elements", "params", "items", "returns"})


class hybridproperty:
    """Property that evaluates against the class on class access."""

    def __init__(self, fget: Callable[[Any], Any]):
        self.fget = fget
        self.__doc__ = fget.__doc__
        self.name = fget.__name__

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        return self.fget(owner if obj is None else obj)


class hybridmethod:
    """Method bound to the instance, or to the class on class access."""

    def __init__(self, func: Callable[..., Any]):
        self.func = func
        self.__doc__ = func.__doc__

    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        return MethodType(self.func, owner if obj is None else obj)


def _cls(obj: Any) -> type:
    return obj if isinstance(obj, type) else type(obj)


def _linker_for(obj: Any) -> Linker:
    from .linker import linker_of

    return linker_of(obj)


class Linked:
    """Common ancestor of all linked definitions.

    ``Linked(definition)`` copies the properties of a plain mapping (or of
    another linked definition) onto the new instance. Without input it is an
    empty definition.
    """

    kind: ClassVar[str | None] = None
    name: str | None = None
    parent: Any = None
    is_structured: ClassVar[bool] = False
    _linker: Linker | None = None

    def __init__(self, definition: Mapping[str, Any] | Linked | None = None, /, **props):
        if isinstance(definition, Linked):
            props = {**vars(definition), **props}
        elif definition:
            props = {**definition, **props}
        if (linker := props.pop("_linker", None)) is not None:
            self._linker = linker
        for key, value in props.items():
            if key in LINKED_PROPS and isinstance(value, Mapping):
                value = self._link_prop(key, value)
            self.__dict__[key] = value

    def _link_prop(self, key: str, value: Mapping[str, Any]) -> Any:
        from .elements import Elements

        linker = _linker_for(self)
        if key in ("elements", "params"):
            if isinstance(value, Elements):
                return value
            return linker.elements(value, self)
        return linker.link(value, key, self)

    @hybridmethod
    def is_(self, kind: str) -> bool:
        """Check the root (``"entity"``, ``"Association"`` ...) or kind."""
        root = ROOTS.get(kind)
        if root is not None:
            return issubclass(_cls(self), root)
        return getattr(self, "kind", None) == kind

    @hybridmethod
    def own(self, prop: str, default: Any = None) -> Any:
        """Property defined directly on this definition (not inherited)."""
        return vars(self).get(prop, default)

    @hybridproperty
    def annotations(self) -> dict[str, Any]:
        return {k: getattr(self, k) for k in dir(self) if k.startswith("@")}

    @hybridproperty
    def root(self) -> type | None:
        """The root class this definition derives from."""
        for klass in _cls(self).__mro__:
            if klass in _ROOT_SET:
                return klass
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class _Structured:
    """Navigation over ``elements``; shared by struct, event and entity."""

    @hybridproperty
    def elements(self) -> Elements:
        from .elements import Elements

        return Elements()

    @hybridmethod
    def element(self, path: str) -> Linked | None:
        """Element by name or dotted path, following associations."""
        head, _, rest = path.partition(".")
        elements = self.elements
        if head not in elements:
            return None
        found = elements[head]
        if not rest:
            return found
        if isinstance(found, _Reference):
            return found._target.element(rest)
        if isinstance(found, _Structured):
            return found.element(rest)
        return None

    is_structured = True


class _Reference:
    """Reference navigation; shared by Association and Composition."""

    target: str | None = None
    on: list[Any] | None = None
    is_owned: ClassVar[bool] = False

    @hybridproperty
    def cardinality(self) -> dict[str, Any]:
        return {"max": 1}

    @hybridproperty
    def is2many(self) -> bool:
        upper = self.cardinality.get("max", 1)
        return upper == "*" or (isinstance(upper, int) and upper > 1)

    @hybridproperty
    def is2one(self) -> bool:
        return not self.is2many

    @hybridproperty
    def is_managed(self) -> bool:
        return self.on is None

    @hybridproperty
    def _target(self) -> type[Linked]:
        """The linked definition named by ``target``."""
        return _linker_for(self).lookup(self.target, referrer=self.name or "?")

    @hybridproperty
    def foreign_keys(self) -> list[str]:
        """Names of the target keys a managed to-one reference stores."""
        if not self.is_managed or self.is2many:
            return []
        explicit = getattr(self, "keys", None)
        if isinstance(explicit, list):
            return [k["ref"][-1] if isinstance(k, Mapping) else str(k) for k in explicit]
        return list(self._target.keys)


class Type(Linked):
    """Root of scalar and derived types."""

    kind = "type"

    @hybridproperty
    def base_type(self) -> str | None:
        """Name of the closest builtin (``cds.*``) type."""
        for klass in _cls(self).__mro__:
            name = vars(klass).get("name")
            if isinstance(name, str) and name.startswith("cds."):
                return name
        return None

    @hybridproperty
    def is_builtin(self) -> bool:
        return isinstance(self.name, str) and self.name.startswith("cds.")


class Array(Linked):
    kind = "array"
    items: Linked | None = None


class Struct(_Structured, Linked):
    kind = "struct"


class Event(_Structured, Linked):
    """Message or operation payload."""

    kind = "event"

    @hybridproperty
    def payload(self) -> Elements:
        params = getattr(self, "params", None)
        return params if params is not None else self.elements


class Entity(_Structured, Linked):
    kind = "entity"

    @hybridproperty
    def keys(self) -> dict[str, Linked]:
        return {n: e for n, e in self.elements.items() if getattr(e, "key", False)}

    @hybridproperty
    def associations(self) -> dict[str, Linked]:
        """Association and Composition elements."""
        return {n: e for n, e in self.elements.items() if isinstance(e, _Reference)}

    @hybridproperty
    def compositions(self) -> dict[str, Linked]:
        return {
            n: e for n, e in self.elements.items() if isinstance(e, Composition)
        }


class Association(_Reference, Linked):
    kind = "Association"


class Composition(_Reference, Linked):
    """A reference whose target's lifecycle is bound to its parent."""

    kind = "Composition"
    is_owned = True


ROOTS: dict[str, type[Linked]] = {
    "Association": Association,
    "Composition": Composition,
    "entity": Entity,
    "event": Event,
    "type": Type,
    "array": Array,
    "struct": Struct,
}

_ROOT_SET = frozenset(ROOTS.values())
