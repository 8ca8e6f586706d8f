# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Ordering of definitions by what they contain by value.

A definition depends on its declared type, its includes, and the types of
its (nested) elements, params, items and return values. References
(associations and compositions) are not dependencies: they resolve to a
class, so cycles through them are fine. Neither are the items of an element:
an array may be empty, so `children: many Tree` inside `Tree` is finite.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from graphlib import CycleError, TopologicalSorter
from typing import Any

from .._errors import CyclicStructError
from .linker import is_reference

__all__ = ("by_value_refs", "dependency_order", "walk")

_NESTED_MAPS = ("elements", "params")
_NESTED_NODES = ("items", "returns")


def walk(node: Mapping[str, Any], path: str) -> Iterator[tuple[str, Mapping[str, Any]]]:
    """Yield ``(path, node)`` for *node* and every node nested inside it."""
    yield path, node
    for key in _NESTED_MAPS:
        for name, child in (node.get(key) or {}).items():
            yield from walk(child, f"{path}.{name}")
    for key in _NESTED_NODES:
        if (child := node.get(key)) is not None:
            yield from walk(child, f"{path}.{key}")


def by_value_refs(node: Mapping[str, Any], _nested: bool = False) -> Iterator[str]:
    """Names *node* embeds by value: types, includes, nested types."""
    if is_reference(node):
        return
    if isinstance(type_ := node.get("type"), str):
        yield type_
    yield from node.get("includes") or ()
    for key in _NESTED_MAPS:
        for child in (node.get(key) or {}).values():
            yield from by_value_refs(child, True)
    for key in _NESTED_NODES:
        if key == "items" and _nested:
            continue
        if (child := node.get(key)) is not None:
            yield from by_value_refs(child, _nested)


def dependency_order(definitions: Mapping[str, Mapping[str, Any]]) -> list[str]:
    """Names ordered so by-value dependencies come first.

    Raises:
        CyclicStructError: if definitions contain each other by value.
    """
    graph: TopologicalSorter[str] = TopologicalSorter()
    for name, node in definitions.items():
        deps = [ref for ref in by_value_refs(node) if ref in definitions]
        graph.add(name, *deps)
    try:
        return list(graph.static_order())
    except CycleError as e:
        cycle = list(e.args[1]) if len(e.args) > 1 else []
        raise CyclicStructError(
            f"Definitions contain each other by value: {' -> '.join(cycle)}",
            details={"cycle": cycle},
            cause=e,
        ) from e
