# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for by-value dependency ordering."""

import pytest
from graphlib import CycleError

from csnlink._errors import CyclicStructError
from csnlink.reflect.graph import by_value_refs, dependency_order, walk


class TestWalk:
    def test_paths(self):
        node = {
            "elements": {
                "a": {"type": "cds.String"},
                "b": {"elements": {"c": {"type": "cds.Integer"}}},
                "d": {"items": {"type": "cds.String"}},
            },
            "params": {"p": {"type": "cds.Integer"}},
            "returns": {"type": "cds.Integer"},
        }
        assert [path for path, _ in walk(node, "X")] == [
            "X",
            "X.a",
            "X.b",
            "X.b.c",
            "X.d",
            "X.d.items",
            "X.p",
            "X.returns",
        ]


class TestByValueRefs:
    def test_types_and_includes(self):
        node = {
            "includes": ["my.managed"],
            "elements": {
                "price": {"type": "my.Price"},
                "nested": {"elements": {"currency": {"type": "my.Currency"}}},
                "tags": {"items": {"type": "my.Tag"}},
            },
        }
        assert list(by_value_refs(node)) == [
            "my.managed",
            "my.Price",
            "my.Currency",
        ]

    def test_definition_items_are_dependencies(self):
        node = {"items": {"type": "my.Tag"}, "returns": {"items": {"type": "my.Row"}}}
        assert list(by_value_refs(node)) == ["my.Tag", "my.Row"]

    def test_references_skipped(self):
        node = {
            "elements": {
                "author": {"type": "cds.Association", "target": "my.Authors"},
                "pages": {"type": "cds.Composition", "target": "my.Pages"},
            }
        }
        assert list(by_value_refs(node)) == []

    def test_derived_type(self):
        assert list(by_value_refs({"kind": "type", "type": "cds.String"})) == [
            "cds.String"
        ]


class TestDependencyOrder:
    """Tests for topological ordering and cycle detection."""

    def test_dependencies_first(self):
        definitions = {
            "Books": {"elements": {"price": {"type": "Price"}}},
            "Price": {"elements": {"currency": {"type": "Currency"}}},
            "Currency": {"type": "cds.String"},
        }
        assert dependency_order(definitions) == ["Currency", "Price", "Books"]

    def test_includes_are_dependencies(self):
        definitions = {
            "Books": {"includes": ["managed"]},
            "managed": {"elements": {}},
        }
        assert dependency_order(definitions) == ["managed", "Books"]

    def test_association_cycles_allowed(self):
        definitions = {
            "Books": {
                "elements": {"author": {"type": "cds.Association", "target": "Authors"}}
            },
            "Authors": {
                "elements": {"books": {"type": "cds.Association", "target": "Books"}}
            },
        }
        assert set(dependency_order(definitions)) == {"Books", "Authors"}

    def test_cycle(self):
        definitions = {
            "A": {"elements": {"b": {"type": "B"}}},
            "B": {"elements": {"a": {"type": "A"}}},
        }
        with pytest.raises(CyclicStructError) as exc_info:
            dependency_order(definitions)
        error = exc_info.value
        assert set(error.details["cycle"]) == {"A", "B"}
        assert isinstance(error.get_cause(), CycleError)
        assert "contain each other by value" in error.message

    def test_array_of_self_allowed(self):
        """Test an element holding many of its own type is not a cycle."""
        definitions = {
            "Tree": {
                "elements": {
                    "name": {"type": "cds.String"},
                    "children": {"items": {"type": "Tree"}},
                }
            }
        }
        assert dependency_order(definitions) == ["Tree"]

    def test_array_of_each_other_allowed(self):
        definitions = {
            "A": {"elements": {"bs": {"items": {"type": "B"}}}},
            "B": {"elements": {"as": {"items": {"elements": {"a": {"type": "A"}}}}}},
        }
        assert set(dependency_order(definitions)) == {"A", "B"}

    def test_self_containment(self):
        definitions = {"Node": {"elements": {"next": {"type": "Node"}}}}
        with pytest.raises(CyclicStructError):
            dependency_order(definitions)

    def test_nested_cycle(self):
        definitions = {
            "A": {"elements": {"inner": {"elements": {"b": {"type": "B"}}}}},
            "B": {"items": {"type": "A"}},
        }
        with pytest.raises(CyclicStructError):
            dependency_order(definitions)
