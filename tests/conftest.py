# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import copy

import pytest

from csnlink.capabilities import clear_capabilities
from csnlink.extension import _LEDGER
from csnlink.reflect.classes import ROOTS, Linked
from csnlink.server import Service

NS = "sap.capire.bookshop"

BOOKSHOP = {
    "namespace": NS,
    "definitions": {
        f"{NS}.Books": {
            "kind": "entity",
            "elements": {
                "ID": {"key": True, "type": "cds.Integer"},
                "title": {"type": "cds.String", "length": 111, "@mandatory": True},
                "author": {
                    "type": "cds.Association",
                    "target": f"{NS}.Authors",
                    "keys": [{"ref": ["ID"]}],
                },
                "genre": {"type": "cds.Association", "target": f"{NS}.Genres"},
                "price": {"type": f"{NS}.Price"},
                "tags": {"items": {"type": "cds.String"}},
            },
        },
        f"{NS}.Authors": {
            "kind": "entity",
            "includes": [f"{NS}.managed"],
            "elements": {
                "ID": {"key": True, "type": "cds.Integer"},
                "name": {"type": "cds.String"},
                "books": {
                    "type": "cds.Association",
                    "cardinality": {"max": "*"},
                    "target": f"{NS}.Books",
                    "on": [{"ref": ["books", "author"]}, "=", {"ref": ["$self"]}],
                },
            },
        },
        f"{NS}.Genres": {
            "kind": "entity",
            "elements": {
                "ID": {"key": True, "type": "cds.Integer"},
                "name": {"type": "cds.String"},
                "children": {
                    "type": "cds.Composition",
                    "cardinality": {"max": "*"},
                    "target": f"{NS}.Genres",
                    "on": [{"ref": ["children", "parent"]}, "=", {"ref": ["$self"]}],
                },
            },
        },
        f"{NS}.Price": {
            "kind": "type",
            "elements": {
                "amount": {"type": "cds.Decimal"},
                "currency": {"type": f"{NS}.Currency"},
            },
        },
        f"{NS}.Currency": {"kind": "type", "type": "cds.String", "length": 3},
        f"{NS}.managed": {
            "kind": "aspect",
            "elements": {
                "createdAt": {"type": "cds.Timestamp"},
                "modifiedAt": {"type": "cds.Timestamp"},
            },
        },
        f"{NS}.OrderPlaced": {
            "kind": "event",
            "elements": {
                "book": {"type": "cds.Integer"},
                "quantity": {"type": "cds.Integer"},
            },
        },
        "CatalogService": {"kind": "service"},
        "CatalogService.Books": {
            "kind": "entity",
            "elements": {
                "ID": {"key": True, "type": "cds.Integer"},
                "title": {"type": "cds.String"},
            },
        },
        "CatalogService.submitOrder": {
            "kind": "action",
            "params": {
                "book": {"type": "cds.Integer"},
                "quantity": {"type": "cds.Integer"},
            },
            "returns": {"type": "cds.Integer"},
        },
        "CatalogService.OrderCanceled": {
            "kind": "event",
            "elements": {"book": {"type": "cds.Integer"}},
        },
        "CatalogService.Tags": {"kind": "type", "items": {"type": "cds.String"}},
    },
}


@pytest.fixture
def bookshop_csn():
    """A fresh copy of the bookshop CSN document."""
    return copy.deepcopy(BOOKSHOP)


@pytest.fixture
def bookshop(bookshop_csn):
    """The bookshop document linked into a new model."""
    from csnlink.reflect.model import linked

    return linked(bookshop_csn)


@pytest.fixture(autouse=True)
def _clean_capabilities():
    yield
    clear_capabilities()


@pytest.fixture
def restore_roots():
    """Undo extensions applied to the root classes during a test."""
    classes = (Linked, Service, *ROOTS.values())
    snapshots = {cls: dict(vars(cls)) for cls in classes}
    yield
    for cls, snapshot in snapshots.items():
        for name in set(vars(cls)) - set(snapshot):
            delattr(cls, name)
        for name, value in snapshot.items():
            if vars(cls).get(name) is not value:
                setattr(cls, name, value)
        _LEDGER.pop(cls, None)
