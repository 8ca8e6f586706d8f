# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Input models for CSN (core schema notation) documents.

Validation proper belongs to the compiler producing the document; these
models only make sure the shapes the linker navigates are what it expects.
Unknown properties (annotations, docs, ...) pass through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = ("CSN", "Definition")


class Definition(BaseModel):
    """A definition or element node."""

    model_config = ConfigDict(extra="allow")

    kind: str | None = None
    type: str | dict[str, Any] | None = None
    elements: dict[str, Definition] | None = None
    params: dict[str, Definition] | None = None
    items: Definition | None = None
    returns: Definition | None = None
    target: str | None = None
    cardinality: dict[str, Any] | None = None
    on: list[Any] | None = None
    keys: list[Any] | None = None
    includes: list[str] | None = None
    key: bool | None = None


class CSN(BaseModel):
    model_config = ConfigDict(extra="allow")

    namespace: str | None = None
    definitions: dict[str, Definition] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, value: CSN | Mapping[str, Any]) -> CSN:
        """Accept a CSN model, a CSN mapping or a bare definitions mapping."""
        if isinstance(value, CSN):
            return value
        if "definitions" in value:
            return cls.model_validate(dict(value))
        return cls.model_validate({"definitions": dict(value)})

    def raw_definitions(self) -> dict[str, dict[str, Any]]:
        """Definitions as plain mappings, unset properties omitted."""
        return {
            name: definition.model_dump(exclude_none=True)
            for name, definition in self.definitions.items()
        }
