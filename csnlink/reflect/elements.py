# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ..lazy import LazyFacade

__all__ = ("Elements",)


class Elements(LazyFacade):
    """Elements of a structured definition, each linked on first access.

    Element definitions stay raw until read; reading ``elements.author``
    (or ``elements["author"]``) links it once and caches the result.
    """
