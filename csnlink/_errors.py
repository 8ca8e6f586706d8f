# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

__all__ = (
    "CsnLinkError",
    "ResolutionError",
    "CyclicStructError",
    "ConflictError",
    "ItemNotFoundError",
    "ItemExistsError",
)


class CsnLinkError(Exception):
    default_message: ClassVar[str] = "csnlink error"
    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause:
            self.__cause__ = cause  # preserves traceback
        self.message = message or self.default_message
        self.details = details or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            **({"details": self.details} if self.details else {}),
        }
        if include_cause and (cause := self.get_cause()):
            data["cause"] = repr(cause)
        return data

    def get_cause(self) -> Exception | None:
        """Get the cause of this error, if any."""
        return self.__cause__ if hasattr(self, "__cause__") else None


class ResolutionError(CsnLinkError):
    """A reference target or element type is missing from the model."""

    default_message = "Unresolved reference"
    __slots__ = ()

    @classmethod
    def from_reference(
        cls,
        name: str,
        *,
        referrer: str,
        expected: str | None = None,
        message: str | None = None,
    ):
        details = {
            "reference": name,
            "referrer": referrer,
            **({"expected": expected} if expected else {}),
        }
        message = message or f"Cannot resolve '{name}' referenced by '{referrer}'"
        return cls(message=message, details=details)


class CyclicStructError(CsnLinkError):
    """Structured types contain each other by value."""

    default_message = "Cyclic by-value struct nesting"
    __slots__ = ()


class ConflictError(CsnLinkError):
    """Raised in strict mode when a capability would shadow a member."""

    default_message = "Capability member conflict"
    __slots__ = ()


class ItemNotFoundError(CsnLinkError):
    pass


class ItemExistsError(CsnLinkError):
    pass
