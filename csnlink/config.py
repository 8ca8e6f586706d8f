# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("ConflictPolicy", "CsnLinkSettings", "settings")

ConflictPolicy = Literal["override", "warn", "error"]


class CsnLinkSettings(BaseSettings, frozen=True):
    """Settings with environment variable support (``CSNLINK_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="CSNLINK_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    conflict_policy: ConflictPolicy = Field(
        default="override",
        description=(
            "What extend().with_() does when a capability shadows an "
            "existing member: override silently, log a warning, or raise "
            "ConflictError"
        ),
    )
    log_level: str = Field(
        default="WARNING", description="Level of the 'csnlink' logger"
    )

    _instance: ClassVar[Any] = None


settings = CsnLinkSettings()
CsnLinkSettings._instance = settings
