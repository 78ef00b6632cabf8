# Copyright (c) 2026 Pointmatic
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""SeoOptions settings model for seo-meta."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource
from pydantic_settings import YamlConfigSettingsSource


class RateLimitingOptions(BaseModel):
    enabled: bool = True
    requests_per_minute: int = Field(default=10, ge=1)
    block_on_limit: bool = True


class AiOptions(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4-turbo-preview"
    timeout: int = 30
    max_retries: int = Field(default=3, ge=0)
    fallback_providers: list[str] = []


class SeoOptions(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEO_",
        env_nested_delimiter="__",
        yaml_file="seo.yaml",
        yaml_file_encoding="utf-8",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    enabled: bool = True
    mode: Literal["ai", "manual", "hybrid"] = "manual"
    ai: AiOptions = AiOptions()
    rate_limiting: RateLimitingOptions = RateLimitingOptions()
    verbose: bool = False
    log_file: Path | None = None

    def is_ai_enabled(self) -> bool:
        return self.enabled and self.mode in ("ai", "hybrid")

    def is_manual_enabled(self) -> bool:
        return self.enabled and self.mode in ("manual", "hybrid")
