"""Pydantic configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from atosym.config.defaults import DEFAULT_ADDRESS_MODE, DEFAULT_LOG_LEVEL
from atosym.resolution.address import AddressMode


class ResolutionConfig(BaseModel):
    address_mode: AddressMode = AddressMode(DEFAULT_ADDRESS_MODE)
    architecture: str | None = None
    uuid: str | None = None

    @field_validator("architecture", "uuid", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        # "${ATOSYM_ARCH:}" interpolates to an empty string
        if isinstance(value, str) and not value.strip():
            return None
        return value


class LoggingConfig(BaseModel):
    level: str = DEFAULT_LOG_LEVEL
    json_output: bool = False


class AtosConfig(BaseModel):
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
