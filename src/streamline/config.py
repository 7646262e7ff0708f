"""Tunable settings for the combinators that have any."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BUFFER_SIZE = 8


class BufferSettings(BaseModel):
    """Prefetch window of the buffering engine."""

    model_config = ConfigDict(frozen=True)

    size: int = Field(default=DEFAULT_BUFFER_SIZE, gt=0, description="Maximum fetches in flight")


class LimitSettings(BaseModel):
    """Upper bound on values delivered by the limiting gate."""

    model_config = ConfigDict(frozen=True)

    max: int = Field(ge=0)


class BatchSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int = Field(gt=0)
