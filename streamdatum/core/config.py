# streamdatum/core/config.py
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Library defaults, overridable through `STREAMDATUM_*` environment variables.

    - strict_decode: reject wire records that are too short for their metadata
      instead of padding the missing values with None
    - without_statistics: default for StreamAggregateDatum.to_object()
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMDATUM_",
        case_sensitive=False,
    )

    strict_decode: bool = Field(default=True)
    without_statistics: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
