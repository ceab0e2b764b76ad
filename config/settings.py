"""Centralized configuration using pydantic-settings. All values are env-configurable."""

import socket
from datetime import timedelta

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, NoDecode
from typing import Annotated

DEFAULT_STATISTIC_NAMES = ["n", "mean", "tp0", "tp50", "tp99", "tp99.9", "tp100"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TSD_")

    # Aggregation
    period_seconds: int = Field(default=60, gt=0)
    lateness_seconds: int = Field(default=60, ge=0)
    rotate_interval_seconds: float = Field(default=10.0, gt=0)
    statistics: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_STATISTIC_NAMES)
    )

    # Labels
    host: str = Field(default_factory=socket.gethostname)
    service: str = ""

    # Monitoring
    log_level: str = "INFO"

    @field_validator("statistics", mode="before")
    @classmethod
    def split_statistics(cls, v):
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @property
    def period(self) -> timedelta:
        return timedelta(seconds=self.period_seconds)

    @property
    def lateness(self) -> timedelta:
        return timedelta(seconds=self.lateness_seconds)
