"""Configuration schema — Pydantic models for config.yaml."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ApiConfig(BaseModel):
    base_url: str = "https://rest.coinapi.io/v1"
    api_key: str = ""
    # Single fixed quote currency for rates and history.
    quote_asset: str = "EUR"
    icon_size: int = Field(default=32, gt=0)
    timeout_s: float = 15.0


class NetworkConfig(BaseModel):
    retry_attempts: int = Field(default=3, ge=1)
    retry_mode: Literal["by_kind", "uniform"] = "by_kind"
    rate_limit_delay_s: float = Field(default=1.0, ge=0)
    connectivity_grace_s: float = Field(default=2.0, ge=0)
    probe_interval_s: float = Field(default=10.0, gt=0)


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///coinview.db"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["json", "console"] = "json"


class AppConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
