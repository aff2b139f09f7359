from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    ryanair_url: str = Field(
        "https://www.ryanair.com/api", alias="WAYFINDER_RYANAIR_URL"
    )
    rates_url: str = Field(
        "https://api.frankfurter.dev/v1/latest", alias="WAYFINDER_RATES_URL"
    )
    http_timeout: float = Field(15.0, alias="WAYFINDER_HTTP_TIMEOUT")
    rates_timeout: float = Field(10.0, alias="WAYFINDER_RATES_TIMEOUT")
    min_layover_min: int = Field(60, alias="WAYFINDER_MIN_LAYOVER_MIN")
    max_workers: Optional[int] = Field(None, alias="WAYFINDER_MAX_WORKERS")
    market: str = Field("en-gb", alias="WAYFINDER_MARKET")
    log_level: str = Field("INFO", alias="WAYFINDER_LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="WAYFINDER_LOG_FILE")

    @field_validator("ryanair_url", "rates_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("http_timeout", "rates_timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be greater than 0")
        return v

    @field_validator("min_layover_min")
    @classmethod
    def _layover_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("WAYFINDER_MIN_LAYOVER_MIN must not be negative")
        return v

    @field_validator("max_workers")
    @classmethod
    def _workers_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("WAYFINDER_MAX_WORKERS must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()


__all__ = ["Settings", "get_settings"]
