"""Configuration models for pagechain."""

from __future__ import annotations

from pydantic import BaseModel, Field

from pagechain.core.api.http.config import HttpClientConfig


class PaginationConfig(BaseModel):
    """Limits and guards applied by the pagination driver.

    Args:
        max_pages: Maximum number of pages fetched per session (None for no limit)
        stop_on_repeated_token: End the session when a response returns the
            same token the request was sent with
    """

    model_config = {"frozen": True}

    max_pages: int | None = Field(default=None, ge=1)
    stop_on_repeated_token: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class PagechainConfig(BaseModel):
    """Top-level configuration file contents."""

    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HttpClientConfig | None = None
