"""Configuration management for pagechain."""

from pagechain.core.config.loader import (
    configure_logging,
    detect_format,
    load_config,
    load_pagechain_config,
)
from pagechain.core.config.models import LoggingConfig, PagechainConfig, PaginationConfig

__all__ = [
    # Loaders
    "configure_logging",
    "detect_format",
    "load_config",
    "load_pagechain_config",
    # Models
    "LoggingConfig",
    "PagechainConfig",
    "PaginationConfig",
]
