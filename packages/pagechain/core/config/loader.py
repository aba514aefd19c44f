"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from pagechain.core.config.models import PagechainConfig

logger = logging.getLogger(__name__)


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Args:
        file_path: Path to config file

    Returns:
        Format string: "json" or "yaml"

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("pagechain.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    with path.open("r", encoding="utf-8") as f:
        if fmt == "json":
            try:
                content = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e
        else:
            try:
                content = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

    # safe_load returns None for empty files
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config root must be a mapping in {path}")
    return content


def load_pagechain_config(path: str | Path | None = None) -> PagechainConfig:
    """Load and validate pagechain configuration.

    Args:
        path: Path to config file; defaults are used when None

    Returns:
        Validated PagechainConfig instance

    Raises:
        ValidationError: If config is invalid
    """
    if path is None:
        return PagechainConfig()

    config = PagechainConfig.model_validate(load_config(path))
    logger.debug("Loaded pagechain config", extra={"path": str(path)})
    return config


def configure_logging(config: PagechainConfig | None = None) -> None:
    """Configure Python logging from config.

    Args:
        config: PagechainConfig instance (defaults if None)
    """
    config = config or PagechainConfig()

    logging.basicConfig(
        level=getattr(logging, config.logging.level),
        format=config.logging.format,
        force=True,
    )
