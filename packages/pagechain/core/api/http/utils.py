"""Utility functions for HTTP page requests."""

from __future__ import annotations

import json
from collections.abc import Mapping
from urllib.parse import urljoin


def join_url(base_url: str, path: str) -> str:
    """Join base URL with path in a predictable way.

    Args:
        base_url: Base URL (e.g. "https://api.example.com")
        path: Request path (e.g. "/v1/items" or "v1/items")

    Returns:
        Joined URL (e.g. "https://api.example.com/v1/items")
    """
    base = base_url if base_url.endswith("/") else base_url + "/"
    return urljoin(base, path.lstrip("/"))


def safe_snippet(content: bytes, limit: int) -> str:
    """Extract a truncated UTF-8 snippet of a response body for errors and logs."""
    if not content:
        return ""
    return content[:limit].decode("utf-8", errors="replace")


def get_request_id(headers: Mapping[str, str]) -> str | None:
    """Extract request ID from common tracing headers.

    Checks for: x-request-id, x-correlation-id, request-id, trace-id (case-insensitive).
    """
    for key in ("x-request-id", "x-correlation-id", "request-id", "trace-id"):
        for hk, hv in headers.items():
            if hk.lower() == key:
                return hv
    return None


def parse_error_code(content: bytes) -> str | None:
    """Read a service error code from a JSON error body.

    Looks at "__type", "code" and "error" in that order. Namespaced codes
    such as "com.example#BadRequest" are reduced to the part after "#".

    Args:
        content: Response body bytes

    Returns:
        Error code, or None if the body carries none
    """
    try:
        body = json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    for key in ("__type", "code", "error"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value.rsplit("#", 1)[-1]
    return None
