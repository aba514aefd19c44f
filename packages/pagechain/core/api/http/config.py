from __future__ import annotations

import httpx
from pydantic import BaseModel, Field, field_validator


class HttpClientConfig(BaseModel):
    """Configuration for HttpPageExecutor.

    Args:
        base_url: Base URL of the listing service (e.g. "https://api.example.com")
        timeout: HTTPX timeout configuration; a timeout is an ordinary page failure
        follow_redirects: Whether to follow HTTP redirects
        headers: Default headers applied to every page request
        verify: TLS certificate verification (True, False, or path to CA bundle)
        user_agent: User-Agent header value
        redact_headers: Headers to redact in logs (case-insensitive)
        max_response_body_for_error: Max response bytes to include in error messages
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    base_url: str
    timeout: httpx.Timeout = Field(default_factory=lambda: httpx.Timeout(10.0, connect=5.0))
    follow_redirects: bool = True
    headers: dict[str, str] = Field(default_factory=dict)
    verify: bool | str = True
    user_agent: str = "pagechain/1.0"
    redact_headers: tuple[str, ...] = (
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
    )
    max_response_body_for_error: int = 4096

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base_url is a valid URL."""
        if not v:
            raise ValueError("base_url cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v
