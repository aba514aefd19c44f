"""HTTPX-backed page executor.

Exposes a small surface:
- HttpPageExecutor: one page request/response exchange per call
- HttpClientConfig: configuration
- Exceptions: ApiError and subclasses
"""

from pagechain.core.api.http.config import HttpClientConfig
from pagechain.core.api.http.errors import (
    ApiError,
    DecodeError,
    RequestTimeoutError,
    ServiceError,
    TransportError,
)
from pagechain.core.api.http.executor import HttpPageExecutor

__all__ = [
    "HttpPageExecutor",
    "HttpClientConfig",
    "ApiError",
    "TransportError",
    "RequestTimeoutError",
    "DecodeError",
    "ServiceError",
]
