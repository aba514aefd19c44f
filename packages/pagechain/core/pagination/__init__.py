"""Token-chained pagination engine.

Exposes:
- paginate / paginate_reduce / iterate_pages: push, fold and pull front ends
- PaginationSession: single-use session owning one driver and one binding
- TokenAccessors: continuation token extractor/injector pair
- ExecutionContext / EventLoopGroup: event loop binding
- PaginationConfig and the pagination errors
"""

from pagechain.core.config.models import PaginationConfig
from pagechain.core.pagination.callbacks import iterate_pages, paginate, paginate_reduce
from pagechain.core.pagination.context import EventLoopGroup, ExecutionContext, resolve_context
from pagechain.core.pagination.driver import PageExecutor, PageState, PaginationDriver
from pagechain.core.pagination.errors import (
    PaginationError,
    SessionStateError,
    TokenDecodingError,
)
from pagechain.core.pagination.sequence import PageSequence
from pagechain.core.pagination.session import PaginationSession
from pagechain.core.pagination.tokens import TokenAccessors

__all__ = [
    "paginate",
    "paginate_reduce",
    "iterate_pages",
    "PaginationSession",
    "PaginationDriver",
    "PageSequence",
    "PageState",
    "PageExecutor",
    "TokenAccessors",
    "ExecutionContext",
    "EventLoopGroup",
    "resolve_context",
    "PaginationConfig",
    "PaginationError",
    "SessionStateError",
    "TokenDecodingError",
]
