"""pagechain: token-chained pagination for remote list operations."""

from pagechain.core.pagination import (
    EventLoopGroup,
    ExecutionContext,
    PageSequence,
    PageState,
    PaginationConfig,
    PaginationSession,
    SessionStateError,
    TokenAccessors,
    TokenDecodingError,
    iterate_pages,
    paginate,
    paginate_reduce,
)

__all__ = [
    "paginate",
    "paginate_reduce",
    "iterate_pages",
    "PaginationSession",
    "PageSequence",
    "PageState",
    "TokenAccessors",
    "ExecutionContext",
    "EventLoopGroup",
    "PaginationConfig",
    "SessionStateError",
    "TokenDecodingError",
]
