from __future__ import annotations


class PaginationError(Exception):
    """Base exception for errors raised by the pagination engine itself.

    Executor failures are never wrapped in this type; they propagate unchanged.
    """


class TokenDecodingError(PaginationError):
    """A continuation token could not be read from a response."""


class SessionStateError(PaginationError):
    """A pagination session was used in a way its lifecycle does not allow.

    Raised when a single-use session is started twice, when a second page
    request is issued while one is in flight, or when no execution context
    can be bound.
    """
