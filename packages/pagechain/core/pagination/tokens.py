"""Continuation token accessors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from pagechain.core.pagination.errors import TokenDecodingError

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")
TokenT = TypeVar("TokenT")


@dataclass(frozen=True)
class TokenAccessors(Generic[RequestT, ResponseT, TokenT]):
    """Functions reading and writing the continuation token of a session.

    Args:
        extract: Returns the token carried by a response, or None on the last page
        inject: Returns a copy of a request carrying the given token
        current: Returns the token carried by a request (enables the repeated-token guard)
        has_more: Returns False when a response flags the collection as exhausted
    """

    extract: Callable[[ResponseT], TokenT | None]
    inject: Callable[[RequestT, TokenT], RequestT]
    current: Callable[[RequestT], TokenT | None] | None = None
    has_more: Callable[[ResponseT], bool] | None = None

    @classmethod
    def for_fields(
        cls,
        input_field: str,
        output_field: str,
        *,
        more_field: str | None = None,
    ) -> TokenAccessors[Any, Any, Any]:
        """Build accessors for pydantic request/response models.

        Args:
            input_field: Token field on the request model
            output_field: Token field on the response model
            more_field: Optional boolean "more results" field on the response model

        Returns:
            Accessors reading output_field and copying requests with input_field replaced
        """

        def extract(response: BaseModel) -> Any:
            try:
                return getattr(response, output_field)
            except AttributeError as exc:
                raise TokenDecodingError(
                    f"{type(response).__name__} has no token field {output_field!r}"
                ) from exc

        def inject(request: BaseModel, token: Any) -> BaseModel:
            return request.model_copy(update={input_field: token})

        def current(request: BaseModel) -> Any:
            return getattr(request, input_field, None)

        has_more: Callable[[BaseModel], bool] | None = None
        if more_field is not None:

            def more(response: BaseModel) -> bool:
                return bool(getattr(response, more_field, False))

            has_more = more

        return cls(extract=extract, inject=inject, current=current, has_more=has_more)
