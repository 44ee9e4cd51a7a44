"""Shared plumbing for resource adapters."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import BackendError, ValidationError
from ..transport import Transport

_T = TypeVar("_T", bound=BaseModel)


class Resource:
    """Base class for resource adapters.

    Adapters hold no state of their own besides the transport (and through it
    the session), so a single instance can serve concurrent calls.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    @staticmethod
    def _safe_validate(model_cls: type[_T], data: Any) -> _T:
        """Validate response data against a model, raising BackendError on failure."""
        try:
            return model_cls.model_validate(data)
        except PydanticValidationError as e:
            raise BackendError(
                "Unexpected response format from server",
                "INVALID_RESPONSE",
                data,
            ) from e

    @staticmethod
    def _require(value: Any, message: str, field: str | None = None) -> None:
        if not value:
            raise ValidationError(message, field=field)
