"""Tolerant JSON → model decoding.

Every failure mode (malformed JSON, schema mismatch, bad timestamp) comes
out as DecodingFailed, with the parser's exception chained as the cause.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from coinview_core.exceptions import DecodingFailed
from coinview_core.models.asset import WIRE_CONTEXT

M = TypeVar("M", bound=BaseModel)


@lru_cache(maxsize=None)
def _list_adapter(model: type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(list[model])  # type: ignore[valid-type]


def decode_one(model: type[M], data: bytes | str) -> M:
    """Decode a single JSON object into *model*."""
    try:
        return model.model_validate_json(data, context=WIRE_CONTEXT)
    except (ValidationError, ValueError, TypeError) as exc:
        raise DecodingFailed() from exc


def decode_many(model: type[M], data: bytes | str) -> list[M]:
    """Decode a JSON array into a list of *model*, in input order.

    One bad element fails the whole array.
    """
    try:
        return _list_adapter(model).validate_json(data, context=WIRE_CONTEXT)
    except (ValidationError, ValueError, TypeError) as exc:
        raise DecodingFailed() from exc
