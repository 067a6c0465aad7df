"""Structural decoding of response bodies into wire models."""

import json
from typing import TypeVar

import pydantic

from .errors import DecodeError

M = TypeVar("M", bound=pydantic.BaseModel)

# Longest payload prefix quoted in decode errors.
SNIPPET_LIMIT = 1000


def truncate(text: str, limit: int) -> str:
    """Return at most ``limit`` leading characters of ``text``."""
    if len(text) > limit:
        return text[:limit]
    return text


def _load(body: bytes | str):
    try:
        return json.loads(body)
    except ValueError as exc:
        raise _decode_error(exc, body) from exc


def _decode_error(exc: Exception, body: bytes | str) -> DecodeError:
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    return DecodeError(str(exc), truncate(text, SNIPPET_LIMIT))


def decode_optional(body: bytes | str, model: type[M]) -> M | None:
    """Decode a JSON document into ``model``, or None for a JSON ``null``.

    Unknown fields are ignored. Any parse or validation failure is raised as
    :class:`DecodeError` quoting the start of the payload.
    """
    data = _load(body)
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise _decode_error(exc, body) from exc
