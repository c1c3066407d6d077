"""Turning untyped input into pydantic payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.core.errors import InvalidInputError

ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_errors(exc: ValidationError) -> str:
    """Short, caller-safe summary: ``field: message`` pairs."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def coerce_payload(op: str, model: type[ModelT], payload: ModelT | Mapping[str, Any]) -> ModelT:
    """
    Accept an already-built payload of the right class or validate a mapping.

    A payload of some other model class is rejected rather than re-read, so
    a video payload handed to the question repository fails loudly.
    """
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        raise InvalidInputError(
            op, f"expected {model.__name__}, got {type(payload).__name__}"
        )
    if not isinstance(payload, Mapping):
        raise InvalidInputError(op, f"expected a mapping, got {type(payload).__name__}")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidInputError(op, describe_errors(exc)) from exc
