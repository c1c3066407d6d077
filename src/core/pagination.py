"""Limit/offset parameters for listing calls."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import get_settings
from src.core.errors import InvalidInputError


class Pagination(BaseModel):
    """Validated limit/offset pair."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(ge=1)
    offset: int = Field(default=0, ge=0)

    @classmethod
    def resolve(cls, op: str, limit: int | None, offset: int | None) -> Pagination:
        """
        Apply defaults and validate.

        A missing or zero limit falls back to the configured default; a limit
        above the configured maximum is clamped to it. Negative values are
        rejected with InvalidInputError.
        """
        settings = get_settings()
        if not limit:
            limit = settings.default_page_limit
        elif limit > settings.max_page_limit:
            limit = settings.max_page_limit
        try:
            return cls(limit=limit, offset=offset or 0)
        except ValidationError as exc:
            raise InvalidInputError(op, "invalid pagination parameters") from exc
