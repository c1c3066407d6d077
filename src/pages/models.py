"""
Page domain models.

Every page is an envelope (PageEnvelope) plus exactly one variant. The kind
of a payload is fixed by its class (``kind``), never by a free-form field, so
an image payload cannot be written into the video table by mistake.

Three shapes per variant:
- read model (ImagePage, ...): what get_by_id returns
- create payload (CreateImagePage, ...): envelope fields + all variant fields
- update payload (UpdateImagePage, ...): id + modifier + optional variant fields

Fields left as None on an update payload keep their stored value.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.core.enums import ContentType
from src.core.errors import InvalidInputError, UnsupportedContentTypeError
from src.core.validation import coerce_payload

# ========================================
# Read models
# ========================================


class PageEnvelope(BaseModel):
    """Shared page metadata, without variant payload."""

    model_config = ConfigDict(frozen=True)

    id: int
    lesson_id: int
    created_by: str
    last_modified_by: str
    created_at: datetime
    modified: datetime
    content_type: ContentType


class VariantPage(PageEnvelope):
    """Envelope joined with its variant; the stored discriminator must match the class."""

    kind: ClassVar[ContentType]

    @model_validator(mode="after")
    def _discriminator_matches(self) -> VariantPage:
        if self.content_type is not self.kind:
            raise ValueError(
                f"envelope content_type {self.content_type.value!r} "
                f"does not match variant {self.kind.value!r}"
            )
        return self

    @property
    def envelope(self) -> PageEnvelope:
        """The common fields alone."""
        return PageEnvelope(**{name: getattr(self, name) for name in PageEnvelope.model_fields})


class ImagePage(VariantPage):
    kind = ContentType.IMAGE

    image_file_url: str
    image_name: str


class VideoPage(VariantPage):
    kind = ContentType.VIDEO

    video_file_url: str
    video_name: str


class DocumentPage(VariantPage):
    kind = ContentType.DOCUMENT

    document_file_url: str
    document_name: str


# ========================================
# Create payloads
# ========================================


class CreatePage(BaseModel):
    """Envelope fields every create payload carries."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    kind: ClassVar[ContentType]
    variant_fields: ClassVar[tuple[str, ...]] = ()

    lesson_id: int = Field(gt=0)
    created_by: str = Field(min_length=1)
    last_modified_by: str = Field(min_length=1)

    @property
    def content_type(self) -> ContentType:
        return self.kind

    def variant_values(self) -> dict[str, Any]:
        """Column values for the variant row."""
        return {name: getattr(self, name) for name in self.variant_fields}


class CreateImagePage(CreatePage):
    kind = ContentType.IMAGE
    variant_fields = ("image_file_url", "image_name")

    image_file_url: str = Field(min_length=1)
    image_name: str = Field(min_length=1)


class CreateVideoPage(CreatePage):
    kind = ContentType.VIDEO
    variant_fields = ("video_file_url", "video_name")

    video_file_url: str = Field(min_length=1)
    video_name: str = Field(min_length=1)


class CreateDocumentPage(CreatePage):
    kind = ContentType.DOCUMENT
    variant_fields = ("document_file_url", "document_name")

    document_file_url: str = Field(min_length=1)
    document_name: str = Field(min_length=1)


# ========================================
# Update payloads
# ========================================


class UpdatePage(BaseModel):
    """Identity and modifier every update payload carries."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    kind: ClassVar[ContentType]
    variant_fields: ClassVar[tuple[str, ...]] = ()

    id: int = Field(gt=0)
    last_modified_by: str = Field(min_length=1)

    @property
    def content_type(self) -> ContentType:
        return self.kind

    def variant_changes(self) -> dict[str, Any]:
        """Only the variant fields that were explicitly set."""
        values = {name: getattr(self, name) for name in self.variant_fields}
        return {name: value for name, value in values.items() if value is not None}


class UpdateImagePage(UpdatePage):
    kind = ContentType.IMAGE
    variant_fields = ("image_file_url", "image_name")

    image_file_url: str | None = Field(default=None, min_length=1)
    image_name: str | None = Field(default=None, min_length=1)


class UpdateVideoPage(UpdatePage):
    kind = ContentType.VIDEO
    variant_fields = ("video_file_url", "video_name")

    video_file_url: str | None = Field(default=None, min_length=1)
    video_name: str | None = Field(default=None, min_length=1)


class UpdateDocumentPage(UpdatePage):
    kind = ContentType.DOCUMENT
    variant_fields = ("document_file_url", "document_name")

    document_file_url: str | None = Field(default=None, min_length=1)
    document_name: str | None = Field(default=None, min_length=1)


# ========================================
# Parsing untyped input
# ========================================


def resolve_content_type(op: str, value: ContentType | str) -> ContentType:
    """Map a raw discriminator onto ContentType or fail with UnsupportedContentTypeError."""
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(value)
    except ValueError as exc:
        raise UnsupportedContentTypeError(op, f"unsupported content type {value!r}") from exc


def _create_models() -> dict[ContentType, type[CreatePage]]:
    # Both modules import this one, so they are resolved at call time.
    from src.pages.variants import VARIANTS
    from src.questions.models import CreateQuestionPage

    models = {kind: variant.create_model for kind, variant in VARIANTS.items()}
    models[ContentType.QUESTION] = CreateQuestionPage
    return models


def _update_models() -> dict[ContentType, type[UpdatePage]]:
    from src.pages.variants import VARIANTS
    from src.questions.models import UpdateQuestionPage

    models = {kind: variant.update_model for kind, variant in VARIANTS.items()}
    models[ContentType.QUESTION] = UpdateQuestionPage
    return models


def _parse(op: str, models: dict[ContentType, type[BaseModel]], data: Mapping[str, Any]) -> Any:
    fields = dict(data)
    if "content_type" not in fields:
        raise InvalidInputError(op, "content_type is required")
    content_type = resolve_content_type(op, fields.pop("content_type"))
    return coerce_payload(op, models[content_type], fields)


def parse_create_page(data: Mapping[str, Any]) -> CreatePage:
    """Validate a raw create request (``content_type`` selects the payload class)."""
    return _parse("pages.parse_create_page", _create_models(), data)


def parse_update_page(data: Mapping[str, Any]) -> UpdatePage:
    """Validate a raw update request (``content_type`` selects the payload class)."""
    return _parse("pages.parse_update_page", _update_models(), data)
