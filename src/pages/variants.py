"""
Storage descriptors for the flat page variants.

A PageVariant says, for one content type, which table holds the variant row,
which columns belong to it, and which read model a joined row decodes into.
The question variant is deeper (three tables) and lives in src/questions/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError
from sqlalchemy import Select, select

from src.core.enums import ContentType
from src.core.errors import ScanFailureError, UnsupportedContentTypeError
from src.db.models import (
    AbstractPage,
    Base,
    DocumentPageContent,
    ImagePageContent,
    VideoPageContent,
)
from src.pages.models import (
    CreateDocumentPage,
    CreateImagePage,
    CreatePage,
    CreateVideoPage,
    DocumentPage,
    ImagePage,
    PageEnvelope,
    UpdateDocumentPage,
    UpdateImagePage,
    UpdatePage,
    UpdateVideoPage,
    VariantPage,
    VideoPage,
)

ENVELOPE_COLUMNS = tuple(PageEnvelope.model_fields)


@dataclass(frozen=True)
class PageVariant:
    """How one content type is stored and read back."""

    content_type: ContentType
    table: type[Base]
    fields: tuple[str, ...]
    read_model: type[VariantPage]
    create_model: type[CreatePage]
    update_model: type[UpdatePage]

    def new_row(self, page_id: int, payload: CreatePage) -> Base:
        """Variant row keyed by the envelope's identity."""
        return self.table(abstractpage_id=page_id, **payload.variant_values())

    def select_by_id(self, page_id: int) -> Select:
        """Envelope joined with this variant, restricted to this content type."""
        return (
            select(AbstractPage, self.table)
            .join(self.table, self.table.abstractpage_id == AbstractPage.id)
            .where(
                AbstractPage.id == page_id,
                AbstractPage.content_type == self.content_type.value,
            )
        )

    def decode(self, op: str, envelope: AbstractPage, detail: Base) -> VariantPage:
        """Build the read model from a joined row."""
        data: dict[str, Any] = {name: getattr(envelope, name) for name in ENVELOPE_COLUMNS}
        data.update({name: getattr(detail, name) for name in self.fields})
        try:
            return self.read_model.model_validate(data)
        except ValidationError as exc:
            raise ScanFailureError(op, f"malformed {self.content_type.value} page row") from exc


IMAGE = PageVariant(
    content_type=ContentType.IMAGE,
    table=ImagePageContent,
    fields=("image_file_url", "image_name"),
    read_model=ImagePage,
    create_model=CreateImagePage,
    update_model=UpdateImagePage,
)

VIDEO = PageVariant(
    content_type=ContentType.VIDEO,
    table=VideoPageContent,
    fields=("video_file_url", "video_name"),
    read_model=VideoPage,
    create_model=CreateVideoPage,
    update_model=UpdateVideoPage,
)

DOCUMENT = PageVariant(
    content_type=ContentType.DOCUMENT,
    table=DocumentPageContent,
    fields=("document_file_url", "document_name"),
    read_model=DocumentPage,
    create_model=CreateDocumentPage,
    update_model=UpdateDocumentPage,
)

VARIANTS: dict[ContentType, PageVariant] = {
    variant.content_type: variant for variant in (IMAGE, VIDEO, DOCUMENT)
}


def variant_for(op: str, content_type: ContentType) -> PageVariant:
    """Descriptor for a flat content type."""
    try:
        return VARIANTS[content_type]
    except KeyError as exc:
        raise UnsupportedContentTypeError(
            op, f"no flat variant for content type {content_type.value!r}"
        ) from exc
