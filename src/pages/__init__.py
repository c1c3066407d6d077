"""
Lesson pages: a shared envelope plus one content variant per page.

The repository lives in src.pages.repository (it depends on src.questions,
which itself builds on these models).
"""

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
    VideoPage,
    parse_create_page,
    parse_update_page,
)

__all__ = [
    "CreateDocumentPage",
    "CreateImagePage",
    "CreatePage",
    "CreateVideoPage",
    "DocumentPage",
    "ImagePage",
    "PageEnvelope",
    "UpdateDocumentPage",
    "UpdateImagePage",
    "UpdatePage",
    "UpdateVideoPage",
    "VideoPage",
    "parse_create_page",
    "parse_update_page",
]
