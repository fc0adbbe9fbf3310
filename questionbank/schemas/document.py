from typing import Any

from questionbank.schemas.base import CamelModel


class DocumentResponse(CamelModel):
    id: str
    filename: str
    type: str
    subject: str | None
    content: str | None
    processing_status: str
    metadata: dict[str, Any] | None
    created_at: str


class DocumentListResponse(CamelModel):
    documents: list[DocumentResponse]
