"""
In-process stores, for offline use and tests.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from ..errors import StoreError
from ..types import Annotation, AnnotationDraft, ChatMessage, DocumentContext
from .base import AnnotationStore, DocumentStore, MessageStore
from .pymupdf import inspect_pdf

logger = logging.getLogger(__name__)


class InMemoryAnnotationStore(AnnotationStore):
    """Annotation table held in a dict keyed by id."""

    def __init__(self, annotations: Optional[List[Annotation]] = None):
        self._records: Dict[str, Annotation] = {a.id: a for a in annotations or []}

    @property
    def records(self) -> List[Annotation]:
        return list(self._records.values())

    async def list(self, document_id: str, page_number: int) -> List[Annotation]:
        return [
            a
            for a in self._records.values()
            if a.document_id == document_id and a.page_number == page_number
        ]

    async def insert(self, draft: AnnotationDraft) -> Annotation:
        annotation = Annotation.from_draft(uuid.uuid4().hex, draft)
        self._records[annotation.id] = annotation
        return annotation

    async def delete(self, annotation_id: str) -> None:
        if self._records.pop(annotation_id, None) is None:
            raise StoreError("delete", f"No annotation with id {annotation_id}")


class InMemoryDocumentStore(DocumentStore):
    """Documents kept as raw bytes in memory."""

    def __init__(self):
        self._documents: List[DocumentContext] = []
        self._data: Dict[str, bytes] = {}

    async def list_documents(self) -> List[DocumentContext]:
        return list(self._documents)

    async def upload(self, name: str, data: bytes) -> DocumentContext:
        text, page_count = inspect_pdf(data)
        document_id = uuid.uuid4().hex
        document = DocumentContext(
            document_id=document_id,
            source=f"memory://{document_id}/{name}",
            page_count=page_count,
            name=name,
            text_content=text,
        )
        self._documents.insert(0, document)
        self._data[document_id] = data
        logger.info("Stored %s (%d pages) in memory", name, page_count)
        return document

    async def fetch(self, document: DocumentContext) -> bytes:
        try:
            return self._data[document.document_id]
        except KeyError as exc:
            raise StoreError("fetch", f"Unknown document {document.document_id}") from exc


class InMemoryMessageStore(MessageStore):
    """Chat history kept per document id."""

    def __init__(self):
        self._messages: Dict[str, List[ChatMessage]] = {}

    async def list_messages(self, document_id: str) -> List[ChatMessage]:
        return list(self._messages.get(document_id, []))

    async def add_message(self, document_id: str, message: ChatMessage) -> None:
        if message.id is None:
            message.id = uuid.uuid4().hex
        self._messages.setdefault(document_id, []).append(message)
