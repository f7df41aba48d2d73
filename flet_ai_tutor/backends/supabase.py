"""
Supabase backends - annotation, document and message tables plus PDF storage.
"""

from __future__ import annotations

import logging
import time
from typing import Any, List, Optional

import httpx
from supabase import AsyncClient, acreate_client

from ..config import Settings
from ..errors import StoreError
from ..types import Annotation, AnnotationDraft, ChatMessage, DocumentContext
from .base import AnnotationStore, DocumentStore, MessageStore
from .pymupdf import inspect_pdf

logger = logging.getLogger(__name__)

ANNOTATIONS_TABLE = "annotations"
DOCUMENTS_TABLE = "pdf_files"
MESSAGES_TABLE = "messages"


async def create_supabase_client(settings: Settings) -> AsyncClient:
    """Create the async Supabase client from settings."""
    settings.require_supabase()
    return await acreate_client(settings.supabase_url, settings.supabase_key)


async def _execute(operation: str, query: Any) -> List[dict]:
    """Run a PostgREST query, translating any failure into StoreError."""
    try:
        response = await query.execute()
    except Exception as exc:
        logger.error("Supabase %s failed: %s", operation, exc)
        raise StoreError(operation, f"{operation} failed: {exc}") from exc
    return list(response.data or [])


class SupabaseAnnotationStore(AnnotationStore):
    """Annotations in the `annotations` table."""

    def __init__(self, client: AsyncClient, table: str = ANNOTATIONS_TABLE):
        self._client = client
        self._table = table

    async def list(self, document_id: str, page_number: int) -> List[Annotation]:
        rows = await _execute(
            "list",
            self._client.table(self._table)
            .select("*")
            .eq("pdf_id", document_id)
            .eq("page_number", page_number),
        )
        return [Annotation.from_record(row) for row in rows]

    async def insert(self, draft: AnnotationDraft) -> Annotation:
        rows = await _execute(
            "insert", self._client.table(self._table).insert(draft.to_record())
        )
        if not rows:
            raise StoreError("insert", "insert returned no record")
        annotation = Annotation.from_record(rows[0])
        logger.info("Inserted annotation %s on page %d", annotation.id, annotation.page_number)
        return annotation

    async def delete(self, annotation_id: str) -> None:
        await _execute(
            "delete", self._client.table(self._table).delete().eq("id", annotation_id)
        )
        logger.info("Deleted annotation %s", annotation_id)


class SupabaseDocumentStore(DocumentStore):
    """PDF files in a storage bucket, metadata in the `pdf_files` table."""

    def __init__(
        self,
        client: AsyncClient,
        bucket: str = "pdfs",
        user_id: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
        table: str = DOCUMENTS_TABLE,
    ):
        self._client = client
        self._bucket = bucket
        self._user_id = user_id
        self._http = http
        self._table = table

    async def list_documents(self) -> List[DocumentContext]:
        query = self._client.table(self._table).select("*")
        if self._user_id:
            query = query.eq("user_id", self._user_id)
        rows = await _execute("list_documents", query.order("created_at", desc=True))
        return [DocumentContext.from_record(row) for row in rows]

    async def upload(self, name: str, data: bytes) -> DocumentContext:
        text, page_count = inspect_pdf(data)
        key = f"{self._user_id or 'anonymous'}/{int(time.time() * 1000)}-{name}"

        bucket = self._client.storage.from_(self._bucket)
        try:
            await bucket.upload(key, data, {"content-type": "application/pdf"})
            url = await bucket.get_public_url(key)
        except Exception as exc:
            logger.error("Uploading %s failed: %s", name, exc)
            raise StoreError("upload", f"upload failed: {exc}") from exc

        record = {
            "name": name,
            "url": url,
            "text_content": text,
            "page_count": page_count,
        }
        if self._user_id:
            record["user_id"] = self._user_id
        rows = await _execute("upload", self._client.table(self._table).insert(record))
        if not rows:
            raise StoreError("upload", "insert returned no record")
        logger.info("Uploaded %s (%d pages)", name, page_count)
        return DocumentContext.from_record(rows[0])

    async def fetch(self, document: DocumentContext) -> bytes:
        http = self._http or httpx.AsyncClient()
        try:
            response = await http.get(document.source, follow_redirects=True)
            response.raise_for_status()
            return response.content
        except httpx.HTTPError as exc:
            logger.error("Downloading %s failed: %s", document.source, exc)
            raise StoreError("fetch", f"download failed: {exc}") from exc
        finally:
            if self._http is None:
                await http.aclose()


class SupabaseMessageStore(MessageStore):
    """Chat history in the `messages` table.

    Messages are only persisted for a known user; without one the history
    lives for the session only.
    """

    def __init__(
        self,
        client: AsyncClient,
        user_id: Optional[str] = None,
        table: str = MESSAGES_TABLE,
    ):
        self._client = client
        self._user_id = user_id
        self._table = table

    async def list_messages(self, document_id: str) -> List[ChatMessage]:
        if not self._user_id:
            return []
        rows = await _execute(
            "list_messages",
            self._client.table(self._table)
            .select("*")
            .eq("user_id", self._user_id)
            .eq("pdf_id", document_id)
            .order("created_at", desc=False),
        )
        return [
            ChatMessage(role=row["role"], content=row["content"], id=str(row["id"]))
            for row in rows
        ]

    async def add_message(self, document_id: str, message: ChatMessage) -> None:
        if not self._user_id:
            return
        await _execute(
            "add_message",
            self._client.table(self._table).insert(
                {
                    "user_id": self._user_id,
                    "pdf_id": document_id,
                    "role": message.role,
                    "content": message.content,
                }
            ),
        )
